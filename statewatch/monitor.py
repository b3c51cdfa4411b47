"""
monitor.py - Tracking one external value against its last accepted value

A monitor remembers the last value a test accepted (via reset() or a passing
expectation) and compares it with the live value on demand. A monitor whose
live value moved without being asserted is dirty until the next reset().

To add a monitor kind:
    - Subclass StateMonitor and override fetch_value() to read the live value.
    - Override equals() / lte() / serialize_value() / coerce_expectation()
      when the value is not a big integer.
    - Override adjust_expectation() to transform expected values before
      comparison (the wallet monitor subtracts gas here).
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Optional, Protocol, runtime_checkable

from .core import (
    Value, IntLike,
    value_kind, is_big_integer, as_wei, wei_to_eth,
    AssertionMismatchError, TypeMismatchError, UnsupportedComparisonError,
)


@dataclass
class MonitorState:
    """
    Accepted/drifted state shared by every monitor kind.

    Invariant: dirty implies dirty_value holds the drifted live value.
    """
    last_value: Value = None
    dirty: bool = False
    dirty_value: Value = None

    def accept(self, value: Value) -> None:
        """Accept value as the new baseline and clear any drift."""
        self.last_value = value
        self.dirty = False
        self.dirty_value = None

    def record_check(self, live_value: Value, drifted: bool) -> bool:
        """Record the outcome of a dirty check and return it."""
        self.dirty = drifted
        self.dirty_value = live_value if drifted else None
        return drifted


@runtime_checkable
class Monitor(Protocol):
    """Capability contract the aggregator relies on."""

    verbose: Optional[bool]

    @property
    def kind(self) -> str:
        ...

    @property
    def last_value(self) -> Value:
        ...

    @property
    def dirty_value(self) -> Value:
        ...

    async def reset(self, to_value: Value = None) -> None:
        ...

    async def check_dirty(self) -> bool:
        ...

    def serialize_value(self, value: Value) -> str:
        ...


class StateMonitor:
    """
    Base algorithm for a source of externally-held state.

    Subclasses supply fetch_value(); the default comparison methods assume
    the value is a big integer (int).

    Attributes:
        state: Embedded MonitorState record
        verbose: Print accepted changes (None = inherit from the owning DappState)
    """

    KIND = "state"

    def __init__(self, initial_value: Value = None, verbose: Optional[bool] = None):
        self.state = MonitorState(last_value=initial_value)
        self.verbose = verbose

    @property
    def kind(self) -> str:
        """Label used in aggregated diagnostics (e.g. "eth-wallet")."""
        return self.KIND

    @property
    def last_value(self) -> Value:
        return self.state.last_value

    @property
    def dirty(self) -> bool:
        return self.state.dirty

    @property
    def dirty_value(self) -> Value:
        return self.state.dirty_value

    def __str__(self) -> str:
        return self.kind

    # ========================================================================
    # FETCH / RESET / DIRTY CHECK
    # ========================================================================

    async def fetch_value(self) -> Value:
        """Read the live value from the external source. Subclasses must override."""
        raise NotImplementedError("Unimplemented.")

    async def reset(self, to_value: Value = None) -> None:
        """
        Accept a value as the new baseline.

        Args:
            to_value: Value to accept; the live value is fetched when omitted
        """
        if to_value is None:
            to_value = await self.fetch_value()
        self.state.accept(to_value)

    async def check_dirty(self) -> bool:
        """Return True if the live value differs from the last accepted value."""
        value = await self.fetch_value()
        return self.state.record_check(value, not self.equals(value, self.last_value))

    # ========================================================================
    # EXPECTATIONS
    # ========================================================================

    def coerce_expectation(self, value: Any) -> Value:
        """Convert a caller-supplied expected value to this monitor's value type."""
        return as_wei(value)

    def adjust_expectation(self, value: Value) -> Value:
        """Transform an expected value before it is compared. Identity by default."""
        return value

    async def expect(self, value: Any, message: Optional[str] = None) -> None:
        """
        Assert the live value matches value (after adjust_expectation).

        On success the live value becomes the new baseline, which also clears
        any drift this monitor reported.

        Raises:
            TypeMismatchError: If expected and live values are of different kinds.
            AssertionMismatchError: If the values differ.
        """
        actual = await self.fetch_value()
        expected = self.adjust_expectation(self.coerce_expectation(value))

        actual_kind = value_kind(actual)
        expected_kind = value_kind(expected)
        if actual_kind is not expected_kind:
            raise TypeMismatchError(
                f"{self}: Type mismatch in expectation: {actual_kind.value} != {expected_kind.value}"
            )

        if not self.equals(actual, expected):
            detail = ""
            if is_big_integer(actual) and is_big_integer(expected):
                difference = actual - expected
                detail = f" difference={difference} ({wei_to_eth(difference)} eth)"
                if self.verbose:
                    print(f"✗ {self}: difference detected: {actual} - {expected} = {difference}")
            raise AssertionMismatchError(
                self._failure_message(
                    f"expected={self.serialize_value(expected)}, "
                    f"actual={self.serialize_value(actual)}{detail}",
                    message,
                ),
                monitor=str(self),
                expected=expected,
                actual=actual,
            )

        if self.verbose:
            print(f"✓ {self}: changed from ({self.serialize_value(self.last_value)}) "
                  f"=> ({self.serialize_value(actual)})")
        await self.reset(actual)

    async def expect_only_consumed_gas(self, message: Optional[str] = None) -> None:
        """Assert the value did not change, apart from gas already accounted for."""
        await self.expect(self.last_value, message)

    async def expect_falls_by(self, amount: IntLike, message: Optional[str] = None) -> None:
        """Assert the value fell by amount since it was last accepted."""
        self._require_numeric_baseline("expect_falls_by")
        await self.expect(self.last_value - as_wei(amount), message)

    async def expect_rises_by(self, amount: IntLike, message: Optional[str] = None) -> None:
        """Assert the value rose by amount since it was last accepted."""
        self._require_numeric_baseline("expect_rises_by")
        await self.expect(self.last_value + as_wei(amount), message)

    async def expect_less_than(self, value: Any, message: Optional[str] = None) -> None:
        """
        Assert the live value is at most value.

        The live value is accepted as the new baseline on success, whatever
        it turned out to be.
        """
        bound = self.coerce_expectation(value)
        actual = await self.fetch_value()

        if not self.lte(actual, bound):
            raise AssertionMismatchError(
                self._failure_message(
                    f"expected<={self.serialize_value(bound)}, actual={self.serialize_value(actual)}",
                    message,
                ),
                monitor=str(self),
                expected=bound,
                actual=actual,
            )

        if self.verbose:
            print(f"✓ {self}: validated change ({self.serialize_value(self.last_value)}) "
                  f"=> ({self.serialize_value(actual)})")
        await self.reset(actual)

    # ========================================================================
    # COMPARISON (overridable)
    # ========================================================================

    def equals(self, a: Value, b: Value) -> bool:
        """Return True if a == b. Default implementation assumes big integers."""
        if not (is_big_integer(a) and is_big_integer(b)):
            raise TypeMismatchError(
                f"Types were not big integers when processing equals(..): "
                f"{type(a).__name__}, {type(b).__name__}"
            )
        return a == b

    def lte(self, a: Value, b: Value) -> bool:
        """Return True if a <= b. Default implementation assumes big integers."""
        if not (is_big_integer(a) and is_big_integer(b)):
            raise TypeMismatchError(
                f"Types were not big integers when processing lte(..): "
                f"{type(a).__name__}, {type(b).__name__}"
            )
        return a <= b

    def serialize_value(self, value: Value) -> str:
        return str(value)

    # ========================================================================
    # INTERNALS
    # ========================================================================

    def _require_numeric_baseline(self, operation: str) -> None:
        if not is_big_integer(self.last_value):
            raise UnsupportedComparisonError(
                f"{self}: {operation} requires a numeric baseline, "
                f"got {type(self.last_value).__name__}"
            )

    def _failure_message(self, detail: str, message: Optional[str]) -> str:
        text = f"{self}: Error validating state ({detail})"
        if message:
            text = f"{text} {message}"
        return text
