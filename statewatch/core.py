"""
Core types and pure functions for the state-monitoring engine.

This module provides the foundational pieces every monitor builds on:
1. Constants: unit conversion, address formatting, positional-duplicate keys
2. Value kinds: the closed set of shapes a fetched value may take
3. Exceptions: MonitorError and the domain-specific error types
4. Protocols: read-only collaborators (balance reader, token contract)
5. Helpers: big-integer coercion, ether/wei conversion, address shortening

Nothing in this module performs I/O. Collaborators that talk to the external
ledger are supplied by the caller and only described here as protocols.
"""

from __future__ import annotations
from collections.abc import Mapping
from decimal import Decimal, InvalidOperation, localcontext
from enum import Enum
import inspect
from typing import Any, Awaitable, Callable, FrozenSet, Optional, Protocol, Union, runtime_checkable


# ============================================================================
# CONSTANTS
# ============================================================================

# Smallest denomination per whole unit of the native currency.
WEI_PER_ETHER = 10 ** 18

# Number of trailing address characters shown in monitor identities.
ADDRESS_SUFFIX_LENGTH = 4

# Decoded call results expose tuple fields both by name and by position.
# Positions 0..3 are treated as duplicates of the named entries and skipped
# during record comparison. The cutoff is fixed at four positions.
POSITIONAL_DUPLICATE_KEYS = ("0", "1", "2", "3")

# Precision used for ether <-> wei conversions (wei amounts can exceed 28 digits).
_CONVERSION_PRECISION = 80


# ============================================================================
# TYPE ALIASES
# ============================================================================

# Anything a value accessor may hand back: int, primitive, or decoded record.
Value = Any

# Amount accepted wherever a big integer is expected.
IntLike = Union[int, Decimal, str]

# Callable returning a value directly or an awaitable resolving to one.
ValueAccessor = Callable[..., Union[Value, Awaitable[Value]]]


# ============================================================================
# VALUE KINDS
# ============================================================================

class ValueKind(Enum):
    """
    Closed classification of fetched values.

    BIG_INTEGER: arbitrary-precision integer (balances, counters, amounts).
    STRING/BOOLEAN/NUMBER/BYTES: primitive scalars compared by exact equality.
    RECORD: decoded structure (mapping, or list/tuple keyed by position).
    UNSUPPORTED: anything else, including None.
    """
    BIG_INTEGER = "big-integer"
    STRING = "string"
    BOOLEAN = "boolean"
    NUMBER = "number"
    BYTES = "bytes"
    RECORD = "record"
    UNSUPPORTED = "unsupported"


PRIMITIVE_KINDS: FrozenSet[ValueKind] = frozenset({
    ValueKind.STRING,
    ValueKind.BOOLEAN,
    ValueKind.NUMBER,
    ValueKind.BYTES,
})


def value_kind(value: Value) -> ValueKind:
    """
    Classify a fetched value into its ValueKind.

    bool is checked before int because bool is a subclass of int.
    """
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, int):
        return ValueKind.BIG_INTEGER
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, (float, Decimal)):
        return ValueKind.NUMBER
    if isinstance(value, (bytes, bytearray)):
        return ValueKind.BYTES
    if isinstance(value, (Mapping, list, tuple)):
        return ValueKind.RECORD
    return ValueKind.UNSUPPORTED


def is_big_integer(value: Value) -> bool:
    """Return True if value is an int (and not a bool)."""
    return value_kind(value) is ValueKind.BIG_INTEGER


# ============================================================================
# EXCEPTIONS
# ============================================================================

class MonitorError(Exception):
    """Base exception for all state-monitoring errors."""
    pass


class FetchError(MonitorError):
    """
    Raised by the aggregator when a monitor failed to fetch its live value.

    The underlying accessor failure is chained as __cause__.
    """

    def __init__(self, message: str, kind: str, name: str):
        super().__init__(message)
        self.kind = kind
        self.name = name


class DirtyStateError(MonitorError, AssertionError):
    """Raised when un-asserted state changes were queued by check_dirty()."""

    def __init__(self, message: str, findings: tuple = ()):
        super().__init__(message)
        self.findings = tuple(findings)


class TypeMismatchError(MonitorError, TypeError):
    """Raised when two values of different kinds are compared."""
    pass


class UnsupportedComparisonError(MonitorError, TypeError):
    """Raised when equality or ordering is requested on an unsupported kind."""
    pass


class KeypathResolutionError(MonitorError, LookupError):
    """Raised when a keypath is missing or one of its segments resolves to nothing."""

    def __init__(self, message: str, keypath: Optional[str] = None, segment: Optional[str] = None):
        super().__init__(message)
        self.keypath = keypath
        self.segment = segment


class AssertionMismatchError(MonitorError, AssertionError):
    """Raised when an expect*() predicate fails against the live value."""

    def __init__(self, message: str, monitor: str, expected: Value, actual: Value):
        super().__init__(message)
        self.monitor = monitor
        self.expected = expected
        self.actual = actual


# ============================================================================
# PROTOCOLS
# ============================================================================

@runtime_checkable
class BalanceReader(Protocol):
    """
    Read-only access to native-currency balances on the external ledger.

    Implementations typically wrap an RPC client. Both methods are coroutines.
    """

    async def get_balance(self, address: str) -> int:
        """Return the balance of address in wei."""
        ...

    async def gas_price(self) -> int:
        """Return the current gas price in wei per gas unit."""
        ...


@runtime_checkable
class TokenContract(Protocol):
    """Read-only view of a fungible token contract."""

    address: str

    async def balance_of(self, owner: str) -> int:
        """Return the token balance held by owner."""
        ...


# ============================================================================
# HELPERS
# ============================================================================

async def resolve(value: Union[Value, Awaitable[Value]]) -> Value:
    """Await value if it is awaitable, otherwise return it unchanged."""
    if inspect.isawaitable(value):
        return await value
    return value


def as_wei(value: IntLike) -> int:
    """
    Coerce an integer-like amount to int without going through float.

    Accepts int, integral Decimal, and decimal or 0x-prefixed hex strings.

    Raises:
        TypeMismatchError: If value is not integer-like.
    """
    if isinstance(value, bool):
        raise TypeMismatchError(f"Expected an integer amount, got bool ({value})")
    if isinstance(value, int):
        return value
    if isinstance(value, Decimal):
        if not value.is_finite() or value != value.to_integral_value():
            raise TypeMismatchError(f"Expected an integral amount, got {value}")
        return int(value)
    if isinstance(value, str):
        text = value.strip()
        try:
            if text.lower().startswith("0x"):
                return int(text, 16)
            return as_wei(Decimal(text))
        except (ValueError, InvalidOperation):
            raise TypeMismatchError(f"Expected an integer amount, got {value!r}") from None
    raise TypeMismatchError(f"Expected an integer amount, got {type(value).__name__} ({value!r})")


def eth_to_wei(amount: Union[int, float, Decimal, str]) -> int:
    """
    Convert a whole-currency amount to wei.

    Floats go through str() so 0.1 becomes exactly 10**17 wei.
    """
    with localcontext() as ctx:
        ctx.prec = _CONVERSION_PRECISION
        wei = Decimal(str(amount)) * WEI_PER_ETHER
        if wei != wei.to_integral_value():
            raise ValueError(f"{amount} ether is not a whole number of wei")
        return int(wei)


def wei_to_eth(amount: int) -> Decimal:
    """Convert wei to a whole-currency Decimal (exact, no rounding)."""
    with localcontext() as ctx:
        ctx.prec = _CONVERSION_PRECISION
        return Decimal(amount) / WEI_PER_ETHER


def shorten_address(address: str) -> str:
    """Return the last ADDRESS_SUFFIX_LENGTH characters of address, upper-cased."""
    return address[-ADDRESS_SUFFIX_LENGTH:].upper()
