"""
contract.py - A single field read from a contract

Monitors the value returned by one read accessor of a contract, called with
fixed parameters. For a mapping-style accessor the parameters select the
entry:

    ContractFieldMonitor(registry.balances, params=(alice,))

When the accessor returns a record (a struct or multiple return values),
a dotted keypath selects the scalar to watch:

    ContractFieldMonitor(pool.slot0, keypath="sqrtPriceX96")
    ContractFieldMonitor(vault.position, params=(alice,), keypath="collateral.amount")
"""

from __future__ import annotations
from collections.abc import Mapping
import json
from typing import Any, Optional, Sequence

from ..core import (
    Value, ValueAccessor, ValueKind,
    value_kind, is_big_integer, resolve, shorten_address,
    KeypathResolutionError, UnsupportedComparisonError,
)
from ..equality import structural_equals
from ..monitor import StateMonitor


def _json_default(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    if isinstance(value, Mapping):
        return dict(value)
    return str(value)


def _descend(current: Any, segment: str) -> Any:
    """Return the child of current named by segment, or None if absent."""
    if isinstance(current, Mapping):
        if segment in current:
            return current[segment]
        if segment.isdigit():
            return current.get(int(segment))
        return None
    if isinstance(current, (list, tuple)) and segment.isdigit():
        index = int(segment)
        if index < len(current):
            return current[index]
    # namedtuples and attribute-style records
    return getattr(current, segment, None)


def resolve_keypath(keypath: str, value: Any) -> Any:
    """
    Descend value one dotted keypath segment at a time.

    Raises:
        KeypathResolutionError: At the first segment that resolves to nothing.
    """
    current = value
    for segment in keypath.split("."):
        current = _descend(current, segment)
        if current is None:
            raise KeypathResolutionError(
                f"Error resolving keypath({keypath}) - Got undefined at .{segment}",
                keypath=keypath,
                segment=segment,
            )
    return current


class ContractFieldMonitor(StateMonitor):
    """
    Monitors the value of one contract accessor.

    Attributes:
        accessor: Read accessor (sync or async) returning the field
        params: Fixed parameters passed to the accessor on every fetch
        keypath: Dotted path into a record result (required when the result is a record)
        address: Contract address, used for the monitor identity
    """

    KIND = "contract-state"

    def __init__(
        self,
        accessor: ValueAccessor,
        params: Sequence[Any] = (),
        keypath: Optional[str] = None,
        address: Optional[str] = None,
        initial_value: Value = None,
        verbose: Optional[bool] = None,
    ):
        super().__init__(initial_value, verbose=verbose)
        self.accessor = accessor
        self.params = tuple(params)
        self.keypath = keypath
        if address is None:
            # bound accessors of a contract object carry its address
            address = getattr(getattr(accessor, "__self__", None), "address", None)
        self.address = address

    def __str__(self) -> str:
        if self.address is None:
            return "contract(?)"
        return f"contract({shorten_address(self.address)})"

    async def fetch_value(self) -> Value:
        value = await resolve(self.accessor(*self.params))
        if value_kind(value) is ValueKind.RECORD:
            if self.keypath is None:
                raise KeypathResolutionError(
                    f"{self}: Expected non-null keypath for a contract field holding a record"
                )
            return resolve_keypath(self.keypath, value)
        return value

    def coerce_expectation(self, value: Any) -> Value:
        # Contract fields can be of any kind; compare exactly what was given.
        return value

    def equals(self, a: Value, b: Value) -> bool:
        return structural_equals(a, b)

    def lte(self, a: Value, b: Value) -> bool:
        if is_big_integer(a) and is_big_integer(b):
            return a <= b
        raise UnsupportedComparisonError(
            f"{self}: Unsupported operation: {self.serialize_value(a)} <= {self.serialize_value(b)}"
        )

    def serialize_value(self, value: Value) -> str:
        return json.dumps(value, default=_json_default)
