"""
gas.py - Gas cost of mined transactions

A mutating call charges its sender gasUsed * gasPrice. Receipts may be plain
mappings or attribute-style objects, and may or may not report the price
that was actually paid; when they don't, the current gas price is read from
the balance reader.
"""

from __future__ import annotations
from collections.abc import Mapping
from typing import Any, Optional

from .core import BalanceReader, as_wei


def _receipt_field(receipt: Any, *names: str) -> Optional[Any]:
    """Read the first present field among names from a mapping or object receipt."""
    for name in names:
        if isinstance(receipt, Mapping):
            if receipt.get(name) is not None:
                return receipt[name]
        elif getattr(receipt, name, None) is not None:
            return getattr(receipt, name)
    return None


def receipt_from(result: Any) -> Any:
    """
    Return the receipt attached to a call result.

    Raises:
        ValueError: If the result exposes no receipt.
    """
    receipt = _receipt_field(result, "receipt")
    if receipt is None:
        raise ValueError(f"Call result has no receipt: {result!r}")
    return receipt


async def gas_for_receipt(receipt: Any, reader: BalanceReader) -> int:
    """
    Compute the wei charged for a mined transaction.

    Args:
        receipt: Transaction receipt exposing gasUsed (or gas_used)
        reader: Source of the current gas price when the receipt has none

    Returns:
        gas used multiplied by the gas price, in wei

    Raises:
        ValueError: If the receipt does not report gas used.
    """
    gas_used = _receipt_field(receipt, "gasUsed", "gas_used")
    if gas_used is None:
        raise ValueError(f"Receipt does not report gas used: {receipt!r}")
    gas_price = _receipt_field(receipt, "effectiveGasPrice", "effective_gas_price")
    if gas_price is None:
        gas_price = await reader.gas_price()
    return as_wei(gas_used) * as_wei(gas_price)


async def gas_for_call(result: Any, reader: BalanceReader) -> int:
    """Compute the wei charged for the transaction behind a call result."""
    return await gas_for_receipt(receipt_from(result), reader)
