"""
token.py - Fungible token balance of one address on one token contract
"""

from __future__ import annotations
from typing import Optional

from ..core import TokenContract, shorten_address
from ..monitor import StateMonitor


class TokenBalanceMonitor(StateMonitor):
    """Asserts how the token balance of an address changes on a token contract."""

    KIND = "erc20-balance"

    def __init__(
        self,
        token: TokenContract,
        address: str,
        initial_balance: Optional[int] = None,
        verbose: Optional[bool] = None,
    ):
        super().__init__(initial_balance, verbose=verbose)
        self.token = token
        self.address = address

    def __str__(self) -> str:
        return (f"erc20(contract={shorten_address(self.token.address)},"
                f"wallet={shorten_address(self.address)})")

    async def fetch_value(self) -> int:
        return int(await self.token.balance_of(self.address))
