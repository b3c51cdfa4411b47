"""
wallet.py - Native-currency balance of one address, with gas compensation

Every mutating call a test sends from a wallet also costs that wallet gas.
WalletMonitor executes those calls itself, adds up the gas they cost, and
subtracts the total from every expected balance, so a test can assert
"the balance fell by exactly the amount sent" without doing gas arithmetic.

Example:
    alice = WalletMonitor(chain, "0xA11cE...")
    state = DappState(wallets={"alice": alice})
    await state.reset()

    await alice.call(state, vault.deposit, {"value": eth_to_wei(1)})
    await alice.expect_falls_by(eth_to_wei(1))
"""

from __future__ import annotations
from collections.abc import Mapping
from typing import Any, Awaitable, Callable, Optional, TYPE_CHECKING

from ..core import BalanceReader, Value, shorten_address, wei_to_eth
from ..gas import gas_for_call, gas_for_receipt
from ..monitor import StateMonitor

if TYPE_CHECKING:
    from ..state import DappState


class WalletMonitor(StateMonitor):
    """
    Tracks the balance (in wei) of an address and the gas it has spent.

    Attributes:
        reader: Balance and gas price source
        address: Address whose balance is monitored
        expected_gas: Wei spent on gas since the last reset (None if nothing was charged)
    """

    KIND = "eth-wallet"

    def __init__(
        self,
        reader: BalanceReader,
        address: str,
        initial_balance: Optional[int] = None,
        verbose: Optional[bool] = None,
    ):
        super().__init__(initial_balance, verbose=verbose)
        self.reader = reader
        self.address = address
        self.expected_gas: Optional[int] = None

    def __str__(self) -> str:
        return f"eth({shorten_address(self.address)})"

    async def fetch_value(self) -> int:
        return int(await self.reader.get_balance(self.address))

    async def reset(self, to_value: Value = None) -> None:
        await super().reset(to_value)
        self.expected_gas = None

    def adjust_expectation(self, value: int) -> int:
        return value - self.expected_gas if self.expected_gas is not None else value

    def expect_gas(self, amount: int) -> None:
        """Record that this wallet spent amount wei on gas."""
        if self.expected_gas is None:
            self.expected_gas = 0
        self.expected_gas += amount

    def _with_sender(self, params: tuple) -> list:
        """Attribute the call to this wallet through a trailing options mapping."""
        params = list(params)
        if params and isinstance(params[-1], Mapping):
            params[-1] = {**params[-1], "from": self.address}
        else:
            params.append({"from": self.address})
        return params

    async def call(
        self,
        state: "DappState",
        operation: Callable[..., Awaitable[Any]],
        *params: Any,
    ) -> Any:
        """
        Send a mutating call from this wallet and account for its gas.

        The aggregator must be clean first: stacking a new call on top of
        un-asserted changes is rejected before the operation runs.

        Args:
            state: The DappState that owns this test's monitors
            operation: Coroutine function performing the call
            *params: Call parameters; a trailing mapping is treated as call options

        Returns:
            The operation's result

        Raises:
            DirtyStateError: If un-asserted state changes are pending.
        """
        await state.check_dirty()
        state.assert_no_exceptions()

        try:
            result = await operation(*self._with_sender(params))
        except Exception as exc:
            # Reverted-but-mined calls still charge gas.
            receipt = getattr(exc, "receipt", None)
            if receipt is not None:
                gas_cost = await gas_for_receipt(receipt, self.reader)
                self.expect_gas(gas_cost)
                if self.verbose:
                    print(f"✗ {self}: call reverted, charged {gas_cost} wei gas")
            raise

        gas_cost = await gas_for_call(result, self.reader)
        self.expect_gas(gas_cost)
        if self.verbose:
            print(f"✓ {self}: charged {gas_cost} wei gas ({wei_to_eth(gas_cost)} eth)")
        return result
