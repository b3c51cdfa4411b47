"""
statewatch - Catch un-asserted state changes in ledger tests

Declare which pieces of externally-held state matter to a test (account
balances, token balances, contract fields); every change the test does not
explicitly assert is reported.

Usage:
    from statewatch import DappState, WalletMonitor, ContractFieldMonitor, eth_to_wei

    alice = WalletMonitor(chain, alice_address)
    state = DappState(
        wallets={"alice": alice},
        contract={"owner": ContractFieldMonitor(vault.owner, address=vault.address)},
    )

    await state.reset()

    # Calls go through a wallet so their gas is accounted for
    await alice.call(state, vault.deposit, {"value": eth_to_wei(1)})
    await alice.expect_falls_by(eth_to_wei(1))

    # Anything else that moved is reported here
    await state.check_dirty()
    state.assert_no_exceptions()
"""

# Core types
from .core import (
    ValueKind,
    value_kind,
    BalanceReader,
    TokenContract,
    MonitorError,
    FetchError,
    DirtyStateError,
    TypeMismatchError,
    UnsupportedComparisonError,
    KeypathResolutionError,
    AssertionMismatchError,
    as_wei,
    eth_to_wei,
    wei_to_eth,
    shorten_address,
    WEI_PER_ETHER,
    POSITIONAL_DUPLICATE_KEYS,
)

# Structural equality
from .equality import structural_equals

# Gas accounting
from .gas import gas_for_receipt, gas_for_call

# Monitor base
from .monitor import Monitor, MonitorState, StateMonitor

# Monitor kinds
from .monitors import (
    WalletMonitor,
    TokenBalanceMonitor,
    ContractFieldMonitor,
    resolve_keypath,
)

# Aggregation
from .state import DappState, MonitorGroup, DirtyStateFinding

__all__ = [
    # Core
    'ValueKind', 'value_kind', 'BalanceReader', 'TokenContract',
    'MonitorError', 'FetchError', 'DirtyStateError', 'TypeMismatchError',
    'UnsupportedComparisonError', 'KeypathResolutionError', 'AssertionMismatchError',
    'as_wei', 'eth_to_wei', 'wei_to_eth', 'shorten_address',
    'WEI_PER_ETHER', 'POSITIONAL_DUPLICATE_KEYS',
    # Equality
    'structural_equals',
    # Gas
    'gas_for_receipt', 'gas_for_call',
    # Monitors
    'Monitor', 'MonitorState', 'StateMonitor',
    'WalletMonitor', 'TokenBalanceMonitor', 'ContractFieldMonitor', 'resolve_keypath',
    # Aggregation
    'DappState', 'MonitorGroup', 'DirtyStateFinding',
]

__version__ = '1.0.0'
