"""
conftest.py - Shared pytest fixtures for statewatch tests

Provides common fixtures used across unit and functional tests:
- A funded in-memory chain with a token and a vault contract
- Monitors and a DappState wired to them
"""

import pytest

from statewatch import (
    DappState,
    WalletMonitor,
    TokenBalanceMonitor,
    ContractFieldMonitor,
)

from tests.fake_chain import ALICE, BOB, TOKEN_ADDRESS, VAULT_ADDRESS
from tests.fake_chain import FakeChain, FakeToken, FakeVault


# =============================================================================
# CHAIN FIXTURES
# =============================================================================

@pytest.fixture
def chain():
    """Chain where alice and bob each hold 100 wei and every call costs 2 wei of gas."""
    return FakeChain(balances={ALICE: 100, BOB: 100}, gas_price=1, gas_per_call=2)


@pytest.fixture
def token(chain):
    """Token where alice holds 1,000 units."""
    return FakeToken(chain, TOKEN_ADDRESS, balances={ALICE: 1000})


@pytest.fixture
def vault(chain):
    """Vault contract owned by alice."""
    return FakeVault(chain, VAULT_ADDRESS, owner=ALICE)


# =============================================================================
# MONITOR FIXTURES
# =============================================================================

@pytest.fixture
def alice_wallet(chain):
    return WalletMonitor(chain, ALICE)


@pytest.fixture
def bob_wallet(chain):
    return WalletMonitor(chain, BOB)


@pytest.fixture
def state(chain, token, vault, alice_wallet, bob_wallet):
    """DappState tracking both wallets, alice's token balance and the vault."""
    return DappState(
        wallets={"alice": alice_wallet, "bob": bob_wallet},
        erc20={"alice_token": TokenBalanceMonitor(token, ALICE)},
        contract={
            "owner": ContractFieldMonitor(vault.owner),
            "total_deposits": ContractFieldMonitor(vault.total_deposits),
            "alice_collateral": ContractFieldMonitor(
                vault.position, params=(ALICE,), keypath="collateral.amount",
            ),
        },
    )
