"""
Monitor kinds.

Each kind is a StateMonitor with its own value accessor and comparison rules:
- WalletMonitor: native-currency balance with gas compensation
- TokenBalanceMonitor: fungible token balance
- ContractFieldMonitor: any contract field, with keypath resolution
"""

from .wallet import WalletMonitor
from .token import TokenBalanceMonitor
from .contract import ContractFieldMonitor, resolve_keypath

__all__ = [
    'WalletMonitor',
    'TokenBalanceMonitor',
    'ContractFieldMonitor',
    'resolve_keypath',
]
