"""
State management for the pair pool ledgers
"""

from .balances import AssetLedger, BalanceTable
from .claims import ClaimLedger
from .reserves import PairKey, ReserveLedger
from .state_root import compute_state_root

__all__ = [
    "AssetLedger",
    "BalanceTable",
    "ClaimLedger",
    "PairKey",
    "ReserveLedger",
    "compute_state_root",
]
