"""
Core pool algorithms
"""

from .liquidity_math import (
    initial_liquidity,
    isqrt,
    optimal_amount,
    proportional_liquidity,
    swap_output,
    withdrawal_amounts,
)
from .pool_engine import (
    MINIMUM_LIQUIDITY,
    LiquidityProvided,
    LiquidityWithdrawn,
    PoolEngine,
    PoolEngineConfig,
    PoolStore,
    SwapExecuted,
)

__all__ = [
    "initial_liquidity",
    "isqrt",
    "optimal_amount",
    "proportional_liquidity",
    "swap_output",
    "withdrawal_amounts",
    "MINIMUM_LIQUIDITY",
    "LiquidityProvided",
    "LiquidityWithdrawn",
    "PoolEngine",
    "PoolEngineConfig",
    "PoolStore",
    "SwapExecuted",
]
