"""`pairpool`: constant-product pool accounting and pricing engine.

Ledgers live in `pairpool.state`, the integer math and the engine in
`pairpool.core`, and deadline framing plus configuration loading in
`pairpool.integration`.

Public API:
- `PoolEngine(store, config)` with `provide_liquidity`, `withdraw_liquidity`, `swap_exact_in`
- `Router(engine, clock)` for deadline-checked calls and `TxResult` outcomes
- `load_config(path)` / `build_router(config)`
"""

from . import errors
from .core import PoolEngine, PoolEngineConfig, PoolStore
from .integration import Router, RouterConfig, TxResult, build_router, load_config
from .state import AssetLedger, BalanceTable, ClaimLedger, ReserveLedger

__all__ = [
    "errors",
    "PoolEngine",
    "PoolEngineConfig",
    "PoolStore",
    "Router",
    "RouterConfig",
    "TxResult",
    "build_router",
    "load_config",
    "AssetLedger",
    "BalanceTable",
    "ClaimLedger",
    "ReserveLedger",
]
