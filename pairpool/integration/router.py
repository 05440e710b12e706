"""
Transaction framing around the pool engine.

This is an imperative-shell wrapper around the engine:
- Checks the caller's deadline once, at entry, against an injectable clock.
- Delegates to the engine entry point with the caller passed explicitly.
- Optionally converts rejections into `TxResult` values via `execute`.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence

from ..core.pool_engine import (
    LiquidityProvided,
    LiquidityWithdrawn,
    PoolEngine,
    PoolStore,
    SwapExecuted,
)
from ..errors import ExpiredDeadline, PoolError
from ..state.balances import Address, Amount, AssetId, AssetLedger
from ..state.claims import ClaimLedger
from ..state.reserves import ReserveLedger
from .config import RouterConfig

logger = logging.getLogger(__name__)

Clock = Callable[[], int]

_ENTRY_POINTS = frozenset({"provide_liquidity", "withdraw_liquidity", "swap_exact_in"})


def _system_clock() -> int:
    return int(time.time())


@dataclass(frozen=True)
class TxResult:
    ok: bool
    value: Optional[Any] = None
    error: Optional[str] = None
    code: Optional[str] = None


class Router:
    def __init__(self, engine: PoolEngine, clock: Optional[Clock] = None) -> None:
        self.engine = engine
        self.clock = clock if clock is not None else _system_clock

    def _ensure(self, deadline: int) -> None:
        if not isinstance(deadline, int) or isinstance(deadline, bool):
            raise TypeError("deadline must be an int")
        now = self.clock()
        if now > deadline:
            raise ExpiredDeadline(f"deadline {deadline} passed (now={now})")

    def provide_liquidity(
        self,
        sender: Address,
        asset_a: AssetId,
        asset_b: AssetId,
        amount_a_desired: Amount,
        amount_b_desired: Amount,
        amount_a_min: Amount,
        amount_b_min: Amount,
        recipient: Address,
        deadline: int,
    ) -> LiquidityProvided:
        self._ensure(deadline)
        return self.engine.provide_liquidity(
            sender,
            asset_a,
            asset_b,
            amount_a_desired,
            amount_b_desired,
            amount_a_min,
            amount_b_min,
            recipient,
        )

    def withdraw_liquidity(
        self,
        sender: Address,
        asset_a: AssetId,
        asset_b: AssetId,
        liquidity: Amount,
        amount_a_min: Amount,
        amount_b_min: Amount,
        recipient: Address,
        deadline: int,
    ) -> LiquidityWithdrawn:
        self._ensure(deadline)
        return self.engine.withdraw_liquidity(
            sender,
            asset_a,
            asset_b,
            liquidity,
            amount_a_min,
            amount_b_min,
            recipient,
        )

    def swap_exact_in(
        self,
        sender: Address,
        amount_in: Amount,
        amount_out_min: Amount,
        path: Sequence[AssetId],
        recipient: Address,
        deadline: int,
    ) -> SwapExecuted:
        self._ensure(deadline)
        return self.engine.swap_exact_in(sender, amount_in, amount_out_min, path, recipient)

    def execute(self, op: str, **kwargs: Any) -> TxResult:
        """
        Run one entry point by name, returning a `TxResult` instead of raising.

        Only `PoolError` rejections are converted; programming errors (bad
        argument names or types) and `RollbackError` still raise.
        """
        if op not in _ENTRY_POINTS:
            return TxResult(ok=False, error=f"unknown operation: {op!r}", code="UNKNOWN_OPERATION")
        try:
            value = getattr(self, op)(**kwargs)
        except PoolError as exc:
            logger.info("%s rejected: %s (%s)", op, exc.code, exc)
            return TxResult(ok=False, error=str(exc), code=exc.code)
        return TxResult(ok=True, value=value)


def build_router(config: Optional[RouterConfig] = None, clock: Optional[Clock] = None) -> Router:
    """Wire a fresh store, engine and router from `config`."""
    cfg = config if config is not None else RouterConfig()
    store = PoolStore(
        reserves=ReserveLedger(),
        claims=ClaimLedger(),
        assets=AssetLedger(pool_account=cfg.pool_account),
    )
    return Router(PoolEngine(store, cfg.engine), clock=clock)
