"""Exception types for the pool engine.

Every domain failure is a `PoolError` carrying a stable ``code`` string, so
callers can either catch specific classes or inspect ``exc.code``
(see ``Router.execute`` in ``pairpool/integration/router.py``).
"""

from __future__ import annotations

from typing import List, Optional, Tuple


class PoolError(ValueError):
    """Base class for rejected pool operations."""

    code = "POOL_ERROR"


class IdenticalAssets(PoolError):
    """Raised when both sides of a pair name the same asset."""

    code = "IDENTICAL_ASSETS"


class ExpiredDeadline(PoolError):
    """Raised by the framing layer when ``now > deadline``."""

    code = "EXPIRED_DEADLINE"


class InvalidAmount(PoolError):
    """Raised for negative, zero-where-positive, or out-of-range amounts."""

    code = "INVALID_AMOUNT"


class InsufficientInitialLiquidity(PoolError):
    code = "INSUFFICIENT_INITIAL_LIQUIDITY"


class InsufficientAAmount(PoolError):
    code = "INSUFFICIENT_A_AMOUNT"


class InsufficientBAmount(PoolError):
    code = "INSUFFICIENT_B_AMOUNT"


class InsufficientLiquidityMinted(PoolError):
    code = "INSUFFICIENT_LIQUIDITY_MINTED"


class InsufficientClaimBalance(PoolError):
    code = "INSUFFICIENT_CLAIM_BALANCE"


class SlippageExceeded(PoolError):
    code = "SLIPPAGE_EXCEEDED"


class UnsupportedPath(PoolError):
    code = "UNSUPPORTED_PATH"


class PoolDoesNotExist(PoolError):
    code = "POOL_DOES_NOT_EXIST"


class TransferFailed(PoolError):
    """Raised when the asset ledger refuses a transfer."""

    code = "TRANSFER_FAILED"

    def __init__(self, asset: str, direction: str, account: str, amount: int) -> None:
        self.asset = asset
        self.direction = direction
        self.account = account
        self.amount = amount
        super().__init__(f"transfer {direction} failed: {amount} of {asset} ({account})")


class Underflow(PoolError):
    """Raised by the reserve ledger when a subtraction would go negative."""

    code = "UNDERFLOW"


class InvalidAccount(PoolError):
    """Raised when the pool's own custody account is named as a transfer party."""

    code = "INVALID_ACCOUNT"


class ReentrantCall(PoolError):
    """Raised when a collaborator calls back into the engine mid-operation."""

    code = "REENTRANT_CALL"


class RollbackError(RuntimeError):
    """Raised when undoing a failed operation itself fails.

    ``failures`` lists ``(step_label, exception)`` for every inverse that raised.
    """

    code = "ROLLBACK_FAILED"

    def __init__(self, message: str, failures: Optional[List[Tuple[str, Exception]]] = None) -> None:
        self.failures = list(failures or [])
        super().__init__(message)
