"""
Pool engine: provide liquidity, withdraw liquidity, and exact-in swaps.

The engine reads and writes the reserve ledger, prices every operation with
`liquidity_math`, and drives two external capabilities held by the store:
- an asset ledger (`transfer_into` / `transfer_out`, each returning a bool),
- a claim-token ledger (`mint`, `burn`, `balance_of`, `total_supply`).

Every public entry point runs under one global lock and records the inverse of
each mutation in a `Journal`. A failure at any step unwinds the journal, so
callers observe either a fully committed operation or no change. A collaborator
that calls back into the engine while it holds the lock gets `ReentrantCall`.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Iterator, List, Optional, Sequence, Tuple

from ..errors import (
    IdenticalAssets,
    InsufficientAAmount,
    InsufficientBAmount,
    InsufficientClaimBalance,
    InsufficientInitialLiquidity,
    InsufficientLiquidityMinted,
    InvalidAccount,
    InvalidAmount,
    PoolDoesNotExist,
    ReentrantCall,
    SlippageExceeded,
    TransferFailed,
    UnsupportedPath,
)
from ..state.balances import MAX_UINT256, Address, Amount, AssetId, AssetLedger
from ..state.claims import ClaimLedger
from ..state.reserves import PairKey, ReserveLedger
from .journal import Journal
from .liquidity_math import (
    initial_liquidity,
    optimal_amount,
    proportional_liquidity,
    swap_output,
    withdrawal_amounts,
)

logger = logging.getLogger(__name__)

# First deposit into a pool must mint strictly more than this many claim tokens.
MINIMUM_LIQUIDITY = 1000


@dataclass(frozen=True)
class PoolEngineConfig:
    minimum_liquidity: int = MINIMUM_LIQUIDITY

    def __post_init__(self) -> None:
        v = self.minimum_liquidity
        if not isinstance(v, int) or isinstance(v, bool) or v < 0:
            raise ValueError(f"minimum_liquidity must be a non-negative int: {v!r}")


@dataclass
class PoolStore:
    """
    All ledger state touched by the engine.

    `assets` may be any object providing `transfer_into(asset, sender, amount)`
    and `transfer_out(asset, to, amount)` returning bool; `claims` any object
    providing `mint`, `burn`, `balance_of` and `total_supply`. Construct a fresh
    store per test for isolation.
    """

    reserves: ReserveLedger = field(default_factory=ReserveLedger)
    claims: Any = field(default_factory=ClaimLedger)
    assets: Any = field(default_factory=AssetLedger)


@dataclass(frozen=True)
class LiquidityProvided:
    amount_a: Amount
    amount_b: Amount
    liquidity: Amount

    def __iter__(self) -> Iterator[Amount]:
        return iter((self.amount_a, self.amount_b, self.liquidity))


@dataclass(frozen=True)
class LiquidityWithdrawn:
    amount_a: Amount
    amount_b: Amount

    def __iter__(self) -> Iterator[Amount]:
        return iter((self.amount_a, self.amount_b))


@dataclass(frozen=True)
class SwapExecuted:
    amount_in: Amount
    amount_out: Amount

    def __iter__(self) -> Iterator[Amount]:
        return iter((self.amount_in, self.amount_out))


def _require_amount(name: str, value: int, *, positive: bool = False) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")
    if value < 0 or value > MAX_UINT256:
        raise InvalidAmount(f"{name} out of range [0, 2**256 - 1]: {value}")
    if positive and value == 0:
        raise InvalidAmount(f"{name} must be positive")


def _pair_key(asset_a: AssetId, asset_b: AssetId) -> PairKey:
    if asset_a == asset_b:
        raise IdenticalAssets(f"identical assets: {asset_a!r}")
    return (asset_a, asset_b)


def _swap_pair(path: Sequence[AssetId]) -> PairKey:
    if isinstance(path, str) or len(path) != 2:
        raise UnsupportedPath(f"path must name exactly two assets: {path!r}")
    token_in, token_out = path
    return (token_in, token_out)


class PoolEngine:
    def __init__(self, store: Optional[PoolStore] = None, config: PoolEngineConfig = PoolEngineConfig()) -> None:
        self.store = store if store is not None else PoolStore()
        self.config = config
        self._lock = threading.Lock()
        self._owner: Optional[int] = None

    # -- transaction plumbing ---------------------------------------------

    @contextmanager
    def _exclusive(self, op: str) -> Iterator[None]:
        # Only the holding thread can ever see its own ident in `_owner`.
        if self._owner == threading.get_ident():
            raise ReentrantCall(f"{op} called while another pool operation is in progress")
        with self._lock:
            self._owner = threading.get_ident()
            try:
                yield
            finally:
                self._owner = None

    @contextmanager
    def _transaction(self, op: str) -> Iterator[Journal]:
        with self._exclusive(op):
            journal = Journal()
            try:
                yield journal
            except Exception as exc:
                if len(journal):
                    logger.warning(
                        "%s rolled back after %d step(s): %s",
                        op,
                        len(journal),
                        getattr(exc, "code", type(exc).__name__),
                    )
                journal.rollback()
                raise
            journal.commit()

    def _require_party(self, name: str, account: Address) -> None:
        pool_account = getattr(self.store.assets, "pool_account", None)
        if pool_account is not None and account == pool_account:
            raise InvalidAccount(f"{name} must not be the pool account {pool_account!r}")

    def _pull(self, journal: Journal, asset: AssetId, sender: Address, amount: Amount) -> None:
        assets = self.store.assets
        if not assets.transfer_into(asset, sender, amount):
            raise TransferFailed(asset, "into pool", sender, amount)

        def undo() -> None:
            if not assets.transfer_out(asset, sender, amount):
                raise TransferFailed(asset, "out of pool", sender, amount)

        journal.record(f"transfer_into:{asset}", undo)

    def _push(self, journal: Journal, asset: AssetId, to: Address, amount: Amount) -> None:
        assets = self.store.assets
        if not assets.transfer_out(asset, to, amount):
            raise TransferFailed(asset, "out of pool", to, amount)

        def undo() -> None:
            if not assets.transfer_into(asset, to, amount):
                raise TransferFailed(asset, "into pool", to, amount)

        journal.record(f"transfer_out:{asset}", undo)

    def _add_reserves(self, journal: Journal, pair: PairKey, delta_a: Amount, delta_b: Amount) -> None:
        reserves = self.store.reserves
        reserves.add(pair, delta_a, delta_b)
        journal.record("reserves.add", lambda: reserves.sub(pair, delta_a, delta_b))

    def _sub_reserves(self, journal: Journal, pair: PairKey, delta_a: Amount, delta_b: Amount) -> None:
        reserves = self.store.reserves
        reserves.sub(pair, delta_a, delta_b)
        journal.record("reserves.sub", lambda: reserves.add(pair, delta_a, delta_b))

    def _mint(self, journal: Journal, to: Address, amount: Amount) -> None:
        claims = self.store.claims
        claims.mint(to, amount)
        journal.record("claims.mint", lambda: claims.burn(to, amount))

    def _burn(self, journal: Journal, holder: Address, amount: Amount) -> None:
        claims = self.store.claims
        claims.burn(holder, amount)
        journal.record("claims.burn", lambda: claims.mint(holder, amount))

    # -- entry points -----------------------------------------------------

    def provide_liquidity(
        self,
        sender: Address,
        asset_a: AssetId,
        asset_b: AssetId,
        amount_a_desired: Amount,
        amount_b_desired: Amount,
        amount_a_min: Amount = 0,
        amount_b_min: Amount = 0,
        recipient: Optional[Address] = None,
    ) -> LiquidityProvided:
        """
        Deposit both assets of `(asset_a, asset_b)` and mint claim tokens to `recipient`.

        Empty pool: deposits exactly the desired amounts and mints
        isqrt(amount_a * amount_b), which must exceed `config.minimum_liquidity`.

        Existing pool: deposits at the current reserve ratio, using all of one
        desired amount and the optimal amount of the other, and mints
            min(amount_a * supply / reserve_a, amount_b * supply / reserve_b).

        `recipient` defaults to `sender`.

        Raises:
            IdenticalAssets, InvalidAmount, InsufficientInitialLiquidity,
            InsufficientAAmount, InsufficientBAmount, InsufficientLiquidityMinted,
            TransferFailed
        """
        pair = _pair_key(asset_a, asset_b)
        for name, v in (
            ("amount_a_desired", amount_a_desired),
            ("amount_b_desired", amount_b_desired),
            ("amount_a_min", amount_a_min),
            ("amount_b_min", amount_b_min),
        ):
            _require_amount(name, v)
        to = sender if recipient is None else recipient
        self._require_party("sender", sender)

        with self._transaction("provide_liquidity") as journal:
            reserve_a, reserve_b = self.store.reserves.get(pair)

            if reserve_a == 0 and reserve_b == 0:
                amount_a, amount_b = amount_a_desired, amount_b_desired
                liquidity = initial_liquidity(amount_a, amount_b)
                if liquidity <= self.config.minimum_liquidity:
                    raise InsufficientInitialLiquidity(
                        f"isqrt({amount_a} * {amount_b}) = {liquidity} <= {self.config.minimum_liquidity}"
                    )
            else:
                amount_b_optimal = optimal_amount(amount_a_desired, reserve_a, reserve_b)
                if amount_b_optimal <= amount_b_desired:
                    if amount_b_optimal < amount_b_min:
                        raise InsufficientBAmount(f"amount_b ({amount_b_optimal}) < amount_b_min ({amount_b_min})")
                    amount_a, amount_b = amount_a_desired, amount_b_optimal
                else:
                    amount_a_optimal = optimal_amount(amount_b_desired, reserve_b, reserve_a)
                    if amount_a_optimal < amount_a_min:
                        raise InsufficientAAmount(f"amount_a ({amount_a_optimal}) < amount_a_min ({amount_a_min})")
                    amount_a, amount_b = amount_a_optimal, amount_b_desired
                liquidity = proportional_liquidity(
                    amount_a, amount_b, reserve_a, reserve_b, self.store.claims.total_supply()
                )
                if liquidity == 0:
                    raise InsufficientLiquidityMinted(f"deposit ({amount_a}, {amount_b}) mints no liquidity")

            self._pull(journal, asset_a, sender, amount_a)
            self._pull(journal, asset_b, sender, amount_b)
            self._add_reserves(journal, pair, amount_a, amount_b)
            self._mint(journal, to, liquidity)

        if reserve_a == 0 and reserve_b == 0:
            logger.info("pool %s/%s bootstrapped with (%d, %d)", asset_a, asset_b, amount_a, amount_b)
        logger.debug(
            "provide_liquidity %s/%s: deposited (%d, %d), minted %d to %s",
            asset_a, asset_b, amount_a, amount_b, liquidity, to,
        )
        return LiquidityProvided(amount_a=amount_a, amount_b=amount_b, liquidity=liquidity)

    def withdraw_liquidity(
        self,
        sender: Address,
        asset_a: AssetId,
        asset_b: AssetId,
        liquidity: Amount,
        amount_a_min: Amount = 0,
        amount_b_min: Amount = 0,
        recipient: Optional[Address] = None,
    ) -> LiquidityWithdrawn:
        """
        Retire `liquidity` of `sender`'s claim tokens for a pro-rata share of the pair.

            amount_a = floor(liquidity * reserve_a / total_supply)
            amount_b = floor(liquidity * reserve_b / total_supply)

        Order of effects: burn claims, reduce reserves, then pay out, so no step
        ever observes retired claims alongside unreduced reserves.

        Raises:
            IdenticalAssets, InvalidAmount, InsufficientClaimBalance,
            SlippageExceeded, TransferFailed
        """
        pair = _pair_key(asset_a, asset_b)
        _require_amount("liquidity", liquidity, positive=True)
        _require_amount("amount_a_min", amount_a_min)
        _require_amount("amount_b_min", amount_b_min)
        to = sender if recipient is None else recipient
        self._require_party("recipient", to)

        with self._transaction("withdraw_liquidity") as journal:
            claims = self.store.claims
            balance = claims.balance_of(sender)
            if balance < liquidity:
                raise InsufficientClaimBalance(f"claim balance {balance} < {liquidity}")

            reserve_a, reserve_b = self.store.reserves.get(pair)
            amount_a, amount_b = withdrawal_amounts(liquidity, reserve_a, reserve_b, claims.total_supply())
            if amount_a < amount_a_min or amount_b < amount_b_min:
                raise SlippageExceeded(
                    f"withdrawal ({amount_a}, {amount_b}) below minimum ({amount_a_min}, {amount_b_min})"
                )

            self._burn(journal, sender, liquidity)
            self._sub_reserves(journal, pair, amount_a, amount_b)
            self._push(journal, asset_a, to, amount_a)
            self._push(journal, asset_b, to, amount_b)
            drained = self.store.reserves.get(pair) == (0, 0)

        if drained:
            logger.info("pool %s/%s drained to (0, 0)", asset_a, asset_b)
        logger.debug(
            "withdraw_liquidity %s/%s: burned %d from %s, paid (%d, %d) to %s",
            asset_a, asset_b, liquidity, sender, amount_a, amount_b, to,
        )
        return LiquidityWithdrawn(amount_a=amount_a, amount_b=amount_b)

    def swap_exact_in(
        self,
        sender: Address,
        amount_in: Amount,
        amount_out_min: Amount,
        path: Sequence[AssetId],
        recipient: Optional[Address] = None,
    ) -> SwapExecuted:
        """
        Sell exactly `amount_in` of `path[0]` for `path[1]` against that ordered pair.

            amount_out = floor(amount_in * reserve_out / (reserve_in + amount_in))

        No fee is charged. The input is pulled before the output is priced and
        checked; a slippage failure rolls the input transfer back.

        Raises:
            UnsupportedPath, InvalidAmount, PoolDoesNotExist, SlippageExceeded,
            TransferFailed
        """
        token_in, token_out = pair = _swap_pair(path)
        _require_amount("amount_in", amount_in, positive=True)
        _require_amount("amount_out_min", amount_out_min)
        to = sender if recipient is None else recipient
        self._require_party("sender", sender)
        self._require_party("recipient", to)

        with self._transaction("swap_exact_in") as journal:
            reserve_in, reserve_out = self.store.reserves.get(pair)
            if reserve_in == 0 or reserve_out == 0:
                raise PoolDoesNotExist(f"no liquidity for pair ({token_in!r}, {token_out!r})")

            self._pull(journal, token_in, sender, amount_in)
            amount_out = swap_output(amount_in, reserve_in, reserve_out)
            if amount_out < amount_out_min:
                raise SlippageExceeded(f"amount_out ({amount_out}) < amount_out_min ({amount_out_min})")

            self._push(journal, token_out, to, amount_out)
            self._add_reserves(journal, pair, amount_in, 0)
            self._sub_reserves(journal, pair, 0, amount_out)

        logger.debug(
            "swap_exact_in %s->%s: %d in from %s, %d out to %s",
            token_in, token_out, amount_in, sender, amount_out, to,
        )
        return SwapExecuted(amount_in=amount_in, amount_out=amount_out)

    # -- views ------------------------------------------------------------

    def get_reserves(self, asset_a: AssetId, asset_b: AssetId) -> Tuple[Amount, Amount]:
        """Reserves of the ordered pair `(asset_a, asset_b)`; (0, 0) if it has none."""
        with self._exclusive("get_reserves"):
            return self.store.reserves.get(_pair_key(asset_a, asset_b))

    def quote(self, amount_a: Amount, asset_a: AssetId, asset_b: AssetId) -> Amount:
        """Amount of `asset_b` matching `amount_a` at the pair's current ratio."""
        _require_amount("amount_a", amount_a)
        with self._exclusive("quote"):
            reserve_a, reserve_b = self.store.reserves.get(_pair_key(asset_a, asset_b))
            if reserve_a == 0 or reserve_b == 0:
                raise PoolDoesNotExist(f"no liquidity for pair ({asset_a!r}, {asset_b!r})")
            return optimal_amount(amount_a, reserve_a, reserve_b)

    def get_amount_out(self, amount_in: Amount, path: Sequence[AssetId]) -> Amount:
        """Output `swap_exact_in` would currently produce, without executing it."""
        pair = _swap_pair(path)
        _require_amount("amount_in", amount_in, positive=True)
        with self._exclusive("get_amount_out"):
            reserve_in, reserve_out = self.store.reserves.get(pair)
            if reserve_in == 0 or reserve_out == 0:
                raise PoolDoesNotExist(f"no liquidity for pair {pair!r}")
            return swap_output(amount_in, reserve_in, reserve_out)

    def claim_balance_of(self, holder: Address) -> Amount:
        with self._exclusive("claim_balance_of"):
            return self.store.claims.balance_of(holder)

    def claim_total_supply(self) -> Amount:
        with self._exclusive("claim_total_supply"):
            return self.store.claims.total_supply()

    def check_invariants(self) -> List[str]:
        """Return descriptions of every violated ledger invariant (empty when consistent)."""
        violations: List[str] = []
        with self._exclusive("check_invariants"):
            for pair, (reserve_a, reserve_b) in self.store.reserves.get_all_reserves().items():
                if reserve_a < 0 or reserve_b < 0:
                    violations.append(f"negative reserves for {pair}: ({reserve_a}, {reserve_b})")
                elif reserve_a == 0 or reserve_b == 0:
                    violations.append(f"half-empty pool {pair}: ({reserve_a}, {reserve_b})")
            claims = self.store.claims
            if claims.total_supply() < 0:
                violations.append(f"negative claim supply: {claims.total_supply()}")
            verify_supply = getattr(claims, "verify_supply", None)
            if verify_supply is not None and not verify_supply():
                violations.append("claim supply does not equal the sum of balances")
            claims_check = getattr(claims, "verify_non_negative", None)
            if claims_check is not None and not claims_check():
                violations.append("negative claim balance")
            balances = getattr(self.store.assets, "balances", None)
            if balances is not None and not balances.verify_non_negative():
                violations.append("negative asset balance")
        return violations
