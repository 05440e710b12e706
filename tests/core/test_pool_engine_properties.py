# [TESTER] v1

from __future__ import annotations

import importlib.util

import pytest

if importlib.util.find_spec("hypothesis") is None:  # pragma: no cover
    pytest.skip("hypothesis not installed", allow_module_level=True)

import hypothesis.strategies as st
from hypothesis import given, settings

from pairpool.core.pool_engine import PoolEngine, PoolStore
from pairpool.errors import PoolError

ASSETS = ("A", "B", "C")
USERS = ("alice", "bob", "carol")
FUNDING = 10**12

# Each op: (kind, user, asset_x, asset_y, amount_1, amount_2)
_ops = st.lists(
    st.tuples(
        st.sampled_from(("provide", "withdraw", "swap")),
        st.sampled_from(USERS),
        st.sampled_from(ASSETS),
        st.sampled_from(ASSETS),
        st.integers(min_value=0, max_value=10**9),
        st.integers(min_value=0, max_value=10**9),
    ),
    max_size=40,
)


def _funded_engine() -> PoolEngine:
    engine = PoolEngine(PoolStore())
    for user in USERS:
        for asset in ASSETS:
            engine.store.assets.deposit(user, asset, FUNDING)
    return engine


def _apply(engine: PoolEngine, op: tuple) -> None:
    kind, user, x, y, n1, n2 = op
    if kind == "provide":
        engine.provide_liquidity(user, x, y, n1, n2, 0, 0, user)
    elif kind == "withdraw":
        engine.withdraw_liquidity(user, x, y, n1, 0, 0, user)
    else:
        engine.swap_exact_in(user, n1, 0, [x, y], user)


def _reserve_total(engine: PoolEngine, asset: str) -> int:
    total = 0
    for (x, y), (reserve_x, reserve_y) in engine.store.reserves.get_all_reserves().items():
        if x == asset:
            total += reserve_x
        if y == asset:
            total += reserve_y
    return total


@given(_ops)
@settings(max_examples=150, deadline=None)
def test_random_operation_sequences_keep_ledgers_consistent(ops: list) -> None:
    engine = _funded_engine()
    for op in ops:
        reserves_before = engine.store.reserves.get_all_reserves()
        try:
            _apply(engine, op)
        except PoolError:
            # Rejected operations leave reserves untouched.
            assert engine.store.reserves.get_all_reserves() == reserves_before

        assert engine.check_invariants() == []
        for asset in ASSETS:
            # No asset is created or destroyed, and the pool holds exactly its reserves.
            assert engine.store.assets.balances.total_of(asset) == FUNDING * len(USERS)
            assert engine.store.assets.balance_of("pool", asset) == _reserve_total(engine, asset)


@given(
    st.integers(min_value=1_001, max_value=10**15),
    st.integers(min_value=1_001, max_value=10**15),
    st.integers(min_value=1, max_value=10**15),
)
@settings(max_examples=200, deadline=None)
def test_swap_product_never_decreases(reserve_a: int, reserve_b: int, amount_in: int) -> None:
    engine = PoolEngine(PoolStore())
    engine.store.assets.deposit("lp", "A", reserve_a)
    engine.store.assets.deposit("lp", "B", reserve_b)
    engine.store.assets.deposit("trader", "A", amount_in)
    engine.provide_liquidity("lp", "A", "B", reserve_a, reserve_b, 0, 0, "lp")

    engine.swap_exact_in("trader", amount_in, 0, ["A", "B"], "trader")

    new_a, new_b = engine.get_reserves("A", "B")
    assert new_a * new_b >= reserve_a * reserve_b
    assert new_b > 0


@given(
    st.integers(min_value=1_001, max_value=10**18),
    st.integers(min_value=1_001, max_value=10**18),
    st.integers(min_value=1, max_value=10**18),
    st.integers(min_value=1, max_value=10**18),
)
@settings(max_examples=200, deadline=None)
def test_second_provider_round_trip_never_profits(
    reserve_a: int, reserve_b: int, desired_a: int, desired_b: int
) -> None:
    engine = PoolEngine(PoolStore())
    engine.store.assets.deposit("lp", "A", reserve_a)
    engine.store.assets.deposit("lp", "B", reserve_b)
    engine.store.assets.deposit("second", "A", desired_a)
    engine.store.assets.deposit("second", "B", desired_b)
    engine.provide_liquidity("lp", "A", "B", reserve_a, reserve_b, 0, 0, "lp")

    try:
        amount_a, amount_b, liquidity = engine.provide_liquidity(
            "second", "A", "B", desired_a, desired_b, 0, 0, "second"
        )
    except PoolError:
        return
    out_a, out_b = engine.withdraw_liquidity("second", "A", "B", liquidity, 0, 0, "second")

    assert out_a <= amount_a
    assert out_b <= amount_b
    assert engine.check_invariants() == []
