# [TESTER] v1

from __future__ import annotations

import importlib.util
import math

import pytest

from pairpool.core.liquidity_math import (
    initial_liquidity,
    isqrt,
    optimal_amount,
    proportional_liquidity,
    swap_output,
    withdrawal_amounts,
)


@pytest.mark.parametrize(
    "n, expected",
    [(0, 0), (1, 1), (2, 1), (3, 1), (4, 2), (5, 2), (15, 3), (16, 4), (4 * 10**12, 2_000_000)],
)
def test_isqrt_small_and_known_values(n: int, expected: int) -> None:
    assert isqrt(n) == expected


def test_isqrt_is_exact_where_float_sqrt_is_not() -> None:
    # Float sqrt loses precision well below this magnitude.
    r = (1 << 70) + 12345
    assert isqrt(r * r) == r
    assert isqrt(r * r - 1) == r - 1
    assert isqrt(r * r + 2 * r) == r


def test_isqrt_rejects_negative_and_non_int() -> None:
    with pytest.raises(ValueError):
        isqrt(-1)
    with pytest.raises(TypeError):
        isqrt(4.0)  # type: ignore[arg-type]
    with pytest.raises(TypeError):
        isqrt(True)


def test_optimal_amount_truncates() -> None:
    assert optimal_amount(1000, 1_000_000, 4_000_000) == 4000
    assert optimal_amount(7, 3, 2) == 4
    assert optimal_amount(0, 3, 2) == 0
    with pytest.raises(ValueError, match="positive"):
        optimal_amount(1, 0, 5)


def test_swap_output_matches_constant_product_without_fee() -> None:
    assert swap_output(1000, 1_000_000, 4_000_000) == 3996
    # Tiny trades can round to zero output.
    assert swap_output(1, 1_000_000, 1) == 0
    with pytest.raises(ValueError, match="positive"):
        swap_output(0, 10, 10)
    with pytest.raises(ValueError, match="positive"):
        swap_output(1, 0, 10)


def test_initial_liquidity_is_isqrt_of_product() -> None:
    assert initial_liquidity(1_000_000, 4_000_000) == 2_000_000
    assert initial_liquidity(0, 5) == 0


def test_proportional_liquidity_takes_the_smaller_share() -> None:
    assert proportional_liquidity(500, 2000, 1_000_000, 4_000_000, 2_000_000) == 1000
    assert proportional_liquidity(1000, 1, 1_000_000, 4_000_000, 2_000_000) == 0
    with pytest.raises(ValueError):
        proportional_liquidity(1, 1, 0, 1, 1)


def test_withdrawal_amounts_round_down() -> None:
    assert withdrawal_amounts(2_000_000, 1_001_000, 3_996_004, 2_000_000) == (1_001_000, 3_996_004)
    assert withdrawal_amounts(1, 3, 3, 2) == (1, 1)
    with pytest.raises(ValueError, match="supply"):
        withdrawal_amounts(3, 3, 3, 2)
    with pytest.raises(ValueError, match="positive"):
        withdrawal_amounts(0, 0, 0, 0)


if importlib.util.find_spec("hypothesis") is not None:
    import hypothesis.strategies as st
    from hypothesis import given, settings

    _amounts = st.integers(min_value=1, max_value=(1 << 256) - 1)

    @given(st.integers(min_value=0, max_value=1 << 300))
    @settings(max_examples=500)
    def test_isqrt_agrees_with_math_isqrt(n: int) -> None:
        assert isqrt(n) == math.isqrt(n)

    @given(_amounts, _amounts, _amounts)
    @settings(max_examples=300)
    def test_swap_never_decreases_product(amount_in: int, reserve_in: int, reserve_out: int) -> None:
        amount_out = swap_output(amount_in, reserve_in, reserve_out)
        assert 0 <= amount_out < reserve_out
        assert (reserve_in + amount_in) * (reserve_out - amount_out) >= reserve_in * reserve_out

    @given(_amounts, _amounts, _amounts)
    @settings(max_examples=300)
    def test_optimal_amount_never_overshoots_ratio(amount: int, reserve_in: int, reserve_out: int) -> None:
        out = optimal_amount(amount, reserve_in, reserve_out)
        assert out * reserve_in <= amount * reserve_out < (out + 1) * reserve_in
