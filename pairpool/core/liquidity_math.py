"""
Liquidity math: pure integer functions with explicit rounding rules.

Every result rounds down. Rounding up anywhere would let a caller mint claim
tokens or withdraw assets that the pool's reserves do not back.

Algorithm Design:
- Type: Arbitrary-precision integer arithmetic / floor rounding
- Time Complexity: O(1) per call, except `isqrt` (O(log n) Newton steps)
- Invariant: after a swap, (reserve_in + amount_in) * (reserve_out - amount_out) >= reserve_in * reserve_out
"""

from __future__ import annotations

from typing import Tuple

from ..state.balances import Amount


def _require_int(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")


def isqrt(n: int) -> int:
    """
    Largest integer r with r * r <= n.

    Babylonian iteration seeded at n // 2 + 1, stopping as soon as the next
    iterate no longer decreases. Small inputs short-circuit: 0 -> 0, 1..3 -> 1.
    Bit-exact with the Solidity `Math.sqrt` used by constant-product pools,
    and never routed through floating point.
    """
    _require_int("n", n)
    if n < 0:
        raise ValueError(f"isqrt requires a non-negative int: {n}")
    if n > 3:
        z = n
        x = n // 2 + 1
        while x < z:
            z = x
            x = (n // x + x) // 2
        return z
    if n != 0:
        return 1
    return 0


def optimal_amount(amount_desired: Amount, reserve_in: Amount, reserve_out: Amount) -> Amount:
    """
    Counterpart deposit that preserves the current reserve ratio.

        optimal = floor(amount_desired * reserve_out / reserve_in)
    """
    _require_int("amount_desired", amount_desired)
    _require_int("reserve_in", reserve_in)
    _require_int("reserve_out", reserve_out)
    if amount_desired < 0:
        raise ValueError(f"amount_desired must be non-negative: {amount_desired}")
    if reserve_in <= 0 or reserve_out <= 0:
        raise ValueError(f"Reserves must be positive: ({reserve_in}, {reserve_out})")
    return (amount_desired * reserve_out) // reserve_in


def swap_output(amount_in: Amount, reserve_in: Amount, reserve_out: Amount) -> Amount:
    """
    Output amount for an exact-in trade under x * y = k, with no fee.

        amount_out = floor(amount_in * reserve_out / (reserve_in + amount_in))

    The result is always strictly below `reserve_out`, so a swap can never
    drain a side of the pool.
    """
    _require_int("amount_in", amount_in)
    _require_int("reserve_in", reserve_in)
    _require_int("reserve_out", reserve_out)
    if amount_in <= 0:
        raise ValueError(f"amount_in must be positive: {amount_in}")
    if reserve_in <= 0 or reserve_out <= 0:
        raise ValueError(f"Reserves must be positive: ({reserve_in}, {reserve_out})")
    return (amount_in * reserve_out) // (reserve_in + amount_in)


def initial_liquidity(amount_a: Amount, amount_b: Amount) -> Amount:
    """
    Claim tokens minted by the first deposit into an empty pool.

        liquidity = isqrt(amount_a * amount_b)
    """
    _require_int("amount_a", amount_a)
    _require_int("amount_b", amount_b)
    if amount_a < 0 or amount_b < 0:
        raise ValueError(f"Deposit amounts must be non-negative: ({amount_a}, {amount_b})")
    return isqrt(amount_a * amount_b)


def proportional_liquidity(
    amount_a: Amount,
    amount_b: Amount,
    reserve_a: Amount,
    reserve_b: Amount,
    total_supply: Amount,
) -> Amount:
    """
    Claim tokens minted by a deposit into an existing pool.

        liquidity = min(floor(amount_a * total_supply / reserve_a),
                        floor(amount_b * total_supply / reserve_b))
    """
    for name, v in (
        ("amount_a", amount_a),
        ("amount_b", amount_b),
        ("reserve_a", reserve_a),
        ("reserve_b", reserve_b),
        ("total_supply", total_supply),
    ):
        _require_int(name, v)
    if amount_a < 0 or amount_b < 0:
        raise ValueError(f"Deposit amounts must be non-negative: ({amount_a}, {amount_b})")
    if reserve_a <= 0 or reserve_b <= 0:
        raise ValueError(f"Reserves must be positive: ({reserve_a}, {reserve_b})")
    if total_supply < 0:
        raise ValueError(f"total_supply must be non-negative: {total_supply}")

    return min(
        (amount_a * total_supply) // reserve_a,
        (amount_b * total_supply) // reserve_b,
    )


def withdrawal_amounts(
    liquidity: Amount,
    reserve_a: Amount,
    reserve_b: Amount,
    total_supply: Amount,
) -> Tuple[Amount, Amount]:
    """
    Asset amounts returned for retiring `liquidity` claim tokens.

        amount_a = floor(liquidity * reserve_a / total_supply)
        amount_b = floor(liquidity * reserve_b / total_supply)
    """
    for name, v in (
        ("liquidity", liquidity),
        ("reserve_a", reserve_a),
        ("reserve_b", reserve_b),
        ("total_supply", total_supply),
    ):
        _require_int(name, v)
    if liquidity < 0:
        raise ValueError(f"liquidity must be non-negative: {liquidity}")
    if reserve_a < 0 or reserve_b < 0:
        raise ValueError(f"Reserves must be non-negative: ({reserve_a}, {reserve_b})")
    if total_supply <= 0:
        raise ValueError(f"total_supply must be positive: {total_supply}")
    if liquidity > total_supply:
        raise ValueError(f"Cannot redeem more than supply: {liquidity} > {total_supply}")

    return (liquidity * reserve_a) // total_supply, (liquidity * reserve_b) // total_supply
