# [TESTER] v1

from __future__ import annotations

import pytest

from pairpool.state import BalanceTable, ClaimLedger, ReserveLedger, compute_state_root


def test_state_root_is_insertion_order_independent() -> None:
    reserves_1 = ReserveLedger()
    reserves_1.add(("A", "B"), 10, 20)
    reserves_1.add(("C", "D"), 30, 40)
    reserves_2 = ReserveLedger()
    reserves_2.add(("C", "D"), 30, 40)
    reserves_2.add(("A", "B"), 10, 20)

    claims_1 = ClaimLedger()
    claims_1.mint("alice", 1)
    claims_1.mint("bob", 2)
    claims_2 = ClaimLedger()
    claims_2.mint("bob", 2)
    claims_2.mint("alice", 1)

    root_1 = compute_state_root(reserves=reserves_1, claims=claims_1)
    root_2 = compute_state_root(reserves=reserves_2, claims=claims_2)
    assert root_1 == root_2
    assert root_1.startswith("0x") and len(root_1) == 66


def test_state_root_distinguishes_pair_order() -> None:
    forward = ReserveLedger()
    forward.add(("A", "B"), 10, 20)
    reverse = ReserveLedger()
    reverse.add(("B", "A"), 10, 20)
    claims = ClaimLedger()
    assert compute_state_root(reserves=forward, claims=claims) != compute_state_root(
        reserves=reverse, claims=claims
    )


def test_state_root_covers_balances_when_given() -> None:
    reserves = ReserveLedger()
    claims = ClaimLedger()
    balances = BalanceTable()
    without = compute_state_root(reserves=reserves, claims=claims)
    empty = compute_state_root(reserves=reserves, claims=claims, balances=balances)
    balances.set("alice", "A", 1)
    funded = compute_state_root(reserves=reserves, claims=claims, balances=balances)
    assert len({without, empty, funded}) == 3


def test_state_root_rejects_wrong_types() -> None:
    with pytest.raises(TypeError):
        compute_state_root(reserves={}, claims=ClaimLedger())  # type: ignore[arg-type]
