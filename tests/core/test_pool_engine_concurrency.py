# [TESTER] v1

from __future__ import annotations

import threading
from typing import List

from pairpool.core.pool_engine import PoolEngine, PoolStore
from pairpool.errors import PoolError


def test_concurrent_swaps_and_deposits_serialize() -> None:
    engine = PoolEngine(PoolStore())
    assets = engine.store.assets
    assets.deposit("lp", "A", 10**9)
    assets.deposit("lp", "B", 4 * 10**9)
    engine.provide_liquidity("lp", "A", "B", 10**9, 4 * 10**9, 0, 0, "lp")

    traders = [f"trader{i}" for i in range(8)]
    for trader in traders:
        assets.deposit(trader, "A", 10**7)
        assets.deposit(trader, "B", 10**7)

    outputs: List[int] = []
    outputs_lock = threading.Lock()
    errors: List[BaseException] = []
    barrier = threading.Barrier(len(traders))

    def _worker(trader: str) -> None:
        barrier.wait()
        try:
            for i in range(50):
                if i % 10 == 9:
                    res = engine.provide_liquidity(trader, "A", "B", 1000, 10**6, 0, 0, trader)
                    engine.withdraw_liquidity(trader, "A", "B", res.liquidity, 0, 0, trader)
                    continue
                out = engine.swap_exact_in(trader, 1000, 0, ["A", "B"], trader).amount_out
                with outputs_lock:
                    outputs.append(out)
        except PoolError as exc:
            errors.append(exc)

    threads = [threading.Thread(target=_worker, args=(t,)) for t in traders]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    assert engine.check_invariants() == []

    reserve_a, reserve_b = engine.get_reserves("A", "B")
    assert assets.balance_of("pool", "A") == reserve_a
    assert assets.balance_of("pool", "B") == reserve_b
    assert assets.balances.total_of("A") == 10**9 + 8 * 10**7
    assert assets.balances.total_of("B") == 4 * 10**9 + 8 * 10**7
    assert reserve_a * reserve_b >= 10**9 * 4 * 10**9
    # Swaps only ever add A; deposit/withdraw round trips can only leave dust behind.
    assert reserve_a >= 10**9 + 1000 * len(outputs)
    assert reserve_b <= 4 * 10**9 - sum(outputs) + 8 * 5 * 4000
