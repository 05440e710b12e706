"""
Reserve ledger: per ordered pair key, the pool's holdings of each asset.

Pair keys are *not* canonicalized. `(X, Y)` and `(Y, X)` are two independent
entries with independent reserves; callers must address a pool with the same
argument order they used to create it.
"""

from __future__ import annotations

from typing import Dict, List, Tuple

from ..errors import Underflow
from .balances import Amount, AssetId

# Type alias
PairKey = Tuple[AssetId, AssetId]


class ReserveLedger:
    """
    Reserve table mapping (asset_a, asset_b) -> (reserve_a, reserve_b).

    Notes:
    - Reserves are always non-negative; `sub` fails with `Underflow` rather
      than letting an entry go negative.
    - Entries that return to (0, 0) are dropped to keep the table sparse.
    - No locking of its own; the pool engine is the sole mutator.
    """

    def __init__(self) -> None:
        self._reserves: Dict[PairKey, Tuple[Amount, Amount]] = {}

    def get(self, pair: PairKey) -> Tuple[Amount, Amount]:
        """Get (reserve_a, reserve_b) for `pair`. Returns (0, 0) if not found."""
        return self._reserves.get(pair, (0, 0))

    def _store(self, pair: PairKey, reserve_a: Amount, reserve_b: Amount) -> None:
        if reserve_a == 0 and reserve_b == 0:
            self._reserves.pop(pair, None)
        else:
            self._reserves[pair] = (reserve_a, reserve_b)

    def add(self, pair: PairKey, delta_a: Amount, delta_b: Amount) -> None:
        """Increase both reserves of `pair`."""
        if delta_a < 0 or delta_b < 0:
            raise ValueError(f"Deltas must be non-negative: ({delta_a}, {delta_b})")
        reserve_a, reserve_b = self.get(pair)
        self._store(pair, reserve_a + delta_a, reserve_b + delta_b)

    def sub(self, pair: PairKey, delta_a: Amount, delta_b: Amount) -> None:
        """
        Decrease both reserves of `pair`.

        Raises:
            Underflow: If either delta exceeds the current reserve (nothing is changed)
        """
        if delta_a < 0 or delta_b < 0:
            raise ValueError(f"Deltas must be non-negative: ({delta_a}, {delta_b})")
        reserve_a, reserve_b = self.get(pair)
        if delta_a > reserve_a or delta_b > reserve_b:
            raise Underflow(
                f"Reserve underflow for {pair}: ({reserve_a}, {reserve_b}) - ({delta_a}, {delta_b})"
            )
        self._store(pair, reserve_a - delta_a, reserve_b - delta_b)

    def pairs(self) -> List[PairKey]:
        """Pair keys currently holding reserves."""
        return list(self._reserves)

    def get_all_reserves(self) -> Dict[PairKey, Tuple[Amount, Amount]]:
        """Return a copy of all reserve entries."""
        return dict(self._reserves)

    def verify_non_negative(self) -> bool:
        return all(a >= 0 and b >= 0 for a, b in self._reserves.values())

    def __repr__(self) -> str:
        return f"ReserveLedger({len(self._reserves)} pairs)"
