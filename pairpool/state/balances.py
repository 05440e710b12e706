"""
Multi-asset balance tracking and the asset-movement capability used by the pool.

Implements BalanceTable[Address, AssetId] -> Amount, plus `AssetLedger`, a thin
wrapper exposing `transfer_into` / `transfer_out` against a single pool account.
"""

from __future__ import annotations

from typing import Dict, Optional, Tuple


# Type aliases
Address = str  # Opaque account identifier
AssetId = str  # Opaque asset identifier (e.g. a token address)
Amount = int  # Non-negative integer (arbitrary precision)

MAX_UINT256 = (1 << 256) - 1


class BalanceTable:
    """
    Balance table mapping (holder, asset) -> amount.

    Note: this class stores balances in a plain dict. Do not rely on dict
    iteration order; callers sort keys explicitly at serialization / hashing
    boundaries (see `pairpool/state/state_root.py`).
    """

    def __init__(self) -> None:
        self._balances: Dict[Tuple[Address, AssetId], Amount] = {}

    def get(self, holder: Address, asset: AssetId) -> Amount:
        """Get balance for (holder, asset). Returns 0 if not found."""
        return self._balances.get((holder, asset), 0)

    def set(self, holder: Address, asset: AssetId, amount: Amount) -> None:
        """
        Set balance for (holder, asset).

        Raises:
            ValueError: If amount is negative
        """
        if amount < 0:
            raise ValueError(f"Balance cannot be negative: {amount}")
        if amount == 0:
            # Remove zero balances to keep table sparse
            self._balances.pop((holder, asset), None)
        else:
            self._balances[(holder, asset)] = amount

    def add(self, holder: Address, asset: AssetId, delta: int) -> None:
        """
        Add delta to balance (delta may be negative).

        Raises:
            ValueError: If resulting balance would be negative
        """
        current = self.get(holder, asset)
        new_balance = current + delta
        if new_balance < 0:
            raise ValueError(
                f"Insufficient balance: {current} + {delta} = {new_balance} < 0"
            )
        self.set(holder, asset, new_balance)

    def subtract(self, holder: Address, asset: AssetId, delta: Amount) -> None:
        """Subtract a non-negative amount from a balance."""
        if delta < 0:
            raise ValueError(f"Delta must be non-negative: {delta}")
        self.add(holder, asset, -delta)

    def get_all_balances(self) -> Dict[Tuple[Address, AssetId], Amount]:
        """Return a copy of all balances."""
        return dict(self._balances)

    def get_balances_for_asset(self, asset: AssetId) -> Dict[Address, Amount]:
        """Return holder -> amount for a single asset."""
        result = {}
        for (holder, a), amount in self._balances.items():
            if a == asset:
                result[holder] = amount
        return result

    def total_of(self, asset: AssetId) -> Amount:
        """Sum of every holder's balance of `asset`."""
        return sum(self.get_balances_for_asset(asset).values())

    def verify_non_negative(self) -> bool:
        """Verify all balances are non-negative."""
        return all(amount >= 0 for amount in self._balances.values())

    def __repr__(self) -> str:
        return f"BalanceTable({len(self._balances)} entries)"


class AssetLedger:
    """
    In-memory fungible-asset ledger with a designated pool account.

    `transfer_into` and `transfer_out` report success as a bool and never raise
    for an insufficient balance: refusing a transfer is an ordinary outcome for
    an external asset ledger, and the pool engine turns it into `TransferFailed`.
    """

    def __init__(self, pool_account: Address = "pool", balances: Optional[BalanceTable] = None) -> None:
        if not isinstance(pool_account, str) or not pool_account:
            raise ValueError("pool_account must be a non-empty string")
        self.pool_account = pool_account
        self.balances = balances if balances is not None else BalanceTable()

    def deposit(self, holder: Address, asset: AssetId, amount: Amount) -> None:
        """Credit `amount` of `asset` to `holder` (host funding / faucet)."""
        if amount < 0:
            raise ValueError(f"Deposit must be non-negative: {amount}")
        self.balances.add(holder, asset, amount)

    def balance_of(self, holder: Address, asset: AssetId) -> Amount:
        return self.balances.get(holder, asset)

    def transfer(self, asset: AssetId, sender: Address, to: Address, amount: Amount) -> bool:
        if amount < 0 or self.balances.get(sender, asset) < amount:
            return False
        if amount == 0 or sender == to:
            return True
        self.balances.subtract(sender, asset, amount)
        self.balances.add(to, asset, amount)
        return True

    def transfer_into(self, asset: AssetId, sender: Address, amount: Amount) -> bool:
        """Move `amount` of `asset` from `sender` to the pool account."""
        return self.transfer(asset, sender, self.pool_account, amount)

    def transfer_out(self, asset: AssetId, to: Address, amount: Amount) -> bool:
        """Move `amount` of `asset` from the pool account to `to`."""
        return self.transfer(asset, self.pool_account, to, amount)

    def __repr__(self) -> str:
        return f"AssetLedger(pool_account={self.pool_account!r}, {self.balances!r})"
