"""
Claim-token (LP token) balance tracking.

A single claim token is shared by every pair: liquidity for all pools is
accounted in one ledger with one total supply.
"""

from __future__ import annotations

from typing import Dict

from ..errors import InsufficientClaimBalance
from .balances import Address, Amount


class ClaimLedger:
    """
    Claim balance table mapping holder -> amount, with a running total supply.

    Notes:
    - Balances are always non-negative.
    - Zero balances are omitted to keep the table sparse.
    - `mint` and `burn` are the only ways supply changes.
    """

    def __init__(self) -> None:
        self._balances: Dict[Address, Amount] = {}
        self._total_supply: Amount = 0

    def balance_of(self, holder: Address) -> Amount:
        """Get claim balance for `holder`. Returns 0 if not found."""
        return self._balances.get(holder, 0)

    def total_supply(self) -> Amount:
        return self._total_supply

    def _set(self, holder: Address, amount: Amount) -> None:
        if amount == 0:
            self._balances.pop(holder, None)
        else:
            self._balances[holder] = amount

    def mint(self, to: Address, amount: Amount) -> None:
        """Issue `amount` new claim tokens to `to`."""
        if amount < 0:
            raise ValueError(f"Mint amount must be non-negative: {amount}")
        self._set(to, self.balance_of(to) + amount)
        self._total_supply += amount

    def burn(self, holder: Address, amount: Amount) -> None:
        """
        Retire `amount` claim tokens held by `holder`.

        Raises:
            InsufficientClaimBalance: If the holder's balance is below `amount`
        """
        if amount < 0:
            raise ValueError(f"Burn amount must be non-negative: {amount}")
        current = self.balance_of(holder)
        if current < amount:
            raise InsufficientClaimBalance(
                f"Insufficient claim balance for {holder}: {current} < {amount}"
            )
        self._set(holder, current - amount)
        self._total_supply -= amount

    def transfer(self, sender: Address, to: Address, amount: Amount) -> None:
        """Move claim tokens between holders. Supply is unchanged."""
        if amount < 0:
            raise ValueError(f"Transfer amount must be non-negative: {amount}")
        current = self.balance_of(sender)
        if current < amount:
            raise InsufficientClaimBalance(
                f"Insufficient claim balance for {sender}: {current} < {amount}"
            )
        if sender == to:
            return
        self._set(sender, current - amount)
        self._set(to, self.balance_of(to) + amount)

    def get_all_balances(self) -> Dict[Address, Amount]:
        """Return a copy of all claim balances."""
        return dict(self._balances)

    def verify_supply(self) -> bool:
        """Verify total supply equals the sum of all balances."""
        return self._total_supply == sum(self._balances.values())

    def verify_non_negative(self) -> bool:
        return self._total_supply >= 0 and all(amount >= 0 for amount in self._balances.values())

    def __repr__(self) -> str:
        return f"ClaimLedger({len(self._balances)} holders, supply={self._total_supply})"
