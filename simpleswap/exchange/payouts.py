"""
Payouts owed by custody.

A withdrawal pays two assets out of custody. Once the first payout has
reached the recipient it cannot be pulled back, so if the second one fails
the withdrawal still commits and the undelivered amount is recorded here
until the recipient claims it.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Tuple

logger = logging.getLogger(__name__)


class PayoutBook:
    """Amounts held in custody on behalf of (token, recipient)."""

    def __init__(self) -> None:
        self._owed: Dict[Tuple[str, str], int] = {}

    def owe(self, token: str, recipient: str, amount: int) -> int:
        if amount <= 0:
            return self.owed(token, recipient)
        total = self._owed.get((token, recipient), 0) + amount
        self._owed[token, recipient] = total
        logger.warning("Payout of %d %s owed to %s (total %d)", amount, token, recipient, total)
        return total

    def owed(self, token: str, recipient: str) -> int:
        return self._owed.get((token, recipient), 0)

    def settle(self, token: str, recipient: str) -> int:
        """Forget the payout once delivered. Returns the amount that was owed."""
        return self._owed.pop((token, recipient), 0)

    def total(self, token: str) -> int:
        return sum(amount for (t, _), amount in self._owed.items() if t == token)

    def items(self) -> List[Tuple[str, str, int]]:
        return sorted((t, r, a) for (t, r), a in self._owed.items())

    def __len__(self) -> int:
        return len(self._owed)
