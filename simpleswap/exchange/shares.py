"""
Liquidity Share Ledger

Per-pool share balances. The sum of a pool's positions always equals its
total shares; a position that drops to zero is removed.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Tuple

from ..exceptions import InsufficientSharesError, ZeroSharesError

logger = logging.getLogger(__name__)

ShareBook = Tuple[int, Dict[str, int]]


class LiquidityShareLedger:
    """Tracks each provider's claim on each pool, and each pool's total."""

    def __init__(self) -> None:
        self._positions: Dict[str, Dict[str, int]] = {}
        self._totals: Dict[str, int] = {}

    def total_shares(self, pool_id: str) -> int:
        return self._totals.get(pool_id, 0)

    def balance_of(self, pool_id: str, provider: str) -> int:
        return self._positions.get(pool_id, {}).get(provider, 0)

    def providers(self, pool_id: str) -> List[str]:
        return sorted(self._positions.get(pool_id, {}))

    def issue(self, pool_id: str, provider: str, share_amount: int) -> int:
        """Credit *provider*. Returns the provider's new balance."""
        if share_amount <= 0:
            raise ZeroSharesError("Cannot issue zero shares")

        book = self._positions.setdefault(pool_id, {})
        book[provider] = book.get(provider, 0) + share_amount
        self._totals[pool_id] = self._totals.get(pool_id, 0) + share_amount
        logger.debug("Issued %d shares of %s to %s", share_amount, pool_id, provider)
        return book[provider]

    def redeem(self, pool_id: str, provider: str, share_amount: int) -> int:
        """Debit *provider*. Returns the provider's new balance."""
        if share_amount <= 0:
            raise ZeroSharesError("Cannot redeem zero shares")

        balance = self.balance_of(pool_id, provider)
        if balance < share_amount:
            raise InsufficientSharesError(
                f"Insufficient liquidity: {provider} holds {balance}, requested {share_amount}"
            )

        book = self._positions[pool_id]
        remaining = balance - share_amount
        if remaining == 0:
            del book[provider]
        else:
            book[provider] = remaining
        self._totals[pool_id] -= share_amount
        logger.debug("Redeemed %d shares of %s from %s", share_amount, pool_id, provider)
        return remaining

    # -- Checkpoint / restore (atomic rollback) ------------------------------

    def checkpoint(self, pool_id: str) -> ShareBook:
        return self._totals.get(pool_id, 0), dict(self._positions.get(pool_id, {}))

    def restore(self, pool_id: str, saved: ShareBook) -> None:
        total, positions = saved
        if total == 0 and not positions:
            self._totals.pop(pool_id, None)
            self._positions.pop(pool_id, None)
            return
        self._totals[pool_id] = total
        self._positions[pool_id] = dict(positions)
