"""
Pool Store

Owns every pool record, keyed by canonical pool id. Records are created
lazily on the first deposit and never removed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Callable, Dict, List, Optional, Tuple

from .events import EventLog, PoolCreated
from .pairs import PairKey, canonicalize, normalize_asset
from ..exceptions import PoolNotFoundError

logger = logging.getLogger(__name__)


@dataclass
class PoolRecord:
    """
    Reserve state for one canonical pair.

    token0 < token1 (canonical ordering). exists == False implies zero reserves.
    """
    pool_id: str
    token0: str
    token1: str
    reserve0: int = 0
    reserve1: int = 0
    exists: bool = False

    @property
    def pair(self) -> PairKey:
        return PairKey(token0=self.token0, token1=self.token1, pool_id=self.pool_id)

    def reserves_for(self, token_x: str) -> Tuple[int, int]:
        """(reserve of token_x, reserve of the other token)."""
        if self.pair.orient(token_x):
            return self.reserve0, self.reserve1
        return self.reserve1, self.reserve0


class PoolStore:
    """
    Mapping from pool id to PoolRecord.

    Mutated only by the liquidity and swap controllers.
    """

    def __init__(self, events: EventLog, clock: Callable[[], float]) -> None:
        self._pools: Dict[str, PoolRecord] = {}
        self._events = events
        self._clock = clock

    @property
    def pool_count(self) -> int:
        return len(self._pools)

    def pool_ids(self) -> List[str]:
        return sorted(self._pools)

    def exists(self, pool_id: str) -> bool:
        record = self._pools.get(pool_id)
        return record is not None and record.exists

    def peek(self, pool_id: str) -> Optional[PoolRecord]:
        return self._pools.get(pool_id)

    def get(self, pool_id: str) -> PoolRecord:
        record = self._pools.get(pool_id)
        if record is None or not record.exists:
            raise PoolNotFoundError(f"Pool {pool_id} not found")
        return record

    def get_or_create(self, pool_id: str, token0: str, token1: str) -> PoolRecord:
        """Return the pool, creating an empty one (and emitting PoolCreated) if needed."""
        record = self._pools.get(pool_id)
        if record is not None and record.exists:
            return record

        record = PoolRecord(pool_id=pool_id, token0=token0, token1=token1, exists=True)
        self._pools[pool_id] = record
        self._events.emit(PoolCreated(token0=token0, token1=token1, pool_id=pool_id,
                                      timestamp=self._clock()))
        logger.debug("Pool %s staged: %s/%s", pool_id, token0, token1)
        return record

    def get_reserves(self, token_x: str, token_y: str) -> Tuple[int, int]:
        """
        Reserves in the caller's argument order, not the canonical order.

        A pair without a pool has zero reserves.
        """
        pair = canonicalize(token_x, token_y)
        record = self._pools.get(pair.pool_id)
        if record is None or not record.exists:
            return 0, 0
        if pair.orient(normalize_asset(token_x)):
            return record.reserve0, record.reserve1
        return record.reserve1, record.reserve0

    def adjust(self, pool_id: str, delta0: int, delta1: int) -> PoolRecord:
        """Apply signed reserve deltas; reserves never go negative."""
        record = self.get(pool_id)
        reserve0 = record.reserve0 + delta0
        reserve1 = record.reserve1 + delta1
        if reserve0 < 0 or reserve1 < 0:
            raise ValueError(
                f"Reserve underflow on {pool_id}: ({reserve0}, {reserve1})"
            )
        record.reserve0 = reserve0
        record.reserve1 = reserve1
        return record

    # -- Checkpoint / restore (atomic rollback) ------------------------------

    def checkpoint(self, pool_id: str) -> Optional[PoolRecord]:
        record = self._pools.get(pool_id)
        return replace(record) if record is not None else None

    def restore(self, pool_id: str, saved: Optional[PoolRecord]) -> None:
        if saved is None:
            self._pools.pop(pool_id, None)
        else:
            self._pools[pool_id] = replace(saved)

