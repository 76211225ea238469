"""
Reentrancy guard.

Exchange operations suspend only while awaiting an asset ledger. The guard
serializes operations engine-wide and rejects any operation entered from
inside another one (for example from a ledger callback), which ordering
alone cannot prevent when an invariant spans several ledger calls.
"""

from __future__ import annotations

import asyncio
import contextvars
import logging
from contextlib import asynccontextmanager
from enum import Enum
from typing import AsyncIterator, Optional

from ..exceptions import ReentrancyDetectedError

logger = logging.getLogger(__name__)


class GuardState(str, Enum):
    IDLE = "idle"
    BUSY = "busy"


class ReentrancyGuard:
    """
    Idle/Busy guard shared by every mutating operation of one engine.

    Independent callers queue on the lock. A nested entry from the call
    chain of a running operation is detected through a context variable
    and fails with ReentrancyDetectedError instead of deadlocking.
    """

    def __init__(self) -> None:
        self._lock: Optional[asyncio.Lock] = None
        self._inside: contextvars.ContextVar[bool] = contextvars.ContextVar(
            f"simpleswap_guard_{id(self):x}", default=False
        )
        self._state = GuardState.IDLE
        self._operation: Optional[str] = None
        self._pool_id: Optional[str] = None

    @property
    def state(self) -> GuardState:
        return self._state

    @property
    def is_busy(self) -> bool:
        return self._state is GuardState.BUSY

    @property
    def active_operation(self) -> Optional[str]:
        return self._operation

    def state_of(self, pool_id: str) -> GuardState:
        if self._state is GuardState.BUSY and self._pool_id == pool_id:
            return GuardState.BUSY
        return GuardState.IDLE

    def mark_pool(self, pool_id: str) -> None:
        """Record which pool the running operation touches."""
        self._pool_id = pool_id

    @asynccontextmanager
    async def enter(self, operation: str) -> AsyncIterator[None]:
        if self._inside.get():
            logger.error("Reentrant %s during %s rejected", operation, self._operation)
            raise ReentrancyDetectedError(
                f"Reentrancy detected: {operation} called during {self._operation}"
            )

        if self._lock is None:
            # created inside the running loop that first uses it
            self._lock = asyncio.Lock()
        async with self._lock:
            token = self._inside.set(True)
            self._state = GuardState.BUSY
            self._operation = operation
            try:
                yield
            finally:
                self._state = GuardState.IDLE
                self._operation = None
                self._pool_id = None
                self._inside.reset(token)
