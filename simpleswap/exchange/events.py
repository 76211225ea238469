"""
Exchange events.

Events are append-only. During an operation they are staged; they become
visible only when the operation commits, so a failed call emits nothing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Type, TypeVar, Union

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PoolCreated:
    """Emitted once per pool id, on the first deposit into a pair."""
    token0: str
    token1: str
    pool_id: str
    timestamp: float = field(default=0.0, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "PoolCreated",
            "token0": self.token0,
            "token1": self.token1,
            "poolId": self.pool_id,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class LiquidityChanged:
    """Emitted on every add / remove. Tokens are in the caller's order."""
    token_a: str
    token_b: str
    amount_a: int
    amount_b: int
    share_delta: int
    is_add: bool
    timestamp: float = field(default=0.0, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "LiquidityChanged",
            "tokenA": self.token_a,
            "tokenB": self.token_b,
            "amountA": str(self.amount_a),
            "amountB": str(self.amount_b),
            "shareDelta": str(self.share_delta),
            "isAdd": self.is_add,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class Swap:
    """Emitted on every exact-input swap."""
    token_in: str
    token_out: str
    amount_in: int
    amount_out: int
    timestamp: float = field(default=0.0, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "Swap",
            "tokenIn": self.token_in,
            "tokenOut": self.token_out,
            "amountIn": str(self.amount_in),
            "amountOut": str(self.amount_out),
            "timestamp": self.timestamp,
        }


ExchangeEvent = Union[PoolCreated, LiquidityChanged, Swap]
E = TypeVar("E", PoolCreated, LiquidityChanged, Swap)


class EventLog:
    """
    Ordered event log with a staging area.

    emit() stages; commit() publishes staged events to the log and to
    subscribers; discard() drops them. commit() runs after state has changed,
    so a failing subscriber is logged and skipped.
    """

    def __init__(self) -> None:
        self._events: List[ExchangeEvent] = []
        self._staged: List[ExchangeEvent] = []
        self._subscribers: List[Callable[[ExchangeEvent], None]] = []

    def emit(self, event: ExchangeEvent) -> None:
        self._staged.append(event)

    def commit(self) -> List[ExchangeEvent]:
        published, self._staged = self._staged, []
        for event in published:
            self._events.append(event)
            logger.info("%s %s", type(event).__name__, _describe(event))
            for callback in list(self._subscribers):
                try:
                    callback(event)
                except Exception as e:
                    logger.error("Event subscriber %r failed on %s: %s", callback, type(event).__name__, e)
        return published

    def discard(self) -> int:
        dropped = len(self._staged)
        self._staged = []
        return dropped

    def subscribe(self, callback: Callable[[ExchangeEvent], None]) -> None:
        self._subscribers.append(callback)

    def unsubscribe(self, callback: Callable[[ExchangeEvent], None]) -> None:
        self._subscribers = [c for c in self._subscribers if c != callback]

    @property
    def events(self) -> List[ExchangeEvent]:
        return list(self._events)

    @property
    def pending(self) -> int:
        return len(self._staged)

    def of_type(self, kind: Type[E]) -> List[E]:
        return [e for e in self._events if isinstance(e, kind)]

    def last(self) -> Optional[ExchangeEvent]:
        return self._events[-1] if self._events else None

    def __len__(self) -> int:
        return len(self._events)


def _describe(event: ExchangeEvent) -> str:
    if isinstance(event, PoolCreated):
        return f"{event.pool_id} {event.token0}/{event.token1}"
    if isinstance(event, LiquidityChanged):
        sign = "+" if event.is_add else "-"
        return (f"{event.token_a}/{event.token_b} amounts=({event.amount_a}, {event.amount_b}) "
                f"shares={sign}{event.share_delta}")
    return f"{event.amount_in} {event.token_in} -> {event.amount_out} {event.token_out}"
