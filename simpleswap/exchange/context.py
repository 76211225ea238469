"""
Shared state handed to the controllers.

One ExchangeContext per engine; controllers never hold state of their own.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Union

from .events import EventLog
from .guard import ReentrancyGuard
from .payouts import PayoutBook
from .pool_store import PoolStore
from .shares import LiquidityShareLedger
from ..constants import PRICE_SCALE
from ..exceptions import ExpiredError, InvalidAmountError
from ..tokens.asset import AssetRegistry


@dataclass
class ExchangeContext:
    store: PoolStore
    shares: LiquidityShareLedger
    events: EventLog
    assets: AssetRegistry
    guard: ReentrancyGuard
    custody: str
    clock: Callable[[], float]
    price_scale: int = PRICE_SCALE
    payouts: PayoutBook = field(default_factory=PayoutBook)

    def check_deadline(self, deadline: Union[int, float]) -> None:
        """Fail when the current time is past *deadline*. Checked once, at entry."""
        if isinstance(deadline, bool) or not isinstance(deadline, (int, float)):
            raise InvalidAmountError(f"deadline must be a number, got {type(deadline).__name__}")
        if self.clock() > deadline:
            raise ExpiredError("Expired deadline")
