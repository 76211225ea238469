"""
Settlement against the asset ledgers, and atomic rollback.

Every transfer the exchange makes goes through a Settlement so that its
result is checked and, if the operation later fails, inbound transfers
already pulled into custody can be handed back:

    async with atomic(ctx, pool_id, "swap") as settlement:
        await settlement.pull(token_in, sender, amount_in)
        ...                       # reserve / share updates
        await settlement.push(token_out, recipient, amount_out)

On any exception the pool record and its share book are restored from a
checkpoint, staged events are discarded and pulls are refunded. On success
the staged events are committed.

Payouts are irreversible. A multi-leg payout (push_all) that fails after a
leg was delivered commits the operation and records the undelivered legs
in the payout book instead of rolling back.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Awaitable, Callable, List, Sequence, Tuple

from .context import ExchangeContext
from ..exceptions import AssetTransferFailedError, ExchangeError, PayoutDeferredError
from ..tokens.asset import AssetLedger, AssetRegistry

logger = logging.getLogger(__name__)

Movement = Tuple[AssetLedger, str, int]
Payout = Tuple[str, str, int]


class Settlement:
    """Checked transfers between participants and the custody account."""

    def __init__(self, assets: AssetRegistry, custody: str):
        self._assets = assets
        self._custody = custody
        self._pulled: List[Movement] = []
        self._pushed: List[Movement] = []

    @property
    def pulled(self) -> List[Movement]:
        return list(self._pulled)

    @property
    def pushed(self) -> List[Movement]:
        return list(self._pushed)

    def _ledger(self, token: str) -> AssetLedger:
        ledger = self._assets.get(token)
        if ledger is None:
            raise AssetTransferFailedError(f"No asset ledger registered for {token}")
        return ledger

    async def _invoke(
        self,
        description: str,
        call: Callable[..., Awaitable[Any]],
        *args: Any,
    ) -> None:
        try:
            ok = await call(*args)
        except ExchangeError:
            raise
        except Exception as exc:
            logger.error("Transfer failed (%s): %s", description, exc)
            raise AssetTransferFailedError(f"Asset transfer failed: {description}: {exc}") from exc
        if not ok:
            logger.error("Transfer rejected (%s)", description)
            raise AssetTransferFailedError(f"Asset transfer failed: {description}")

    async def pull(self, token: str, payer: str, amount: int) -> None:
        """Move *amount* of *token* from *payer* into custody (payer must have approved custody)."""
        if amount == 0:
            return
        ledger = self._ledger(token)
        await self._invoke(
            f"pull {amount} {token} from {payer}",
            ledger.transfer_from, self._custody, payer, self._custody, amount,
        )
        self._pulled.append((ledger, payer, amount))

    async def push(self, token: str, recipient: str, amount: int) -> None:
        """Move *amount* of *token* out of custody to *recipient*."""
        if amount == 0:
            return
        ledger = self._ledger(token)
        await self._invoke(
            f"push {amount} {token} to {recipient}",
            ledger.transfer, self._custody, recipient, amount,
        )
        self._pushed.append((ledger, recipient, amount))

    async def push_all(self, legs: Sequence[Payout]) -> None:
        """
        Push (token, recipient, amount) legs in order.

        A failure before anything was delivered propagates unchanged. A
        failure after a delivery raises PayoutDeferredError listing the
        legs still owed.
        """
        for index, (token, recipient, amount) in enumerate(legs):
            try:
                await self.push(token, recipient, amount)
            except ExchangeError as exc:
                if not self._pushed:
                    raise
                owed = [leg for leg in legs[index:] if leg[2]]
                raise PayoutDeferredError(f"Payout deferred after partial delivery: {exc}", owed) from exc

    async def unwind(self) -> int:
        """Refund completed pulls, newest first. Returns the number refunded."""
        refunded = 0
        for ledger, payer, amount in reversed(self._pulled):
            try:
                ok = await ledger.transfer(self._custody, payer, amount)
            except Exception as exc:
                logger.critical("Refund of %d %s to %s failed: %s", amount, ledger.address, payer, exc)
                continue
            if ok:
                refunded += 1
            else:
                logger.critical("Refund of %d %s to %s rejected", amount, ledger.address, payer)

        self._pulled = []
        self._pushed = []
        return refunded


@asynccontextmanager
async def atomic(ctx: ExchangeContext, pool_id: str, operation: str) -> AsyncIterator[Settlement]:
    """All-or-nothing scope for one mutating operation on one pool."""
    saved_pool = ctx.store.checkpoint(pool_id)
    saved_book = ctx.shares.checkpoint(pool_id)
    settlement = Settlement(ctx.assets, ctx.custody)

    try:
        yield settlement
    except PayoutDeferredError as exc:
        for token, recipient, amount in exc.owed:
            ctx.payouts.owe(token, recipient, amount)
        ctx.events.commit()
        logger.error(
            "%s on %s committed with %d payout(s) deferred: %s",
            operation, pool_id, len(exc.owed), exc,
        )
        raise
    except BaseException as exc:
        ctx.store.restore(pool_id, saved_pool)
        ctx.shares.restore(pool_id, saved_book)
        dropped = ctx.events.discard()
        refunded = await settlement.unwind()
        logger.warning(
            "%s on %s rolled back (%s: %s); %d staged event(s) dropped, %d refund(s)",
            operation, pool_id, type(exc).__name__, exc, dropped, refunded,
        )
        raise

    ctx.events.commit()
