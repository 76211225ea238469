"""
Liquidity lifecycle: deposits and withdrawals.

Add liquidity
    first deposit (total shares == 0): take both desired amounts as given,
        shares = isqrt(amount_x * amount_y)
    later deposits: keep the pool ratio, the scarcer side decides,
        shares = min(amount_x * total / reserve_x, amount_y * total / reserve_y)

Remove liquidity
    amount_x = shares * reserve_x // total
    amount_y = shares * reserve_y // total

Shares and reserves are updated only after the inbound transfers succeed,
and shares are burned before any outbound transfer.
"""

from __future__ import annotations

import logging
from typing import Tuple, Union

from .context import ExchangeContext
from .events import LiquidityChanged
from .pairs import canonicalize, normalize_account, normalize_asset
from .pricing import (
    initial_shares,
    proportional_shares,
    quote_amount,
    redeem_amounts,
    require_amount,
)
from .settlement import atomic
from ..exceptions import (
    InsufficientAAmountError,
    InsufficientBAmountError,
    InsufficientLiquidityMintedError,
    InsufficientSharesError,
    ZeroRecipientError,
    ZeroSharesError,
)

logger = logging.getLogger(__name__)


def size_deposit(
    amount_x_desired: int,
    amount_y_desired: int,
    amount_x_min: int,
    amount_y_min: int,
    reserve_x: int,
    reserve_y: int,
    total_shares: int,
) -> Tuple[int, int, int]:
    """
    Decide how much of each asset a deposit uses and how many shares it earns.

    Returns (amount_x, amount_y, shares). Pure; both branches share the
    same result shape.
    """
    if total_shares == 0:
        if amount_x_desired < amount_x_min:
            raise InsufficientAAmountError("Insufficient amount provided")
        if amount_y_desired < amount_y_min:
            raise InsufficientBAmountError("Insufficient amount provided")
        amount_x, amount_y = amount_x_desired, amount_y_desired
        shares = initial_shares(amount_x, amount_y)
    else:
        amount_y_optimal = quote_amount(amount_x_desired, reserve_x, reserve_y)
        if amount_y_optimal <= amount_y_desired:
            if amount_y_optimal < amount_y_min:
                raise InsufficientBAmountError("Insufficient amount provided")
            amount_x, amount_y = amount_x_desired, amount_y_optimal
        else:
            amount_x_optimal = quote_amount(amount_y_desired, reserve_y, reserve_x)
            if amount_x_optimal > amount_x_desired or amount_x_optimal < amount_x_min:
                raise InsufficientAAmountError("Insufficient amount provided")
            amount_x, amount_y = amount_x_optimal, amount_y_desired
        shares = proportional_shares(amount_x, amount_y, reserve_x, reserve_y, total_shares)

    if shares == 0:
        raise InsufficientLiquidityMintedError("Insufficient liquidity minted")
    return amount_x, amount_y, shares


class LiquidityController:
    """Adds and removes liquidity on behalf of providers."""

    def __init__(self, ctx: ExchangeContext):
        self.ctx = ctx

    async def add_liquidity(
        self,
        sender: str,
        token_x: str,
        token_y: str,
        amount_x_desired: int,
        amount_y_desired: int,
        amount_x_min: int,
        amount_y_min: int,
        recipient: str,
        deadline: Union[int, float],
    ) -> Tuple[int, int, int]:
        """
        Deposit a pair of assets and issue shares to *recipient*.

        *sender* pays both assets and must have approved the custody account.
        Creates the pool on the first deposit into a pair.

        Returns:
            (amount_x, amount_y, shares_issued), amounts in the caller's order
        """
        ctx = self.ctx
        async with ctx.guard.enter("add_liquidity"):
            ctx.check_deadline(deadline)
            pair = canonicalize(token_x, token_y)
            sender = normalize_account(sender)
            recipient = normalize_account(recipient, ZeroRecipientError)
            require_amount("amount_x_desired", amount_x_desired)
            require_amount("amount_y_desired", amount_y_desired)
            require_amount("amount_x_min", amount_x_min)
            require_amount("amount_y_min", amount_y_min)
            token_x, token_y = normalize_asset(token_x), normalize_asset(token_y)
            ctx.guard.mark_pool(pair.pool_id)

            async with atomic(ctx, pair.pool_id, "add_liquidity") as settlement:
                record = ctx.store.get_or_create(pair.pool_id, pair.token0, pair.token1)
                reserve_x, reserve_y = record.reserves_for(token_x)
                amount_x, amount_y, shares = size_deposit(
                    amount_x_desired, amount_y_desired,
                    amount_x_min, amount_y_min,
                    reserve_x, reserve_y,
                    ctx.shares.total_shares(pair.pool_id),
                )

                await settlement.pull(token_x, sender, amount_x)
                await settlement.pull(token_y, sender, amount_y)

                if pair.orient(token_x):
                    ctx.store.adjust(pair.pool_id, amount_x, amount_y)
                else:
                    ctx.store.adjust(pair.pool_id, amount_y, amount_x)
                ctx.shares.issue(pair.pool_id, recipient, shares)

                ctx.events.emit(LiquidityChanged(
                    token_a=token_x,
                    token_b=token_y,
                    amount_a=amount_x,
                    amount_b=amount_y,
                    share_delta=shares,
                    is_add=True,
                    timestamp=ctx.clock(),
                ))

        logger.debug("add_liquidity %s -> %d shares for %s", pair.pool_id, shares, recipient)
        return amount_x, amount_y, shares

    async def remove_liquidity(
        self,
        sender: str,
        token_x: str,
        token_y: str,
        share_amount: int,
        amount_x_min: int,
        amount_y_min: int,
        recipient: str,
        deadline: Union[int, float],
    ) -> Tuple[int, int]:
        """
        Burn *share_amount* of sender's shares and pay the pro-rata reserves
        to *recipient*.

        Returns:
            (amount_x, amount_y) in the caller's order

        Raises:
            PayoutDeferredError: the first payout was delivered and the second
                failed; the withdrawal stands and the rest is claimable
        """
        ctx = self.ctx
        async with ctx.guard.enter("remove_liquidity"):
            ctx.check_deadline(deadline)
            pair = canonicalize(token_x, token_y)
            sender = normalize_account(sender)
            recipient = normalize_account(recipient, ZeroRecipientError)
            require_amount("share_amount", share_amount)
            require_amount("amount_x_min", amount_x_min)
            require_amount("amount_y_min", amount_y_min)
            token_x, token_y = normalize_asset(token_x), normalize_asset(token_y)

            record = ctx.store.get(pair.pool_id)
            ctx.guard.mark_pool(pair.pool_id)

            if share_amount == 0:
                raise ZeroSharesError("Cannot redeem zero shares")
            held = ctx.shares.balance_of(pair.pool_id, sender)
            if held < share_amount:
                raise InsufficientSharesError(
                    f"Insufficient liquidity: {sender} holds {held}, requested {share_amount}"
                )

            reserve_x, reserve_y = record.reserves_for(token_x)
            amount_x, amount_y = redeem_amounts(
                share_amount, reserve_x, reserve_y, ctx.shares.total_shares(pair.pool_id)
            )
            if amount_x < amount_x_min:
                raise InsufficientAAmountError("Insufficient amount received")
            if amount_y < amount_y_min:
                raise InsufficientBAmountError("Insufficient amount received")

            async with atomic(ctx, pair.pool_id, "remove_liquidity") as settlement:
                ctx.shares.redeem(pair.pool_id, sender, share_amount)
                if pair.orient(token_x):
                    ctx.store.adjust(pair.pool_id, -amount_x, -amount_y)
                else:
                    ctx.store.adjust(pair.pool_id, -amount_y, -amount_x)

                ctx.events.emit(LiquidityChanged(
                    token_a=token_x,
                    token_b=token_y,
                    amount_a=amount_x,
                    amount_b=amount_y,
                    share_delta=share_amount,
                    is_add=False,
                    timestamp=ctx.clock(),
                ))

                await settlement.push_all([
                    (token_x, recipient, amount_x),
                    (token_y, recipient, amount_y),
                ])

        logger.debug("remove_liquidity %s -> (%d, %d) to %s", pair.pool_id, amount_x, amount_y, recipient)
        return amount_x, amount_y
