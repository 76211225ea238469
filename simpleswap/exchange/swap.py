"""
Exact-input swaps on a single pool.

The caller names the direction with a two-entry path [token_in, token_out].
Reserves are read in path order, priced, and written back through the
pool's canonical slots before the output leaves custody.
"""

from __future__ import annotations

import logging
from typing import Sequence, Union

from .context import ExchangeContext
from .events import Swap
from .pairs import canonicalize, normalize_account, normalize_asset
from .pricing import constant_product_holds, quote_output, require_amount
from .settlement import atomic
from ..constants import SWAP_PATH_LENGTH
from ..exceptions import (
    InsufficientOutputAmountError,
    InvalidPathLengthError,
    InvariantViolationError,
    ZeroRecipientError,
)

logger = logging.getLogger(__name__)


class SwapController:
    """Executes exact-input swaps against the pool store."""

    def __init__(self, ctx: ExchangeContext):
        self.ctx = ctx

    async def swap_exact_in(
        self,
        sender: str,
        amount_in: int,
        amount_out_min: int,
        path: Sequence[str],
        recipient: str,
        deadline: Union[int, float],
    ) -> int:
        """
        Sell exactly *amount_in* of path[0] for path[1].

        Raises:
            InvalidPathLengthError: path does not have exactly two entries
            PoolNotFoundError: no pool for the pair
            InsufficientOutputAmountError: output below amount_out_min, or zero
        """
        ctx = self.ctx
        async with ctx.guard.enter("swap"):
            ctx.check_deadline(deadline)
            if isinstance(path, (str, bytes)) or len(path) != SWAP_PATH_LENGTH:
                raise InvalidPathLengthError("Invalid path length")

            pair = canonicalize(path[0], path[1])
            sender = normalize_account(sender)
            recipient = normalize_account(recipient, ZeroRecipientError)
            require_amount("amount_in", amount_in)
            require_amount("amount_out_min", amount_out_min)
            token_in, token_out = normalize_asset(path[0]), normalize_asset(path[1])

            record = ctx.store.get(pair.pool_id)
            ctx.guard.mark_pool(pair.pool_id)

            reserve_in, reserve_out = record.reserves_for(token_in)
            amount_out = quote_output(amount_in, reserve_in, reserve_out)
            if amount_out == 0 or amount_out < amount_out_min:
                raise InsufficientOutputAmountError("Insufficient output amount")

            async with atomic(ctx, pair.pool_id, "swap") as settlement:
                await settlement.pull(token_in, sender, amount_in)

                if pair.orient(token_in):
                    record = ctx.store.adjust(pair.pool_id, amount_in, -amount_out)
                else:
                    record = ctx.store.adjust(pair.pool_id, -amount_out, amount_in)

                after_in, after_out = record.reserves_for(token_in)
                if not constant_product_holds(reserve_in, reserve_out, after_in, after_out):
                    raise InvariantViolationError(
                        f"Constant product decreased: {reserve_in * reserve_out} -> {after_in * after_out}"
                    )

                await settlement.push(token_out, recipient, amount_out)

                ctx.events.emit(Swap(
                    token_in=token_in,
                    token_out=token_out,
                    amount_in=amount_in,
                    amount_out=amount_out,
                    timestamp=ctx.clock(),
                ))

        logger.debug("swap %s: %d %s -> %d %s", pair.pool_id, amount_in, token_in, amount_out, token_out)
        return amount_out
