"""
SimpleSwap engine facade.

Owns the pool store, the share ledger, the event log and the reentrancy
guard, and hands them to the controllers through one ExchangeContext.
Mutating calls are async (they settle against asset ledgers); queries are
plain methods with no side effects.

Usage:
    assets = AssetRegistry()
    assets.register(token_a)
    assets.register(token_b)
    swap = SimpleSwap(assets)

    await token_a.approve(alice, swap.custody, 100)
    await token_b.approve(alice, swap.custody, 100)
    await swap.add_liquidity(alice, token_a.address, token_b.address,
                             100, 100, 0, 0, alice, deadline)
"""

from __future__ import annotations

import time
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

from eth_utils import encode_hex, is_address, keccak, to_checksum_address

from .context import ExchangeContext
from .events import EventLog, ExchangeEvent, LiquidityChanged, Swap
from .guard import GuardState, ReentrancyGuard
from .liquidity import LiquidityController
from .pairs import canonicalize, normalize_account, normalize_asset
from .pool_store import PoolStore
from .pricing import quote_output, quote_price
from .shares import LiquidityShareLedger
from .swap import SwapController
from ..config import SwapConfig
from .settlement import Settlement
from ..exceptions import ConfigurationError, ZeroRecipientError
from ..logger import get_logger
from ..tokens.asset import AssetRegistry

logger = get_logger(__name__)

Deadline = Union[int, float]


class SimpleSwap:
    """Constant-product exchange over any number of asset pairs."""

    def __init__(
        self,
        assets: AssetRegistry,
        config: Optional[SwapConfig] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.config = config or SwapConfig()
        self.config.validate()

        custody = self.config.engine.custody_address
        if not is_address(custody):
            raise ConfigurationError(f"Invalid custody address: {custody!r}")

        events = EventLog()
        self._ctx = ExchangeContext(
            store=PoolStore(events, clock),
            shares=LiquidityShareLedger(),
            events=events,
            assets=assets,
            guard=ReentrancyGuard(),
            custody=to_checksum_address(custody),
            clock=clock,
            price_scale=self.config.engine.price_scale,
        )
        self.liquidity = LiquidityController(self._ctx)
        self.swaps = SwapController(self._ctx)
        logger.info("SimpleSwap engine ready, custody=%s", self.custody)

    # ── Properties ────────────────────────────────────────────────────

    @property
    def custody(self) -> str:
        """Account that holds every pool's reserves. Providers approve it."""
        return self._ctx.custody

    @property
    def assets(self) -> AssetRegistry:
        return self._ctx.assets

    @property
    def guard_state(self) -> GuardState:
        return self._ctx.guard.state

    @property
    def price_scale(self) -> int:
        return self._ctx.price_scale

    @property
    def events(self) -> List[ExchangeEvent]:
        return self._ctx.events.events

    def subscribe(self, callback: Callable[[ExchangeEvent], None]) -> None:
        """Call *callback* with every committed event."""
        self._ctx.events.subscribe(callback)

    def unsubscribe(self, callback: Callable[[ExchangeEvent], None]) -> None:
        self._ctx.events.unsubscribe(callback)

    # ── Mutating operations ───────────────────────────────────────────

    async def add_liquidity(
        self,
        sender: str,
        token_a: str,
        token_b: str,
        amount_a_desired: int,
        amount_b_desired: int,
        amount_a_min: int,
        amount_b_min: int,
        to: str,
        deadline: Deadline,
    ) -> Tuple[int, int, int]:
        return await self.liquidity.add_liquidity(
            sender, token_a, token_b,
            amount_a_desired, amount_b_desired,
            amount_a_min, amount_b_min,
            to, deadline,
        )

    async def remove_liquidity(
        self,
        sender: str,
        token_a: str,
        token_b: str,
        liquidity: int,
        amount_a_min: int,
        amount_b_min: int,
        to: str,
        deadline: Deadline,
    ) -> Tuple[int, int]:
        return await self.liquidity.remove_liquidity(
            sender, token_a, token_b,
            liquidity, amount_a_min, amount_b_min,
            to, deadline,
        )

    async def swap_exact_tokens_for_tokens(
        self,
        sender: str,
        amount_in: int,
        amount_out_min: int,
        path: Sequence[str],
        to: str,
        deadline: Deadline,
    ) -> int:
        return await self.swaps.swap_exact_in(
            sender, amount_in, amount_out_min, path, to, deadline
        )

    async def claim_payout(self, token: str, recipient: str) -> int:
        """
        Deliver a payout a withdrawal could not complete. Returns the amount
        sent, 0 when nothing is owed. On failure the payout stays owed.
        """
        ctx = self._ctx
        async with ctx.guard.enter("claim_payout"):
            token = normalize_asset(token)
            recipient = normalize_account(recipient, ZeroRecipientError)
            amount = ctx.payouts.owed(token, recipient)
            if amount == 0:
                return 0
            await Settlement(ctx.assets, ctx.custody).push(token, recipient, amount)
            ctx.payouts.settle(token, recipient)
        logger.info("Deferred payout of %d %s delivered to %s", amount, token, recipient)
        return amount

    # ── Queries ───────────────────────────────────────────────────────

    def get_pair_hash(self, token_a: str, token_b: str) -> str:
        """Pool id of the pair, whichever order the tokens are given in."""
        return canonicalize(token_a, token_b).pool_id

    def get_reserves(self, token_a: str, token_b: str) -> Tuple[int, int]:
        return self._ctx.store.get_reserves(token_a, token_b)

    def get_price(self, token_a: str, token_b: str) -> int:
        """Units of token_b per unit of token_a, scaled by price_scale."""
        reserve_a, reserve_b = self.get_reserves(token_a, token_b)
        return quote_price(reserve_a, reserve_b, self._ctx.price_scale)

    def get_amount_out(self, amount_in: int, reserve_in: int, reserve_out: int) -> int:
        return quote_output(amount_in, reserve_in, reserve_out)

    def get_liquidity_balance(self, pool_id: str, provider: str) -> int:
        return self._ctx.shares.balance_of(pool_id.lower(), normalize_account(provider))

    def owed_payout(self, token: str, recipient: str) -> int:
        """Amount of *token* custody still owes *recipient* from a deferred payout."""
        return self._ctx.payouts.owed(normalize_asset(token), normalize_account(recipient))

    def pool_exists(self, token_a: str, token_b: str) -> bool:
        return self._ctx.store.exists(canonicalize(token_a, token_b).pool_id)

    def get_pool_info(self, token_a: str, token_b: str) -> Dict[str, Any]:
        """Snapshot of one pool. A pair without a pool reports zeros."""
        pair = canonicalize(token_a, token_b)
        record = self._ctx.store.peek(pair.pool_id)
        exists = record is not None and record.exists
        return {
            "poolId": pair.pool_id,
            "token0": pair.token0,
            "token1": pair.token1,
            "reserve0": record.reserve0 if exists else 0,
            "reserve1": record.reserve1 if exists else 0,
            "totalShares": self._ctx.shares.total_shares(pair.pool_id),
            "providers": len(self._ctx.shares.providers(pair.pool_id)),
            "exists": exists,
        }

    def compute_state_root(self) -> str:
        """
        Deterministic hash over every pool, position and owed payout.

        Equal roots before and after a failed call show that it left no trace.
        """
        store, shares = self._ctx.store, self._ctx.shares
        parts = []
        for pool_id in store.pool_ids():
            record = store.peek(pool_id)
            parts.append(
                f"{pool_id}:{record.reserve0}:{record.reserve1}:{int(record.exists)}:"
                f"{shares.total_shares(pool_id)}"
            )
            for provider in shares.providers(pool_id):
                parts.append(f"{pool_id}:{provider}:{shares.balance_of(pool_id, provider)}")
        for token, recipient, amount in self._ctx.payouts.items():
            parts.append(f"owed:{token}:{recipient}:{amount}")
        return encode_hex(keccak("|".join(parts).encode()))

    def get_stats(self) -> Dict[str, Any]:
        """Exchange-wide statistics."""
        events = self._ctx.events
        liquidity = events.of_type(LiquidityChanged)
        return {
            "pools": self._ctx.store.pool_count,
            "total_swaps": len(events.of_type(Swap)),
            "total_deposits": sum(1 for e in liquidity if e.is_add),
            "total_withdrawals": sum(1 for e in liquidity if not e.is_add),
            "events": len(events),
            "deferred_payouts": len(self._ctx.payouts),
            "guard": self._ctx.guard.state.value,
        }

    def __repr__(self) -> str:
        return f"<SimpleSwap pools={self._ctx.store.pool_count} custody={self.custody}>"
