"""
SimpleSwap Exchange Engine

Constant-product automated market maker over pairs of fungible assets.

Components:
  - Pair canonicalizer (token0 < token1, keccak pool id)
  - Pool store (reserves per canonical pair)
  - Liquidity share ledger (provider positions per pool)
  - Pricing (pure fee-adjusted constant-product quotes)
  - Liquidity and swap controllers (checked settlement, atomic rollback)
  - Reentrancy guard and event log
"""

from .pairs import (
    PairKey,
    canonicalize,
    normalize_account,
    normalize_asset,
    pool_id_for,
    sort_assets,
)
from .pool_store import (
    PoolRecord,
    PoolStore,
)
from .shares import LiquidityShareLedger
from .pricing import (
    constant_product_holds,
    initial_shares,
    proportional_shares,
    quote_amount,
    quote_output,
    quote_price,
    redeem_amounts,
)
from .events import (
    EventLog,
    ExchangeEvent,
    LiquidityChanged,
    PoolCreated,
    Swap,
)
from .guard import (
    GuardState,
    ReentrancyGuard,
)
from .payouts import PayoutBook
from .context import ExchangeContext
from .settlement import (
    Settlement,
    atomic,
)
from .liquidity import (
    LiquidityController,
    size_deposit,
)
from .swap import SwapController
from .engine import SimpleSwap

__all__ = [
    # Pairs
    "PairKey",
    "canonicalize",
    "normalize_account",
    "normalize_asset",
    "pool_id_for",
    "sort_assets",
    # Pool store
    "PoolRecord",
    "PoolStore",
    # Shares
    "LiquidityShareLedger",
    # Pricing
    "constant_product_holds",
    "initial_shares",
    "proportional_shares",
    "quote_amount",
    "quote_output",
    "quote_price",
    "redeem_amounts",
    # Events
    "EventLog",
    "ExchangeEvent",
    "LiquidityChanged",
    "PoolCreated",
    "Swap",
    # Guard
    "GuardState",
    "ReentrancyGuard",
    # Controllers
    "PayoutBook",
    "ExchangeContext",
    "Settlement",
    "atomic",
    "LiquidityController",
    "size_deposit",
    "SwapController",
    # Engine
    "SimpleSwap",
]
