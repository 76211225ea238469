"""
Constant-product pricing  (pure functions, no state)

All arithmetic is integer floor division so rounding never favours the
caller:

    amount_in_after_fee = amount_in * 997 // 1000
    amount_out = amount_in_after_fee * reserve_out // (reserve_in + amount_in_after_fee)

The 0.3% retained fee keeps the post-trade product at or above the
pre-trade product:

    (reserve_in + amount_in) * (reserve_out - amount_out) >= reserve_in * reserve_out
"""

from __future__ import annotations

import math
from typing import Tuple

from ..constants import FEE_DENOMINATOR, FEE_NUMERATOR, PRICE_SCALE
from ..exceptions import EmptyReserveError, InvalidAmountError, ZeroInputError


def require_amount(name: str, value: int) -> int:
    """Reject anything but a non-negative int (bool included)."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidAmountError(f"{name} must be an integer, got {type(value).__name__}")
    if value < 0:
        raise InvalidAmountError(f"{name} must be non-negative, got {value}")
    return value


def quote_output(amount_in: int, reserve_in: int, reserve_out: int) -> int:
    """
    Output of an exact-input swap against (reserve_in, reserve_out).

    Raises:
        ZeroInputError: amount_in is zero
        EmptyReserveError: either reserve is zero
    """
    require_amount("amount_in", amount_in)
    require_amount("reserve_in", reserve_in)
    require_amount("reserve_out", reserve_out)
    if amount_in == 0:
        raise ZeroInputError("AmountIn must be greater than zero")
    if reserve_in == 0:
        raise EmptyReserveError("ReserveIn must be greater than zero")
    if reserve_out == 0:
        raise EmptyReserveError("ReserveOut must be greater than zero")

    amount_in_after_fee = amount_in * FEE_NUMERATOR // FEE_DENOMINATOR
    return amount_in_after_fee * reserve_out // (reserve_in + amount_in_after_fee)


def quote_price(reserve_in: int, reserve_out: int, scale: int = PRICE_SCALE) -> int:
    """Units of asset-out per one unit of asset-in, in *scale* fixed point."""
    require_amount("reserve_in", reserve_in)
    require_amount("reserve_out", reserve_out)
    if reserve_in == 0:
        raise EmptyReserveError("ReserveA is zero")
    return reserve_out * scale // reserve_in


def quote_amount(amount_x: int, reserve_x: int, reserve_y: int) -> int:
    """Amount of y worth *amount_x* at the current reserve ratio."""
    if reserve_x == 0 or reserve_y == 0:
        raise EmptyReserveError("Pool reserves are empty")
    return amount_x * reserve_y // reserve_x


def initial_shares(amount_x: int, amount_y: int) -> int:
    """Geometric mean of the first deposit."""
    return math.isqrt(amount_x * amount_y)


def proportional_shares(
    amount_x: int,
    amount_y: int,
    reserve_x: int,
    reserve_y: int,
    total_shares: int,
) -> int:
    """Shares for a deposit into a funded pool; the scarcer side decides."""
    if reserve_x == 0 or reserve_y == 0:
        raise EmptyReserveError("Pool reserves are empty")
    return min(
        amount_x * total_shares // reserve_x,
        amount_y * total_shares // reserve_y,
    )


def redeem_amounts(
    share_amount: int,
    reserve_x: int,
    reserve_y: int,
    total_shares: int,
) -> Tuple[int, int]:
    """Pro-rata reserves owed for *share_amount* shares, rounded down."""
    if total_shares == 0:
        return 0, 0
    return (
        share_amount * reserve_x // total_shares,
        share_amount * reserve_y // total_shares,
    )


def constant_product_holds(
    reserve_in_before: int,
    reserve_out_before: int,
    reserve_in_after: int,
    reserve_out_after: int,
) -> bool:
    return reserve_in_after * reserve_out_after >= reserve_in_before * reserve_out_before
