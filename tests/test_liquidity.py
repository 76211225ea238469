"""
Liquidity lifecycle: first and subsequent deposits, withdrawals, and the
failure paths of both.
"""

import pytest

from simpleswap.exceptions import (
    AssetTransferFailedError,
    ExpiredError,
    IdenticalAssetsError,
    InsufficientAAmountError,
    InsufficientBAmountError,
    InsufficientLiquidityMintedError,
    InsufficientSharesError,
    InvalidAmountError,
    PoolNotFoundError,
    ZeroAddressError,
    ZeroRecipientError,
    ZeroSharesError,
)
from simpleswap.exchange.events import LiquidityChanged, PoolCreated
from simpleswap.exchange.liquidity import size_deposit
from simpleswap.tokens.asset import InsufficientAllowanceError

from tests.helpers import (
    ALICE,
    BOB,
    CAROL,
    FAR_FUTURE,
    FUNDING,
    NOW,
    NULL,
    TOKEN_A,
    TOKEN_B,
    TOKEN_C,
    UNREGISTERED,
)


async def add(engine, x=TOKEN_A, y=TOKEN_B, ax=100, ay=100, ax_min=0, ay_min=0,
              sender=ALICE, to=None, deadline=FAR_FUTURE):
    return await engine.add_liquidity(sender, x, y, ax, ay, ax_min, ay_min, to or sender, deadline)


async def remove(engine, shares, x=TOKEN_A, y=TOKEN_B, ax_min=0, ay_min=0,
                 sender=ALICE, to=None, deadline=FAR_FUTURE):
    return await engine.remove_liquidity(sender, x, y, shares, ax_min, ay_min, to or sender, deadline)


def shares_of(engine, provider, x=TOKEN_A, y=TOKEN_B):
    return engine.get_liquidity_balance(engine.get_pair_hash(x, y), provider)


# ══════════════════════════════════════════════════════════════════════
#  DEPOSIT SIZING (pure)
# ══════════════════════════════════════════════════════════════════════


class TestSizeDeposit:

    def test_first_deposit(self):
        assert size_deposit(100, 100, 0, 0, 0, 0, 0) == (100, 100, 100)

    def test_first_deposit_uneven(self):
        assert size_deposit(100, 400, 0, 0, 0, 0, 0) == (100, 400, 200)

    def test_proportional(self):
        assert size_deposit(50, 50, 0, 0, 100, 100, 100) == (50, 50, 50)

    def test_excess_y_is_left_out(self):
        assert size_deposit(50, 80, 0, 0, 100, 100, 100) == (50, 50, 50)

    def test_excess_x_is_left_out(self):
        assert size_deposit(80, 50, 0, 0, 100, 100, 100) == (50, 50, 50)

    def test_y_below_minimum(self):
        with pytest.raises(InsufficientBAmountError):
            size_deposit(50, 80, 0, 60, 100, 100, 100)

    def test_x_below_minimum(self):
        with pytest.raises(InsufficientAAmountError):
            size_deposit(80, 50, 60, 0, 100, 100, 100)

    def test_first_deposit_minimums(self):
        with pytest.raises(InsufficientAAmountError, match="Insufficient amount provided"):
            size_deposit(100, 100, 200, 0, 0, 0, 0)
        with pytest.raises(InsufficientBAmountError, match="Insufficient amount provided"):
            size_deposit(100, 100, 0, 200, 0, 0, 0)

    def test_zero_shares(self):
        with pytest.raises(InsufficientLiquidityMintedError):
            size_deposit(0, 100, 0, 0, 0, 0, 0)
        with pytest.raises(InsufficientLiquidityMintedError):
            size_deposit(0, 0, 0, 0, 1000, 1000, 1000)


# ══════════════════════════════════════════════════════════════════════
#  ADD LIQUIDITY
# ══════════════════════════════════════════════════════════════════════


class TestAddLiquidity:

    @pytest.mark.asyncio
    async def test_first_deposit(self, funded, token_a, token_b):
        result = await add(funded, ax=100, ay=100)
        assert result == (100, 100, 100)
        assert funded.get_reserves(TOKEN_A, TOKEN_B) == (100, 100)
        assert shares_of(funded, ALICE) == 100
        assert token_a.balance_of(ALICE) == FUNDING - 100
        assert token_b.balance_of(funded.custody) == 100

    @pytest.mark.asyncio
    async def test_first_deposit_events(self, funded):
        await add(funded, TOKEN_B, TOKEN_A, 400, 100)
        created, changed = funded.events
        assert isinstance(created, PoolCreated)
        assert (created.token0, created.token1) == (TOKEN_A, TOKEN_B)
        assert created.pool_id == funded.get_pair_hash(TOKEN_A, TOKEN_B)
        assert changed == LiquidityChanged(TOKEN_B, TOKEN_A, 400, 100, 200, True)
        assert changed.timestamp == NOW

    @pytest.mark.asyncio
    async def test_caller_order_maps_to_canonical_slots(self, funded):
        await add(funded, TOKEN_B, TOKEN_A, 200, 100)
        assert funded.get_reserves(TOKEN_A, TOKEN_B) == (100, 200)
        info = funded.get_pool_info(TOKEN_B, TOKEN_A)
        assert (info["reserve0"], info["reserve1"]) == (100, 200)

    @pytest.mark.asyncio
    async def test_proportional_deposit(self, funded):
        await add(funded, ax=100, ay=100)
        result = await add(funded, ax=50, ay=50, sender=BOB)
        assert result == (50, 50, 50)
        assert funded.get_pool_info(TOKEN_A, TOKEN_B)["totalShares"] == 150
        assert shares_of(funded, BOB) == 50

    @pytest.mark.asyncio
    async def test_only_optimal_amounts_are_pulled(self, funded, token_b):
        await add(funded, ax=100, ay=100)
        before = token_b.balance_of(BOB)
        result = await add(funded, ax=50, ay=80, sender=BOB)
        assert result == (50, 50, 50)
        assert token_b.balance_of(BOB) == before - 50

    @pytest.mark.asyncio
    async def test_pool_created_once(self, funded):
        await add(funded)
        await add(funded, TOKEN_B, TOKEN_A, sender=BOB)
        assert len([e for e in funded.events if isinstance(e, PoolCreated)]) == 1

    @pytest.mark.asyncio
    async def test_shares_to_recipient(self, funded):
        await add(funded, to=CAROL)
        assert shares_of(funded, CAROL) == 100
        assert shares_of(funded, ALICE) == 0

    @pytest.mark.asyncio
    async def test_deadline_equal_to_now_is_valid(self, funded, clock):
        await add(funded, deadline=clock.now)
        assert funded.pool_exists(TOKEN_A, TOKEN_B)

    @pytest.mark.asyncio
    async def test_expired(self, funded, clock):
        with pytest.raises(ExpiredError, match="Expired deadline"):
            await add(funded, deadline=clock.now - 1)
        assert not funded.pool_exists(TOKEN_A, TOKEN_B)

    @pytest.mark.asyncio
    async def test_identical_tokens(self, funded):
        with pytest.raises(IdenticalAssetsError):
            await add(funded, TOKEN_A, TOKEN_A)

    @pytest.mark.asyncio
    async def test_null_token(self, funded):
        with pytest.raises(ZeroAddressError):
            await add(funded, NULL, TOKEN_A)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("recipient", [NULL, "0x1234", ""])
    async def test_bad_recipient(self, funded, recipient):
        with pytest.raises(ZeroRecipientError):
            await funded.add_liquidity(ALICE, TOKEN_A, TOKEN_B, 100, 100, 0, 0, recipient, FAR_FUTURE)
        assert funded.events == []

    @pytest.mark.asyncio
    async def test_negative_amount(self, funded):
        with pytest.raises(InvalidAmountError):
            await add(funded, ax=-1)

    @pytest.mark.asyncio
    async def test_minimum_not_met_on_first_deposit(self, funded, token_a):
        with pytest.raises(InsufficientAAmountError, match="Insufficient amount provided"):
            await add(funded, ax=100, ay=100, ax_min=101)
        assert not funded.pool_exists(TOKEN_A, TOKEN_B)
        assert token_a.balance_of(ALICE) == FUNDING

    @pytest.mark.asyncio
    async def test_minimum_not_met_on_later_deposit(self, funded):
        await add(funded, ax=100, ay=100)
        with pytest.raises(InsufficientBAmountError):
            await add(funded, ax=50, ay=80, ay_min=60, sender=BOB)
        assert funded.get_reserves(TOKEN_A, TOKEN_B) == (100, 100)

    @pytest.mark.asyncio
    async def test_zero_shares_leaves_no_pool(self, funded):
        with pytest.raises(InsufficientLiquidityMintedError):
            await add(funded, ax=0, ay=100)
        assert not funded.pool_exists(TOKEN_A, TOKEN_B)
        assert funded.events == []

    @pytest.mark.asyncio
    async def test_missing_allowance(self, funded, token_a):
        await token_a.transfer(ALICE, CAROL, 1000)
        with pytest.raises(AssetTransferFailedError) as excinfo:
            await add(funded, sender=CAROL)
        assert isinstance(excinfo.value.__cause__, InsufficientAllowanceError)
        assert token_a.balance_of(CAROL) == 1000
        assert not funded.pool_exists(TOKEN_A, TOKEN_B)

    @pytest.mark.asyncio
    async def test_unregistered_asset_refunds_first_pull(self, funded, token_a):
        with pytest.raises(AssetTransferFailedError):
            await add(funded, TOKEN_A, UNREGISTERED)
        assert token_a.balance_of(ALICE) == FUNDING
        assert token_a.balance_of(funded.custody) == 0
        assert not funded.pool_exists(TOKEN_A, UNREGISTERED)
        assert funded.events == []


# ══════════════════════════════════════════════════════════════════════
#  REMOVE LIQUIDITY
# ══════════════════════════════════════════════════════════════════════


class TestRemoveLiquidity:

    @pytest.mark.asyncio
    async def test_partial_withdrawal(self, seeded, token_a, token_b):
        result = await remove(seeded, 500)
        assert result == (500, 500)
        assert seeded.get_reserves(TOKEN_A, TOKEN_B) == (500, 500)
        assert shares_of(seeded, ALICE) == 500
        assert token_a.balance_of(ALICE) == FUNDING - 500
        assert token_b.balance_of(seeded.custody) == 500

    @pytest.mark.asyncio
    async def test_event(self, seeded):
        await remove(seeded, 250, TOKEN_B, TOKEN_A)
        assert seeded.events[-1] == LiquidityChanged(TOKEN_B, TOKEN_A, 250, 250, 250, False)

    @pytest.mark.asyncio
    async def test_amounts_in_caller_order(self, funded):
        await add(funded, ax=100, ay=400)
        assert await remove(funded, 100, TOKEN_B, TOKEN_A) == (200, 50)

    @pytest.mark.asyncio
    async def test_round_trip_exact(self, funded, token_a, token_b):
        _, _, shares = await add(funded, ax=100, ay=400)
        assert await remove(funded, shares) == (100, 400)
        assert funded.get_reserves(TOKEN_A, TOKEN_B) == (0, 0)
        assert funded.get_pool_info(TOKEN_A, TOKEN_B)["totalShares"] == 0
        assert funded.pool_exists(TOKEN_A, TOKEN_B)
        assert token_a.balance_of(ALICE) == FUNDING
        assert token_b.balance_of(ALICE) == FUNDING

    @pytest.mark.asyncio
    async def test_round_trip_with_rounding(self, funded):
        await add(funded, ax=1000, ay=3000)
        _, _, shares = await add(funded, ax=10, ay=30, sender=BOB)
        assert shares == 17
        amount_x, amount_y = await remove(funded, shares, sender=BOB)
        assert (amount_x, amount_y) == (9, 29)
        assert amount_x <= 10 and amount_y <= 30
        assert funded.get_pool_info(TOKEN_A, TOKEN_B)["totalShares"] == 1732
        reserve_x, reserve_y = funded.get_reserves(TOKEN_A, TOKEN_B)
        assert reserve_x >= 1000 and reserve_y >= 3000

    @pytest.mark.asyncio
    async def test_emptied_pool_takes_a_fresh_first_deposit(self, funded):
        _, _, shares = await add(funded, ax=100, ay=100)
        await remove(funded, shares)
        assert await add(funded, ax=100, ay=400, sender=BOB) == (100, 400, 200)

    @pytest.mark.asyncio
    async def test_to_recipient(self, seeded, token_a):
        before = token_a.balance_of(CAROL)
        await remove(seeded, 100, to=CAROL)
        assert token_a.balance_of(CAROL) == before + 100

    @pytest.mark.asyncio
    async def test_more_than_held(self, seeded):
        root = seeded.compute_state_root()
        with pytest.raises(InsufficientSharesError, match="Insufficient liquidity"):
            await remove(seeded, 1001)
        assert seeded.compute_state_root() == root

    @pytest.mark.asyncio
    async def test_not_a_provider(self, seeded):
        with pytest.raises(InsufficientSharesError):
            await remove(seeded, 1, sender=BOB)

    @pytest.mark.asyncio
    async def test_zero_shares(self, seeded):
        with pytest.raises(ZeroSharesError):
            await remove(seeded, 0)

    @pytest.mark.asyncio
    async def test_missing_pool(self, funded):
        with pytest.raises(PoolNotFoundError):
            await remove(funded, 1, TOKEN_A, TOKEN_C)

    @pytest.mark.asyncio
    async def test_minimum_a(self, seeded):
        with pytest.raises(InsufficientAAmountError, match="Insufficient amount received"):
            await remove(seeded, 500, ax_min=501)
        assert shares_of(seeded, ALICE) == 1000

    @pytest.mark.asyncio
    async def test_minimum_b(self, seeded):
        with pytest.raises(InsufficientBAmountError, match="Insufficient amount received"):
            await remove(seeded, 500, ay_min=501)

    @pytest.mark.asyncio
    async def test_expired(self, seeded, clock):
        clock.advance(3600)
        with pytest.raises(ExpiredError):
            await remove(seeded, 100, deadline=clock.now - 1800)

    @pytest.mark.asyncio
    async def test_null_recipient(self, seeded):
        with pytest.raises(ZeroRecipientError):
            await remove(seeded, 100, to=NULL)
