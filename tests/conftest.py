import pytest
import pytest_asyncio

from simpleswap.exchange.engine import SimpleSwap

from tests.helpers import (
    ALICE,
    BOB,
    FAR_FUTURE,
    TOKEN_A,
    TOKEN_B,
    TOKEN_C,
    FakeClock,
    fund,
    make_registry,
    make_token,
)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def token_a():
    return make_token("TKA", TOKEN_A)


@pytest.fixture
def token_b():
    return make_token("TKB", TOKEN_B)


@pytest.fixture
def token_c():
    return make_token("TKC", TOKEN_C)


@pytest.fixture
def registry(token_a, token_b, token_c):
    return make_registry(token_a, token_b, token_c)


@pytest.fixture
def engine(registry, clock):
    return SimpleSwap(registry, clock=clock)


@pytest_asyncio.fixture
async def funded(engine, token_a, token_b, token_c):
    """Engine where ALICE and BOB hold every token and have approved custody."""
    for account in (ALICE, BOB):
        for token in (token_a, token_b, token_c):
            await fund(token, account, engine.custody)
    return engine


@pytest_asyncio.fixture
async def seeded(funded):
    """Funded engine with ALICE's (1000, 1000) deposit in the A/B pool."""
    await funded.add_liquidity(ALICE, TOKEN_A, TOKEN_B, 1000, 1000, 0, 0, ALICE, FAR_FUTURE)
    return funded
