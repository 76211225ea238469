"""
Shared test accounts, tokens and clock.

Every address is made of decimal digits only, so its EIP-55 checksum form
is the same string and can be compared directly.
"""

from simpleswap.tokens.asset import AssetRegistry, AssetToken

# ── Accounts ──────────────────────────────────────────────────────────
DEPLOYER = "0x" + "40" * 20
ALICE = "0x" + "41" * 20
BOB = "0x" + "42" * 20
CAROL = "0x" + "43" * 20

# ── Assets (TOKEN_A < TOKEN_B < TOKEN_C numerically) ─────────────────
TOKEN_A = "0x" + "11" * 20
TOKEN_B = "0x" + "22" * 20
TOKEN_C = "0x" + "33" * 20
UNREGISTERED = "0x" + "99" * 20
NULL = "0x" + "00" * 20

START_SUPPLY = 10 ** 30
FUNDING = 10 ** 24
ALLOWANCE = 10 ** 30
FAR_FUTURE = 2 ** 62
NOW = 1_700_000_000.0


class FakeClock:
    """Callable clock the tests can move."""

    def __init__(self, now: float = NOW):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_token(symbol="TKA", address=TOKEN_A, supply=START_SUPPLY, deployer=DEPLOYER, cls=AssetToken, **kwargs):
    """Helper to create an asset token at a fixed address."""
    return cls(
        name=f"Token {symbol}",
        symbol=symbol,
        deployer=deployer,
        total_supply=supply,
        address=address,
        **kwargs,
    )


def make_registry(*tokens) -> AssetRegistry:
    registry = AssetRegistry()
    for token in tokens:
        registry.register(token)
    return registry


async def fund(token, account, spender, amount=FUNDING):
    """Give *account* tokens from the deployer and approve *spender*."""
    await token.transfer(DEPLOYER, account, amount)
    await token.approve(account, spender, ALLOWANCE)
