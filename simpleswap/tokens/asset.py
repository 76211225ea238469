"""
Asset Ledger

The exchange engine moves assets only through the AssetLedger interface:

    - balance_of(account) → int
    - total_supply → int
    - transfer(sender, recipient, amount) → bool
    - transfer_from(spender, sender, recipient, amount) → bool

AssetToken is the in-memory implementation used by the test suite and the
CLI: a fungible token with integer base units, allowances, owner-only
minting and a freeze switch. AssetRegistry maps asset addresses to ledgers.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List, Optional, Protocol, Tuple, runtime_checkable

from eth_utils import is_address, keccak, to_checksum_address

from ..constants import ZERO_ADDRESS
from ..logger import get_logger

logger = get_logger(__name__)

DEFAULT_DECIMALS = 18
MAX_DECIMALS = 18


class AssetError(Exception):
    """Base exception for asset ledger operations."""


class InsufficientBalanceError(AssetError):
    """Debit larger than the account balance."""


class InsufficientAllowanceError(AssetError):
    """Delegated debit larger than the remaining allowance."""


class UnauthorizedMintError(AssetError):
    pass


class TokenFrozenError(AssetError):
    pass


@runtime_checkable
class AssetLedger(Protocol):
    """What the exchange needs from an asset. One instance per asset."""

    @property
    def address(self) -> str: ...

    @property
    def total_supply(self) -> int: ...

    def balance_of(self, account: str) -> int: ...

    async def transfer(self, sender: str, recipient: str, amount: int) -> bool: ...

    async def transfer_from(self, spender: str, sender: str, recipient: str, amount: int) -> bool: ...


@dataclass(frozen=True)
class TokenEvent:
    """A balance or allowance change between two accounts."""

    name: ClassVar[str] = ""
    roles: ClassVar[Tuple[str, str]] = ("from", "to")

    token_symbol: str
    first: str
    second: str
    amount: int
    timestamp: float = field(default_factory=time.time, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        first_role, second_role = self.roles
        return {
            "event": self.name,
            "token": self.token_symbol,
            first_role: self.first,
            second_role: self.second,
            "amount": str(self.amount),
            "timestamp": self.timestamp,
        }


class TransferEvent(TokenEvent):
    """Emitted on every transfer and mint (mints come from the zero address)."""

    name = "Transfer"

    @property
    def sender(self) -> str:
        return self.first

    @property
    def recipient(self) -> str:
        return self.second


class ApprovalEvent(TokenEvent):
    name = "Approval"
    roles = ("owner", "spender")

    @property
    def owner(self) -> str:
        return self.first

    @property
    def spender(self) -> str:
        return self.second


def derive_token_address(deployer: str, symbol: str, salt: int = 0) -> str:
    """Deterministic token address: last 20 bytes of keccak(deployer:symbol:salt)."""
    digest = keccak(f"{deployer.lower()}:{symbol}:{salt}".encode())
    return to_checksum_address(digest[-20:])


def _account(address: str) -> str:
    if not isinstance(address, str) or not is_address(address):
        raise AssetError(f"Invalid account address: {address!r}")
    return to_checksum_address(address)


def _positive(amount: int, action: str) -> int:
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise AssetError(f"{action} amount must be a positive integer, got {amount!r}")
    return amount


class AssetToken:
    """
    Fungible token held entirely in memory.

    Balances and allowances are keyed by checksummed address, so callers may
    pass accounts in any case. The deployer owns the token and is the only
    account allowed to mint.
    """

    def __init__(
        self,
        name: str,
        symbol: str,
        deployer: str,
        decimals: int = DEFAULT_DECIMALS,
        total_supply: int = 0,
        *,
        address: Optional[str] = None,
    ):
        """
        Args:
            name: display name
            symbol: ticker, e.g. "TKA"
            deployer: owner account, credited with the initial supply
            decimals: fractional digits of one whole token
            total_supply: initial supply in base units
            address: token address; derived from deployer and symbol when omitted
        """
        if not name:
            raise AssetError("Token name cannot be empty")
        if not symbol:
            raise AssetError("Token symbol cannot be empty")
        if not 0 <= decimals <= MAX_DECIMALS:
            raise AssetError(f"Decimals must be 0-{MAX_DECIMALS}, got {decimals}")
        if total_supply < 0:
            raise AssetError("Initial supply cannot be negative")

        self.name = name
        self.symbol = symbol
        self.decimals = decimals
        self.owner = _account(deployer)
        self._address = _account(address) if address else derive_token_address(self.owner, symbol)
        self._supply = 0
        self._frozen = False
        self._balances: Dict[str, int] = {}
        self._allowances: Dict[Tuple[str, str], int] = {}
        self._log: List[TokenEvent] = []

        if total_supply:
            self._issue(self.owner, total_supply)
        logger.info("Token %s (%s) at %s, supply=%d", symbol, name, self._address, total_supply)

    @property
    def address(self) -> str:
        return self._address

    @property
    def total_supply(self) -> int:
        return self._supply

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    @property
    def events(self) -> List[TokenEvent]:
        return list(self._log)

    def balance_of(self, account: str) -> int:
        return self._balances.get(_account(account), 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get((_account(owner), _account(spender)), 0)

    def unit(self, whole: int) -> int:
        """Base units for *whole* tokens."""
        return whole * 10 ** self.decimals

    def _check_active(self) -> None:
        if self._frozen:
            raise TokenFrozenError(f"{self.symbol} is frozen")

    async def transfer(self, sender: str, recipient: str, amount: int) -> bool:
        self._check_active()
        _positive(amount, "Transfer")
        sender, recipient = _account(sender), _account(recipient)
        if sender == recipient:
            raise AssetError("Cannot transfer to self")
        self._debit(sender, amount)
        self._credit(sender, recipient, amount)
        return True

    async def approve(self, owner: str, spender: str, amount: int) -> bool:
        """Set (not add to) the allowance of *spender* over *owner*'s balance."""
        self._check_active()
        if isinstance(amount, bool) or not isinstance(amount, int) or amount < 0:
            raise AssetError("Allowance must be a non-negative integer")
        owner, spender = _account(owner), _account(spender)
        self._allowances[owner, spender] = amount
        self._log.append(ApprovalEvent(self.symbol, owner, spender, amount))
        logger.debug("%s allowance %s -> %s = %d", self.symbol, owner, spender, amount)
        return True

    async def transfer_from(self, spender: str, sender: str, recipient: str, amount: int) -> bool:
        """Move *amount* out of *sender* against the allowance granted to *spender*."""
        self._check_active()
        _positive(amount, "Transfer")
        spender, sender, recipient = _account(spender), _account(sender), _account(recipient)

        remaining = self._allowances.get((sender, spender), 0)
        if remaining < amount:
            raise InsufficientAllowanceError(
                f"{spender} may spend {remaining} {self.symbol} of {sender}, asked for {amount}"
            )
        self._debit(sender, amount)
        self._allowances[sender, spender] = remaining - amount
        self._credit(sender, recipient, amount)
        return True

    def mint(self, operator: str, recipient: str, amount: int) -> int:
        """Owner-only mint. Returns the recipient's new balance."""
        self._check_active()
        _positive(amount, "Mint")
        if _account(operator) != self.owner:
            raise UnauthorizedMintError(f"Only {self.owner} may mint {self.symbol}")
        return self._issue(_account(recipient), amount)

    def _issue(self, recipient: str, amount: int) -> int:
        self._supply += amount
        return self._credit(ZERO_ADDRESS, recipient, amount)

    def _debit(self, account: str, amount: int) -> None:
        held = self._balances.get(account, 0)
        if held < amount:
            raise InsufficientBalanceError(f"{account} holds {held} {self.symbol}, needs {amount}")
        self._balances[account] = held - amount

    def _credit(self, source: str, account: str, amount: int) -> int:
        balance = self._balances.get(account, 0) + amount
        self._balances[account] = balance
        self._log.append(TransferEvent(self.symbol, source, account, amount))
        logger.debug("%s %s -> %s %d", self.symbol, source, account, amount)
        return balance

    def freeze(self) -> None:
        """Reject every operation until unfrozen."""
        self._frozen = True
        logger.warning("Token %s frozen", self.symbol)

    def unfreeze(self) -> None:
        self._frozen = False
        logger.info("Token %s unfrozen", self.symbol)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "symbol": self.symbol,
            "address": self._address,
            "decimals": self.decimals,
            "totalSupply": str(self._supply),
            "owner": self.owner,
            "frozen": self._frozen,
            "holders": sum(1 for held in self._balances.values() if held),
        }

    def __repr__(self) -> str:
        return f"<AssetToken {self.symbol} {self._address} supply={self._supply}>"


class AssetRegistry:
    """Address → ledger lookup used by the exchange to reach each asset."""

    def __init__(self, max_assets: int = 10_000):
        self._assets: Dict[str, AssetLedger] = {}
        self._max_assets = max_assets

    def register(self, ledger: AssetLedger) -> AssetLedger:
        """
        Register an asset ledger under its address.

        Raises AssetError if the address is taken or the registry is full.
        """
        address = _account(ledger.address)
        if address in self._assets:
            raise AssetError(f"Asset {address} already registered")
        if len(self._assets) >= self._max_assets:
            raise AssetError(f"Asset registry is full ({self._max_assets})")
        self._assets[address] = ledger
        logger.info("Asset registered: %s", address)
        return ledger

    def get(self, address: str) -> Optional[AssetLedger]:
        if not isinstance(address, str) or not is_address(address):
            return None
        return self._assets.get(to_checksum_address(address))

    def get_or_raise(self, address: str) -> AssetLedger:
        ledger = self.get(address)
        if ledger is None:
            raise AssetError(f"Asset {address} not found in registry")
        return ledger

    def exists(self, address: str) -> bool:
        return self.get(address) is not None

    def list_assets(self) -> List[str]:
        return list(self._assets)

    @property
    def count(self) -> int:
        return len(self._assets)

    def __repr__(self) -> str:
        return f"<AssetRegistry assets={len(self._assets)}>"
