"""
Pair canonicalization.

Maps any two asset addresses to a canonical (token0, token1) ordering and a
deterministic pool id, independent of the order the caller names them in.

    token0 < token1 by the numeric value of the 20 address bytes
    pool_id = keccak256(token0 ++ token1)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple, Type

from eth_utils import encode_hex, is_address, keccak, to_canonical_address, to_checksum_address

from ..constants import ADDRESS_SIZE
from ..exceptions import ExchangeError, IdenticalAssetsError, ZeroAddressError

_NULL_BYTES = b"\x00" * ADDRESS_SIZE


@dataclass(frozen=True)
class PairKey:
    """Canonical identity of a pool. token0 sorts before token1."""
    token0: str
    token1: str
    pool_id: str

    def __iter__(self):
        return iter((self.token0, self.token1, self.pool_id))

    def contains(self, token: str) -> bool:
        return token in (self.token0, self.token1)

    def orient(self, token_x: str) -> bool:
        """
        True when *token_x* occupies the token0 slot.

        Callers use this to map their own (x, y) order onto (reserve0, reserve1).
        """
        if token_x == self.token0:
            return True
        if token_x == self.token1:
            return False
        raise ValueError(f"{token_x} is not part of pool {self.pool_id}")

    def other(self, token: str) -> str:
        return self.token1 if self.orient(token) else self.token0


def normalize_account(address: str, error: Type[ExchangeError] = ZeroAddressError) -> str:
    """
    Validate an address and return its checksum form.

    Raises *error* for the null address and for anything that is not a
    20-byte hex address.
    """
    if not isinstance(address, str) or not is_address(address):
        raise error(f"Invalid address: {address!r}")
    if to_canonical_address(address) == _NULL_BYTES:
        raise error("Zero address")
    return to_checksum_address(address)


def normalize_asset(address: str) -> str:
    return normalize_account(address, ZeroAddressError)


def sort_assets(token_x: str, token_y: str) -> Tuple[str, str]:
    """Order two validated, distinct assets by numeric address value."""
    if to_canonical_address(token_x) < to_canonical_address(token_y):
        return token_x, token_y
    return token_y, token_x


def pool_id_for(token0: str, token1: str) -> str:
    return encode_hex(keccak(to_canonical_address(token0) + to_canonical_address(token1)))


def canonicalize(token_x: str, token_y: str) -> PairKey:
    """
    Canonicalize a pair of asset addresses.

    Raises:
        ZeroAddressError: either side is the null address or malformed
        IdenticalAssetsError: both sides name the same asset
    """
    if not isinstance(token_x, str) or not is_address(token_x):
        raise ZeroAddressError(f"Invalid asset address: {token_x!r}")
    if not isinstance(token_y, str) or not is_address(token_y):
        raise ZeroAddressError(f"Invalid asset address: {token_y!r}")
    if to_canonical_address(token_x) == to_canonical_address(token_y):
        raise IdenticalAssetsError("Identical assets")

    token_x = normalize_asset(token_x)
    token_y = normalize_asset(token_y)
    token0, token1 = sort_assets(token_x, token_y)
    return PairKey(token0=token0, token1=token1, pool_id=pool_id_for(token0, token1))
