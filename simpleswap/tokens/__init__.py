"""
Asset ledgers the exchange settles against.
"""

from .asset import (
    AssetError,
    AssetLedger,
    AssetRegistry,
    AssetToken,
    ApprovalEvent,
    InsufficientAllowanceError,
    InsufficientBalanceError,
    TokenFrozenError,
    TransferEvent,
    UnauthorizedMintError,
    derive_token_address,
)

__all__ = [
    "AssetError",
    "AssetLedger",
    "AssetRegistry",
    "AssetToken",
    "ApprovalEvent",
    "InsufficientAllowanceError",
    "InsufficientBalanceError",
    "TokenFrozenError",
    "TransferEvent",
    "UnauthorizedMintError",
    "derive_token_address",
]
