"""
SimpleSwap Exceptions

Custom exception classes for the SimpleSwap exchange engine.

Every exchange failure aborts the whole call: ledger state is left exactly
as it was before the call and no event is emitted. PayoutDeferredError is
the one exception: it reports a withdrawal that did commit.
"""


class SimpleSwapException(Exception):
    """Base exception for SimpleSwap."""
    pass


class ConfigurationError(SimpleSwapException):
    """Configuration error."""
    pass


class ExchangeError(SimpleSwapException):
    """Base class for every error raised by an exchange operation."""
    pass


class InvalidAmountError(ExchangeError, ValueError):
    """Amount is not a non-negative integer."""
    pass


class ExpiredError(ExchangeError):
    """Current time is past the caller-supplied deadline."""
    pass


class IdenticalAssetsError(ExchangeError):
    """Both sides of a pair name the same asset."""
    pass


class ZeroAddressError(ExchangeError):
    """Asset or account identifier is the null address or malformed."""
    pass


class ZeroRecipientError(ExchangeError):
    """Recipient is the null address or malformed."""
    pass


class PoolNotFoundError(ExchangeError):
    """No pool exists for the pair."""
    pass


class InsufficientLiquidityMintedError(ExchangeError):
    """A deposit would issue zero shares."""
    pass


class InsufficientAAmountError(ExchangeError):
    """Amount of the first asset is below the caller's minimum."""
    pass


class InsufficientBAmountError(ExchangeError):
    """Amount of the second asset is below the caller's minimum."""
    pass


class InsufficientSharesError(ExchangeError):
    """Provider holds fewer shares than requested."""
    pass


class ZeroSharesError(ExchangeError):
    """Share amount of zero issued or redeemed."""
    pass


class InsufficientOutputAmountError(ExchangeError):
    """Swap output is below the caller's minimum."""
    pass


class InsufficientInputAmountError(ExchangeError):
    """Swap input is not usable."""
    pass


class ZeroInputError(InsufficientInputAmountError):
    """Swap input of zero."""
    pass


class EmptyReserveError(ExchangeError):
    """A reserve needed for pricing is zero."""
    pass


class InvalidPathLengthError(ExchangeError):
    """Swap path does not name exactly two assets."""
    pass


class AssetTransferFailedError(ExchangeError):
    """The asset ledger rejected or failed a transfer."""
    pass


class ReentrancyDetectedError(ExchangeError):
    """An exchange operation was entered while another one is in progress."""
    pass


class InvariantViolationError(ExchangeError):
    """A state change would break a pool invariant."""
    pass


class PayoutDeferredError(ExchangeError):
    """
    A withdrawal committed, but a payout after the first delivered one failed.

    The undelivered amounts stay in custody, owed to their recipients, and
    can be claimed later. ``owed`` lists them as (token, recipient, amount).
    """

    def __init__(self, message, owed=()):
        super().__init__(message)
        self.owed = list(owed)
