"""
SimpleSwap Package

Core imports are lazily loaded so that importing a submodule does not pull
in the whole engine. For direct module access, import from submodules:

    from simpleswap.exchange import SimpleSwap, canonicalize
    from simpleswap.tokens import AssetToken, AssetRegistry
    from simpleswap.exceptions import ExchangeError
"""

__version__ = "0.1.0"


# Lazy imports to avoid loading everything at package import
def __getattr__(name):
    """Lazy module loading."""
    if name == 'SimpleSwap':
        from .exchange.engine import SimpleSwap
        return SimpleSwap
    elif name == 'AssetToken':
        from .tokens.asset import AssetToken
        return AssetToken
    elif name == 'AssetRegistry':
        from .tokens.asset import AssetRegistry
        return AssetRegistry
    elif name == 'ExchangeError':
        from .exceptions import ExchangeError
        return ExchangeError
    raise AttributeError(f"module 'simpleswap' has no attribute {name!r}")

__all__ = ['SimpleSwap', 'AssetToken', 'AssetRegistry', 'ExchangeError']
