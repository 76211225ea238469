"""
SimpleSwap Configuration

Loads simpleswap.toml at startup.
Environment variables override TOML values.
"""

from .loader import (
    EngineConfig,
    LoggingConfig,
    SwapConfig,
    load_config,
)

__all__ = [
    "EngineConfig",
    "LoggingConfig",
    "SwapConfig",
    "load_config",
]
