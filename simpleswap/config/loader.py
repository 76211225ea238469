"""
SimpleSwap TOML Configuration Loader

Loads the sections of simpleswap.toml with environment variable overrides.
Every section is a dataclass with from_dict + apply_env; SwapConfig ties
them together.

Environment variable mapping:
    [engine]  custody_address → SIMPLESWAP_CUSTODY_ADDRESS
    [engine]  price_decimals  → SIMPLESWAP_PRICE_DECIMALS
    [logging] level           → SIMPLESWAP_LOG_LEVEL
    (file)                    → SIMPLESWAP_CONFIG
"""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from ..constants import DEFAULT_CUSTODY_ADDRESS, DEFAULT_PRICE_DECIMALS
from ..exceptions import ConfigurationError

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
MAX_PRICE_DECIMALS = 36


def _parse_int(name: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}") from e


@dataclass
class EngineConfig:
    """[engine] section."""
    custody_address: str = DEFAULT_CUSTODY_ADDRESS
    price_decimals: int = DEFAULT_PRICE_DECIMALS

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EngineConfig":
        return cls(
            custody_address=data.get("custody_address", DEFAULT_CUSTODY_ADDRESS),
            price_decimals=_parse_int("engine.price_decimals", data.get("price_decimals", DEFAULT_PRICE_DECIMALS)),
        )

    def apply_env(self) -> None:
        """Override from environment variables."""
        if v := os.environ.get("SIMPLESWAP_CUSTODY_ADDRESS"):
            self.custody_address = v
        if v := os.environ.get("SIMPLESWAP_PRICE_DECIMALS"):
            self.price_decimals = _parse_int("SIMPLESWAP_PRICE_DECIMALS", v)

    @property
    def price_scale(self) -> int:
        return 10 ** self.price_decimals

    def validate(self) -> None:
        if not 0 <= self.price_decimals <= MAX_PRICE_DECIMALS:
            raise ConfigurationError(
                f"price_decimals must be between 0 and {MAX_PRICE_DECIMALS}, got {self.price_decimals}"
            )
        if not self.custody_address:
            raise ConfigurationError("custody_address cannot be empty")


@dataclass
class LoggingConfig:
    """[logging] section."""
    level: str = "INFO"
    console: bool = True
    file: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LoggingConfig":
        return cls(
            level=str(data.get("level", "INFO")).upper(),
            console=bool(data.get("console", True)),
            file=data.get("file"),
        )

    def apply_env(self) -> None:
        if v := os.environ.get("SIMPLESWAP_LOG_LEVEL"):
            self.level = v.upper()

    def validate(self) -> None:
        if self.level not in LOG_LEVELS:
            raise ConfigurationError(f"Invalid log level: {self.level}")


@dataclass
class SwapConfig:
    """Top-level configuration, one attribute per TOML section."""
    engine: EngineConfig = field(default_factory=EngineConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SwapConfig":
        return cls(
            engine=EngineConfig.from_dict(data.get("engine", {})),
            logging=LoggingConfig.from_dict(data.get("logging", {})),
        )

    @classmethod
    def from_file(cls, config_path: str) -> "SwapConfig":
        """
        Load configuration from a TOML file.

        A missing file yields the defaults (with env overrides applied).
        A malformed file raises ConfigurationError.
        """
        path = Path(config_path)
        if not path.exists():
            logger.debug("Config file not found: %s, using defaults", config_path)
            cfg = cls()
            cfg.apply_env()
            cfg.validate()
            return cfg

        try:
            with open(path, "rb") as f:
                raw = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(f"Malformed config file {config_path}: {e}") from e

        cfg = cls.from_dict(raw)
        cfg.apply_env()
        cfg.validate()
        return cfg

    def apply_env(self) -> None:
        """Apply environment variable overrides to all sections."""
        self.engine.apply_env()
        self.logging.apply_env()

    def validate(self) -> bool:
        """
        Validate all sections.

        Raises:
            ConfigurationError: on invalid config
        """
        self.engine.validate()
        self.logging.validate()
        return True

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dict (for diagnostics, NOT for re-creating TOML)."""
        return {
            "engine": {
                "custody_address": self.engine.custody_address,
                "price_decimals": self.engine.price_decimals,
            },
            "logging": {
                "level": self.logging.level,
                "console": self.logging.console,
                "file": self.logging.file,
            },
        }


def load_config(path: Optional[str] = None) -> SwapConfig:
    """
    Load engine configuration.

    Resolution order:
        1. Explicit *path* argument
        2. SIMPLESWAP_CONFIG env var
        3. ./simpleswap.toml in current directory
        4. Defaults (with env overrides)
    """
    if path is None:
        path = os.environ.get("SIMPLESWAP_CONFIG", "simpleswap.toml")

    return SwapConfig.from_file(path)
