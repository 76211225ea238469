"""
SimpleSwap Logging
==================

Root-logger setup shared by every module. Console output goes through a
`rich` handler that colours pool ids, addresses, amounts and event names;
an optional rotating file handler keeps a plain-text copy.

Usage:
    >>> from simpleswap.logger import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.info("Pool created")
"""

import logging
import logging.handlers
import re
import sys
import threading
import time
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional, Union

from rich.console import Console
from rich.highlighter import RegexHighlighter
from rich.logging import RichHandler
from rich.theme import Theme

from .constants import (
    DEFAULT_LOG_DATE_FORMAT,
    DEFAULT_LOG_FORMAT,
    LOG_BACKUP_COUNT,
    LOG_CONSOLE_HIGHLIGHTING,
    LOG_DATE_FORMAT,
    LOG_FILE_OUTPUT,
    LOG_FORMAT,
    LOG_LEVEL,
    LOG_MAX_FILE_SIZE,
)

if TYPE_CHECKING:
    from .config.loader import LoggingConfig


DEFAULT_LOG_FILE = Path(__file__).parent.parent / "logs" / "simpleswap.log"

SWAP_THEME = Theme({
    "simpleswap.address":        "cyan",
    "simpleswap.amount":         "bold white",
    "simpleswap.arrow":          "bold yellow",
    "simpleswap.event":          "bold magenta",
    "simpleswap.level_critical": "bold red reverse",
    "simpleswap.level_debug":    "dim",
    "simpleswap.level_error":    "bold red",
    "simpleswap.level_info":     "green",
    "simpleswap.level_warning":  "yellow",
    "simpleswap.logger_name":    "magenta",
    "simpleswap.pool_id":        "bold blue",
    "simpleswap.timestamp":      "cyan",
})

_DATE_FORMAT_RE = re.compile(r"^(?=.*%[A-Za-z])(?:%%|%[A-Za-z]|[0-9 \t:\-/.,TZ+])+$")


class TerminalSafeFormatter(logging.Formatter):
    """
    Drops ANSI escapes and control characters from the rendered record.

    Token names and symbols come from callers, so a crafted symbol must not be
    able to move the cursor or clear the screen.
    """

    _unsafe = re.compile(
        r"\x1b\[[0-?]*[ -/]*[@-~]"      # CSI sequences
        r"|\x1b[@-Z\\-_]"                # two-byte escapes
        r"|[\x00-\x08\x0B-\x1F\x7F]"     # controls except tab and newline
    )

    @classmethod
    def sanitize(cls, text: str) -> str:
        return cls._unsafe.sub("", text) if text else text

    def format(self, record: logging.LogRecord) -> str:
        return self.sanitize(super().format(record))


class SwapLogHighlighter(RegexHighlighter):
    """Pool ids, addresses, event names, arrows and large integers."""

    base_style = "simpleswap."
    highlights = [
        r"(?P<pool_id>\b0x[0-9a-fA-F]{64}\b)",
        r"(?P<address>\b0x[0-9a-fA-F]{40}\b)",
        r"(?P<arrow>->|<-|→)",
        r"(?P<event>\b(?:PoolCreated|LiquidityChanged|Swap)\b)",
        r"(?P<level_critical>\bCRITICAL\b)",
        r"(?P<level_error>\bERROR\b)",
        r"(?P<level_warning>\bWARNING\b)",
        r"(?P<level_info>\bINFO\b)",
        r"(?P<level_debug>\bDEBUG\b)",
        r"- \w+ - (?P<logger_name>[\w.]+) -",
        r"(?P<amount>(?<![\w.])\d{4,}(?![\w.]))",
        r"(?P<timestamp>^.*?UTC)",
    ]


def check_log_format(log_format: Optional[str]) -> str:
    """Return *log_format* if it renders a sample record, else the default."""
    if not log_format:
        return DEFAULT_LOG_FORMAT
    sample = logging.LogRecord("simpleswap", logging.INFO, __file__, 0, "sample", (), None)
    try:
        logging.Formatter(fmt=log_format).format(sample)
    except (ValueError, KeyError, TypeError) as e:
        print(f"simpleswap.logger - invalid LOG_FORMAT ({e}), using default", file=sys.stderr)
        return DEFAULT_LOG_FORMAT
    return log_format


def check_date_format(date_format: Optional[str]) -> str:
    """Return *date_format* if it is made of strftime directives, else the default."""
    if date_format and _DATE_FORMAT_RE.match(date_format):
        return date_format
    if date_format:
        print("simpleswap.logger - invalid LOG_DATE_FORMAT, using default", file=sys.stderr)
    return DEFAULT_LOG_DATE_FORMAT


def build_formatter() -> TerminalSafeFormatter:
    formatter = TerminalSafeFormatter(
        fmt=check_log_format(LOG_FORMAT),
        datefmt=check_date_format(LOG_DATE_FORMAT) + " UTC",
    )
    formatter.converter = time.gmtime
    return formatter


def console_handler(formatter: logging.Formatter) -> logging.Handler:
    if not LOG_CONSOLE_HIGHLIGHTING:
        handler: logging.Handler = logging.StreamHandler(sys.stdout)
    else:
        handler = RichHandler(
            console=Console(theme=SWAP_THEME, highlight=False),
            highlighter=SwapLogHighlighter(),
            keywords=[],
            markup=False,
            rich_tracebacks=True,
            show_time=False,
            show_level=False,
            show_path=False,
        )
    handler.setFormatter(formatter)
    return handler


def file_handler(path: Path, formatter: logging.Formatter) -> logging.Handler:
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(
        filename=str(path),
        maxBytes=LOG_MAX_FILE_SIZE,
        backupCount=LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setFormatter(formatter)
    return handler


class LogManager:
    """
    Process-wide owner of the root logger's handlers.

    There is one instance; ``configure`` installs handlers once, ``apply``
    replaces them from a ``[logging]`` config section.
    """

    _instance: Optional["LogManager"] = None
    _lock = threading.Lock()

    def __new__(cls) -> "LogManager":
        with cls._lock:
            if cls._instance is None:
                instance = super().__new__(cls)
                instance._handlers = []
                instance._level = logging.INFO
                cls._instance = instance
        return cls._instance

    @property
    def is_configured(self) -> bool:
        return bool(self._handlers)

    @property
    def level(self) -> int:
        return self._level

    def configure(
        self,
        level: Union[str, int, None] = None,
        console: bool = True,
        log_file: Optional[Path] = None,
        force: bool = False,
    ) -> None:
        """
        Install handlers on the root logger.

        Args:
            level: level name or number; defaults to ``LOG_LEVEL``.
            console: attach the console handler.
            log_file: rotate into this file; ``LOG_FILE_OUTPUT`` enables the default path.
            force: replace an existing configuration.
        """
        with self._lock:
            if self._handlers and not force:
                return

            if isinstance(level, int):
                numeric_level = level
            else:
                numeric_level = getattr(logging, str(level or LOG_LEVEL).upper(), logging.INFO)
            if log_file is None and LOG_FILE_OUTPUT:
                log_file = DEFAULT_LOG_FILE

            formatter = build_formatter()
            handlers: List[logging.Handler] = []
            if console:
                handlers.append(console_handler(formatter))
            if log_file is not None:
                handlers.append(file_handler(Path(log_file), formatter))

            root = logging.getLogger()
            for old in self._handlers:
                root.removeHandler(old)
                old.close()
            for handler in handlers:
                handler.setLevel(numeric_level)
                root.addHandler(handler)
            root.setLevel(numeric_level)

            self._handlers = handlers or [logging.NullHandler()]
            self._level = numeric_level

    def apply(self, config: "LoggingConfig") -> None:
        """Reconfigure from a ``[logging]`` section."""
        self.configure(
            level=config.level,
            console=config.console,
            log_file=Path(config.file) if config.file else None,
            force=True,
        )

    def get_logger(self, name: str) -> logging.Logger:
        self.configure()
        return logging.getLogger(name)


def get_logger(name: str) -> logging.Logger:
    """Module logger, configuring the root logger on first use."""
    return LogManager().get_logger(name)


LogManager().configure()
