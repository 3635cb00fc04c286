"""Logging setup for benchly.

Every benchly logger hangs off the ``benchly`` root. Library modules take
theirs from ``Logger.for_module(__name__)``; nothing is printed until an
application calls ``Logger.configure`` (or ``configure_from_env``).

Usage:
    from benchly.utils.logger import Logger

    Logger.configure(level="INFO", output="stderr")
    log = Logger.get("suite")
    log.info("Starting suite...")
"""

import logging
import sys
from enum import StrEnum
from pathlib import Path
from typing import TextIO

from benchly.models.constants import ENV_LOG_FILE, ENV_LOG_LEVEL
from benchly.utils.env import get_env

ROOT_LOGGER = "benchly"


class LogLevel(StrEnum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    @classmethod
    def parse(cls, level: "str | LogLevel") -> "LogLevel":
        """Accept a LogLevel or a case-insensitive level name."""
        return level if isinstance(level, cls) else cls(str(level).upper())

    @property
    def number(self) -> int:
        """The matching ``logging`` level number."""
        return logging.getLevelNamesMapping()[self.value]


class LoggerNotConfiguredError(Exception):
    """Raised by Logger.get() / set_level() before Logger.configure()."""

    def __init__(self) -> None:
        super().__init__(
            "benchly logging is not configured; call Logger.configure() first"
        )


def _build_handler(output: str | Path | TextIO | None) -> logging.Handler:
    if output is None:
        return logging.StreamHandler(sys.stdout)
    if output == "stderr":
        return logging.StreamHandler(sys.stderr)
    if isinstance(output, str | Path):
        return logging.FileHandler(str(output))
    if hasattr(output, "write"):
        return logging.StreamHandler(output)
    raise ValueError(f"Cannot log to {type(output).__name__}: expected a path or a stream")


def _build_format(timestamps: bool, include_location: bool) -> str:
    fields = ["%(levelname)s", "[%(name)s]", "%(message)s"]
    if include_location:
        fields.insert(2, "[%(filename)s:%(lineno)d]")
    if timestamps:
        fields.insert(0, "%(asctime)s")
    return " ".join(fields)


class Logger:
    """Configures the ``benchly`` logger tree and hands out its loggers.

    Example:
        >>> Logger.configure(level="DEBUG")
        >>> Logger.get("timing").debug("Calibrating clock...")
    """

    _configured: bool = False

    @classmethod
    def configure(
        cls,
        level: str | LogLevel = "INFO",
        output: str | Path | TextIO | None = None,
        timestamps: bool = True,
        include_location: bool = False,
        format_string: str | None = None,
    ) -> None:
        """Install a single handler on the ``benchly`` root.

        Args:
            level: Level name or LogLevel.
            output: None for stdout, ``"stderr"``, a file path, or any stream.
            timestamps: Prefix messages with the time.
            include_location: Add ``[file:line]`` to messages.
            format_string: Explicit format, overriding the two flags above.

        Raises:
            ValueError: If ``level`` or ``output`` is not recognised.
        """
        level = LogLevel.parse(level)
        handler = _build_handler(output)
        handler.setLevel(level.number)
        handler.setFormatter(
            logging.Formatter(format_string or _build_format(timestamps, include_location))
        )

        root = logging.getLogger(ROOT_LOGGER)
        for previous in list(root.handlers):
            root.removeHandler(previous)
            previous.close()
        root.addHandler(handler)
        root.setLevel(level.number)
        root.propagate = False
        cls._configured = True

    @classmethod
    def configure_from_env(cls, timestamps: bool = True) -> None:
        """Configure from BENCHLY_LOG_LEVEL (default WARNING) and BENCHLY_LOG_FILE.

        Logs go to stderr unless a file is named, so they never mix with
        results printed to stdout.
        """
        cls.configure(
            level=get_env(ENV_LOG_LEVEL, default="WARNING"),
            output=get_env(ENV_LOG_FILE, default="stderr"),
            timestamps=timestamps,
        )

    @classmethod
    def for_module(cls, module: str) -> logging.Logger:
        """Logger for a benchly module, usable before configuration.

        ``benchly.timing.cycle`` maps to itself; any other name is placed
        under the ``benchly`` root.
        """
        if module == ROOT_LOGGER or module.startswith(f"{ROOT_LOGGER}."):
            return logging.getLogger(module)
        return logging.getLogger(f"{ROOT_LOGGER}.{module}")

    @classmethod
    def get(cls, name: str | None = None) -> logging.Logger:
        """Logger named ``benchly.<name>`` (the root when ``name`` is empty).

        Raises:
            LoggerNotConfiguredError: If configure() has not been called.
        """
        if not cls._configured:
            raise LoggerNotConfiguredError()
        return cls.for_module(name) if name else logging.getLogger(ROOT_LOGGER)

    @classmethod
    def set_level(cls, level: str | LogLevel) -> None:
        """Change the level of the root and its handlers.

        Raises:
            LoggerNotConfiguredError: If configure() has not been called.
        """
        if not cls._configured:
            raise LoggerNotConfiguredError()
        number = LogLevel.parse(level).number
        root = logging.getLogger(ROOT_LOGGER)
        root.setLevel(number)
        for handler in root.handlers:
            handler.setLevel(number)

    @classmethod
    def is_configured(cls) -> bool:
        return cls._configured
