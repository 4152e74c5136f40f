"""Logging setup for secret-rotation.

Modules log through ``logging.getLogger(__name__)``. This module only
decides where those records go and how they look:

- console: ``2025-07-09 14:35:30 INFO  [secret_rotation.rotation] message``
- json: one object per line, for log aggregation

Secret values and tokens are never passed to a logger, so no redaction
happens here.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from enum import IntEnum
from typing import Any, TextIO

ROOT_LOGGER = "secret_rotation"


class LogLevel(IntEnum):
    """Log severity levels."""

    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL

    @classmethod
    def from_string(cls, level: str) -> "LogLevel":
        """Convert string to LogLevel."""
        mapping = {
            "debug": cls.DEBUG,
            "info": cls.INFO,
            "warning": cls.WARNING,
            "warn": cls.WARNING,
            "error": cls.ERROR,
            "critical": cls.CRITICAL,
            "fatal": cls.CRITICAL,
        }
        return mapping.get(level.lower(), cls.INFO)


class JSONFormatter(logging.Formatter):
    """JSON log formatter.

    Example output:
        {"timestamp":"2025-07-09T14:35:30+00:00","level":"info","logger":"...","message":"..."}
    """

    def format(self, record: logging.LogRecord) -> str:
        data: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            data["exception"] = self.formatException(record.exc_info)
        return json.dumps(data, ensure_ascii=False, default=str)


class ConsoleFormatter(logging.Formatter):
    """Human-readable console formatter."""

    # ANSI color codes
    COLORS = {
        logging.DEBUG: "\033[36m",     # Cyan
        logging.INFO: "\033[32m",      # Green
        logging.WARNING: "\033[33m",   # Yellow
        logging.ERROR: "\033[31m",     # Red
        logging.CRITICAL: "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def __init__(
        self,
        *,
        color: bool = False,
        timestamp_format: str = "%Y-%m-%d %H:%M:%S",
    ) -> None:
        super().__init__()
        self._color = color
        self._timestamp_format = timestamp_format

    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.fromtimestamp(record.created).strftime(self._timestamp_format)
        level = record.levelname.ljust(5)
        if self._color:
            level = f"{self.COLORS.get(record.levelno, '')}{level}{self.RESET}"

        result = f"{ts} {level} [{record.name}] {record.getMessage()}"
        if record.exc_info:
            result = f"{result}\n{self.formatException(record.exc_info)}"
        return result


def configure_logging(
    *,
    level: LogLevel | str | int = LogLevel.WARNING,
    format: str = "console",
    stream: TextIO | None = None,
) -> logging.Handler:
    """Install a single handler on the package logger.

    Calling this again replaces the handler installed by the previous call.

    Args:
        level: Log level.
        format: Output format ("console" or "json").
        stream: Destination (defaults to stderr).

    Returns:
        The installed handler.
    """
    if isinstance(level, str):
        level = LogLevel.from_string(level)

    output = stream or sys.stderr
    if format == "json":
        formatter: logging.Formatter = JSONFormatter()
    else:
        formatter = ConsoleFormatter(color=output.isatty())

    logger = logging.getLogger(ROOT_LOGGER)
    for existing in list(logger.handlers):
        if getattr(existing, "_secret_rotation_handler", False):
            logger.removeHandler(existing)

    handler = logging.StreamHandler(output)
    handler.setFormatter(formatter)
    handler._secret_rotation_handler = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    logger.setLevel(int(level))
    return handler
