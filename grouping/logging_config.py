"""
Centralized logging configuration for the grouping engine.

Provides one log format for every entry point:
Format: 2026-01-06T14:05:52Z [source] LEVEL message

Environment Variables:
    LOG_LEVEL: Set to "DEBUG", "TRACE", or "INFO" (default)
               - INFO: Phase boundaries and run summaries
               - DEBUG: Individual placement decisions
               - TRACE: Per-group scores for every placement

Usage:
    from grouping.logging_config import configure_logging, get_logger

    configure_logging(source="grouping")
    logger = get_logger(__name__)
    logger.info("Grouping run started")
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import UTC, datetime
from typing import TextIO

# Custom TRACE level for very verbose diagnostics
TRACE = 5
logging.addLevelName(TRACE, "TRACE")


def _trace(self: logging.Logger, message: object, *args: object, **kw: object) -> None:
    """Log a message at TRACE level (5)."""
    if self.isEnabledFor(TRACE):
        self._log(TRACE, message, args, **kw)  # type: ignore[arg-type]


logging.Logger.trace = _trace  # type: ignore[attr-defined]


class ISO8601Formatter(logging.Formatter):
    """Formatter producing ISO8601 UTC timestamps.

    Output format: 2026-01-06T14:05:52Z [source] LEVEL message
    """

    def __init__(self, source: str = "grouping"):
        """Initialize formatter with a source identifier.

        Args:
            source: Identifier shown in brackets (e.g., "grouping", "cli")
        """
        self.source = source
        super().__init__()

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created, UTC).strftime("%Y-%m-%dT%H:%M:%SZ")
        message = record.getMessage()

        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"

        return f"{timestamp} [{self.source}] {record.levelname} {message}"


def _level_from_env(debug: bool | None) -> int:
    log_level_env = os.getenv("LOG_LEVEL", "").upper()
    if log_level_env == "TRACE":
        return TRACE
    if log_level_env == "DEBUG" or debug:
        return logging.DEBUG
    return logging.INFO


def configure_logging(
    source: str = "grouping",
    level: int | None = None,
    debug: bool | None = None,
    stream: TextIO | None = None,
) -> logging.Logger:
    """Configure the root logger for an entry point.

    Library code never calls this; only scripts and services that embed the engine do.

    Args:
        source: Source identifier for log messages
        level: Logging level (defaults to INFO, or DEBUG/TRACE from LOG_LEVEL env var)
        debug: Enable debug mode (overrides level to DEBUG)
        stream: Output stream (defaults to stdout)

    Returns:
        Configured root logger
    """
    if level is None:
        level = _level_from_env(debug)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Clear existing handlers to avoid duplicates
    root_logger.handlers.clear()

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(ISO8601Formatter(source=source))
    root_logger.addHandler(handler)

    return root_logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger for the given module name.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
