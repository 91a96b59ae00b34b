"""
vaultcache — Structured Logging

JSON log formatting for the ``vaultcache`` logger tree. Library modules only
call ``logging.getLogger(__name__)``; applications opt in to JSON output with
setup_logging().
"""

import json
import logging
from datetime import UTC, datetime

from ..config import LogLevel, get_config

ROOT_LOGGER = "vaultcache"

_RESERVED_ATTRS = frozenset(
    (
        "args",
        "msg",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "name",
        "message",
    )
)


class JSONFormatter(logging.Formatter):
    """JSON log formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            "timestamp": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        # Fields passed through extra={...}
        for key, value in record.__dict__.items():
            if key not in log_data and not key.startswith("_") and key not in _RESERVED_ATTRS:
                log_data[key] = value

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def setup_logging(level: LogLevel | str | None = None) -> logging.Logger:
    """
    Attach a JSON handler to the ``vaultcache`` logger.

    Args:
        level: Log level; defaults to the LOG_LEVEL setting

    Returns:
        The configured package logger
    """
    if level is None:
        level = get_config().log_level
    if isinstance(level, LogLevel):
        level = level.value

    logger = logging.getLogger(ROOT_LOGGER)
    logger.handlers.clear()

    handler = logging.StreamHandler()
    handler.setFormatter(JSONFormatter())
    logger.addHandler(handler)
    logger.setLevel(level.upper())
    logger.propagate = False

    return logger
