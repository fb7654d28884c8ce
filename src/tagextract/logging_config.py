"""
Logging setup for the tagextract command-line interface.

The library modules only create loggers via ``logging.getLogger(__name__)``;
handlers are attached here, and only when an application asks for them.
"""

import json
import logging
import sys
from datetime import datetime, timezone

from tagextract.config import settings

LOGGER_NAME = "tagextract"

STANDARD_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class JsonFormatter(logging.Formatter):
    """Render each record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def setup_logging(level: str | None = None, fmt: str | None = None) -> logging.Logger:
    """
    Configure the ``tagextract`` logger with a console handler.

    Args:
        level: Log level name; defaults to ``settings.log_level``
        fmt: ``"standard"`` or ``"json"``; defaults to ``settings.log_format``

    Returns:
        The configured package logger

    Raises:
        ValueError: If the level or format name is unknown
    """
    level_name = (level or settings.log_level).upper()
    numeric_level = logging.getLevelName(level_name)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level_name}")

    format_name = (fmt or settings.log_format).lower()
    if format_name == "json":
        formatter: logging.Formatter = JsonFormatter()
    elif format_name == "standard":
        formatter = logging.Formatter(STANDARD_FORMAT)
    else:
        raise ValueError(f"Unknown log format: {format_name}")

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(numeric_level)

    # Replace handlers from a previous call rather than stacking them
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    logger.propagate = False

    return logger
