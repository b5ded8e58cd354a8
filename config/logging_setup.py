"""
Logging configuration for the checker process.
"""

import json
import logging
from datetime import datetime, timezone

from config.checker_settings import LOG_DATE_FORMAT, LOG_FORMAT, LOG_LEVELS


class JsonLineFormatter(logging.Formatter):
    """One JSON object per log record."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "component": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["error"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def parse_log_level(level: str) -> int:
    """
    Map a config level name to a logging level.

    Raises:
        ValueError: for unknown level names
    """
    try:
        return LOG_LEVELS[level.strip().lower()]
    except KeyError:
        raise ValueError(f"Could not parse log level: {level}")


def setup_logging(level: str = "info", json_output: bool = False) -> logging.Logger:
    """Configure the root logger for the application."""
    log_level = parse_log_level(level)

    logger = logging.getLogger()
    logger.setLevel(log_level)

    # Console handler
    handler = logging.StreamHandler()
    handler.setLevel(log_level)
    if json_output:
        handler.setFormatter(JsonLineFormatter())
    else:
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))

    # Remove any existing handlers to avoid duplicates
    logger.handlers.clear()
    logger.addHandler(handler)

    # urllib3 is chatty at debug level
    logging.getLogger("urllib3").setLevel(max(log_level, logging.INFO))

    return logger
