"""Logging configuration for the URL shortener."""

import json
import logging
import sys
from typing import Optional

# Driver loggers that flood DEBUG output with per-command records
DRIVER_LOGGERS = ("asyncpg", "pymongo")


class JsonFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    json_format: bool = False,
    driver_level: str = "WARNING",
) -> logging.Logger:
    """Setup logging configuration.

    Handlers are attached to the ``shortlink`` logger. Backend loggers
    (``shortlink.postgres``, ``shortlink.mongodb``, ``shortlink.storage``)
    and the web logger ``shortlink.web`` inherit them.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional log file path
        json_format: Whether to use JSON format
        driver_level: Level for the asyncpg and pymongo loggers

    Returns:
        Configured logger
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger("shortlink")
    logger.setLevel(numeric_level)

    # Remove existing handlers
    logger.handlers.clear()

    if json_format:
        formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    for handler in handlers:
        handler.setLevel(numeric_level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    for name in DRIVER_LOGGERS:
        logging.getLogger(name).setLevel(getattr(logging, driver_level.upper(), logging.WARNING))

    return logger
