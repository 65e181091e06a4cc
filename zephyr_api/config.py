"""
Runtime configuration for Zephyr API.

Every setting has a default and can be overridden through an
environment variable of the same name prefixed with ``ZEPHYR_``.
"""

import logging
import os
import sys


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return float(raw)


# SQLite database URL - file-based storage for the key-value table
DATABASE_URL = os.environ.get("ZEPHYR_DATABASE_URL", "sqlite:///./zephyr_api.db")

# Ceiling for a single request round trip, in seconds
REQUEST_TIMEOUT = _env_float("ZEPHYR_REQUEST_TIMEOUT", 30.0)

# Maximum number of entries kept in the history log
HISTORY_MAX_ENTRIES = _env_int("ZEPHYR_HISTORY_MAX_ENTRIES", 100)

# Well-known key under which the history log is stored
HISTORY_STORAGE_KEY = os.environ.get("ZEPHYR_HISTORY_KEY", "zephyr.history")

LOG_LEVEL = os.environ.get("ZEPHYR_LOG_LEVEL", "INFO").upper()

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Attach a console handler to the package logger."""
    logger = logging.getLogger("zephyr_api")
    logger.setLevel(level or LOG_LEVEL)
    if logger.handlers:
        return
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
