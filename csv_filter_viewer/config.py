"""
Runtime configuration for csv_filter_viewer.

Every setting can be overridden with an environment variable:
    CSV_VIEWER_SOURCE            — Path or http(s) URL of the CSV file
    CSV_VIEWER_ROWS_TO_DISPLAY   — Default number of rows rendered (100)
    CSV_VIEWER_DEBOUNCE_SECONDS  — Delay before a filter change is applied (0.3)
    CSV_VIEWER_FETCH_TIMEOUT     — Timeout in seconds for remote sources (15)
    CSV_VIEWER_LOG_LEVEL         — Logging level name (INFO)
"""

from __future__ import annotations

import logging
import os
from typing import Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

ROWS_PER_PAGE_OPTIONS = (50, 100, 200, 500, 1000)


def _env(name: str, default: T, cast: Callable[[str], T]) -> T:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return cast(raw.strip())
    except ValueError:
        logger.warning("Invalid value %r for %s, using %r", raw, name, default)
        return default


# ── Input ──────────────────────────────────────────────────────
DEFAULT_SOURCE = "data.csv"


def _env_source() -> str:
    source = os.getenv("CSV_VIEWER_SOURCE")
    if source is None:
        return DEFAULT_SOURCE
    if not source.strip():
        logger.warning("CSV_VIEWER_SOURCE is empty, using %s", DEFAULT_SOURCE)
        return DEFAULT_SOURCE
    return source.strip()


SOURCE = _env_source()
FETCH_TIMEOUT = _env("CSV_VIEWER_FETCH_TIMEOUT", 15.0, float)

# ── Display ────────────────────────────────────────────────────
ROWS_TO_DISPLAY = _env("CSV_VIEWER_ROWS_TO_DISPLAY", 100, int)
DEBOUNCE_SECONDS = _env("CSV_VIEWER_DEBOUNCE_SECONDS", 0.3, float)

# ── Logging ────────────────────────────────────────────────────
LOG_LEVEL = os.getenv("CSV_VIEWER_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "[%(asctime)s] %(levelname)s in %(name)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: str = LOG_LEVEL) -> None:
    """Attach a stream handler to the package logger if none is set up."""
    package_logger = logging.getLogger("csv_filter_viewer")
    if not package_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT))
        package_logger.addHandler(handler)
    package_logger.setLevel(getattr(logging, level, logging.INFO))
