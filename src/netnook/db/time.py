# src/netnook/db/time.py
"""Time utilities for database models and feed items."""

import time
from datetime import UTC, datetime


def utcnow() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(UTC)


def now_millis() -> int:
    """Return the current epoch time in milliseconds."""
    return time.time_ns() // 1_000_000
