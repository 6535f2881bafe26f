"""Time helpers."""

from __future__ import annotations

import time
from datetime import datetime, timezone

DAY_MS = 24 * 60 * 60 * 1000


def now_ms() -> int:
    """Return current timestamp in milliseconds."""
    return int(time.time() * 1000)


def ms_to_datetime(value: int | None) -> datetime | None:
    if value is None:
        return None
    return datetime.fromtimestamp(int(value) / 1000, tz=timezone.utc)


def add_days_ms(timestamp_ms: int, days: int) -> int:
    """Shift a millisecond timestamp by whole days."""
    return timestamp_ms + days * DAY_MS
