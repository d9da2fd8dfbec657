"""Unix-epoch normalization for export timestamps."""

from __future__ import annotations

import math
from datetime import UTC, datetime
from numbers import Real
from typing import Any

# Magnitudes at or above this are milliseconds; below are seconds.
MILLISECONDS_THRESHOLD = 1e12


def normalize_timestamp(value: Any) -> datetime | None:
    """Convert a Unix epoch to an aware UTC datetime, handling ms-vs-s ambiguity.

    Returns ``None`` ("unknown") for missing, zero, non-numeric,
    non-finite or out-of-range values; an unknown instant is never
    replaced by a fabricated date.
    """
    if value is None or isinstance(value, bool) or not isinstance(value, Real):
        return None
    ts = float(value)
    if ts == 0 or not math.isfinite(ts):
        return None
    if abs(ts) >= MILLISECONDS_THRESHOLD:
        ts /= 1000.0
    try:
        return datetime.fromtimestamp(ts, tz=UTC)
    except (OverflowError, OSError, ValueError):
        return None


def sort_key(instant: datetime | None) -> float:
    """Ordering key in which an unknown instant is the lowest value."""
    if instant is None:
        return -math.inf
    return instant.timestamp()


def format_instant(instant: datetime | None) -> str | None:
    """Render as ``YYYY-MM-DDTHH:MM:SS.mmmZ``; unknown stays ``None``."""
    if instant is None:
        return None
    return (
        instant.astimezone(UTC)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )
