# ==============================
# Time + Rounding Helpers
# ==============================
"""
Small clock and rounding helpers shared by the progress modules.

No I/O. Callers may inject `now` for deterministic output.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Optional


def utc_now(now: Optional[datetime] = None) -> datetime:
    if now is None:
        return datetime.now(timezone.utc)
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now


def to_iso(ts: datetime) -> str:
    """ISO-8601 with millisecond precision and a trailing Z."""
    ts = utc_now(ts).astimezone(timezone.utc)
    return ts.strftime("%Y-%m-%dT%H:%M:%S.") + f"{ts.microsecond // 1000:03d}Z"


def now_iso(now: Optional[datetime] = None) -> str:
    return to_iso(utc_now(now))


def epoch_ms(now: Optional[datetime] = None) -> int:
    return int(utc_now(now).timestamp() * 1000)


def parse_iso(value: object) -> Optional[datetime]:
    """
    Parse an ISO timestamp string (or pass a datetime through).
    Returns None for anything unparseable.
    """
    if isinstance(value, datetime):
        return utc_now(value)
    if not isinstance(value, str) or not value.strip():
        return None
    raw = value.strip()
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        return utc_now(datetime.fromisoformat(raw))
    except ValueError:
        return None


def round_half_up(value: float) -> int:
    # round() is banker's rounding; percentages round .5 up
    return int(math.floor(value + 0.5))
