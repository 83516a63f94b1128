"""Timestamp coercion and comparison helpers.

Every instant handled by the task and reminder code is a timezone-aware UTC
datetime. Naive values are read as UTC; anything that cannot be read as an
instant becomes ``None`` ("no deadline" / "no reminder").
"""

from __future__ import annotations

import math
from datetime import UTC, date, datetime, timedelta, tzinfo
from typing import Any

_MINUTE = timedelta(minutes=1)
_DAY = timedelta(days=1)


def to_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime (naive input is taken as UTC)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def coerce_instant(value: Any) -> datetime | None:
    """Best-effort conversion of ``value`` to an aware UTC datetime.

    Accepts datetimes, ISO-8601 strings (with or without offset, ``Z``
    suffix allowed) and POSIX timestamps in seconds. Empty or malformed
    input yields ``None``.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return to_utc(value)
    if isinstance(value, int | float):
        if not math.isfinite(value):
            return None
        try:
            return datetime.fromtimestamp(value, tz=UTC)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            return to_utc(datetime.fromisoformat(text))
        except ValueError:
            return None
    return None


def local_date(value: datetime, tz: tzinfo) -> date:
    """Calendar date of ``value`` in ``tz``."""
    return to_utc(value).astimezone(tz).date()


def same_local_date(a: datetime, b: datetime, tz: tzinfo) -> bool:
    return local_date(a, tz) == local_date(b, tz)


def whole_minutes_until(target: datetime, now: datetime) -> int:
    """Whole minutes from ``now`` to ``target``, floored (negative when past)."""
    return math.floor((to_utc(target) - to_utc(now)) / _MINUTE)


def whole_days_until(target: datetime, now: datetime) -> int:
    """Days from ``now`` to ``target``, rounded up to the next whole day."""
    return math.ceil((to_utc(target) - to_utc(now)) / _DAY)
