"""Human-readable reminder and deadline text, and datetime-local conversion."""

from __future__ import annotations

from datetime import datetime, tzinfo
from typing import TYPE_CHECKING

from taskboard_service.utils.timestamps import coerce_instant, to_utc, whole_minutes_until

if TYPE_CHECKING:
    from taskboard_service.features.tasks.schemas import TaskRead

_DATETIME_LOCAL = "%Y-%m-%dT%H:%M"


def format_deadline(value: datetime, tz: tzinfo) -> str:
    """Render an instant like ``Jan 15, 2024 at 10:30 AM`` in ``tz``."""
    local = to_utc(value).astimezone(tz)
    hour = local.hour % 12 or 12
    meridiem = "AM" if local.hour < 12 else "PM"
    return f"{local:%b} {local.day}, {local.year} at {hour}:{local:%M} {meridiem}"


def reminder_message(title: str, deadline: datetime | None, tz: tzinfo) -> str:
    """Body text of an in-app reminder notification."""
    if deadline is None:
        return f'Reminder: "{title}"'
    return f'Reminder: "{title}" - scheduled for {format_deadline(deadline, tz)}'


def desktop_title(title: str) -> str:
    return f"Task Reminder: {title}"


def is_reminder_due(reminder: datetime | None, now: datetime, window_minutes: int = 60) -> bool:
    """True when the reminder is ahead of ``now`` by at most ``window_minutes`` whole minutes."""
    if reminder is None:
        return False
    minutes = whole_minutes_until(reminder, now)
    return 0 < minutes <= window_minutes


def format_time_until_reminder(reminder: datetime | None, now: datetime) -> str:
    if reminder is None:
        return "No reminder set"
    minutes = whole_minutes_until(reminder, now)
    if minutes <= 0:
        return f"Reminder passed {abs(minutes)} minutes ago"
    if minutes < 60:
        return f"{minutes} minutes until reminder"
    hours, rest = divmod(minutes, 60)
    return f"{hours}h {rest}m until reminder"


def format_time_left(task: TaskRead, now: datetime) -> str:
    """Short countdown shown next to a task in the bell dropdown."""
    if task.reminder is None:
        return "Reminder not set" if task.deadline is not None else "No deadline or reminder"
    minutes = whole_minutes_until(task.reminder, now)
    if minutes <= 0:
        return f"reminder passed {abs(minutes)}min ago"
    return f"{minutes}min until reminder"


def to_datetime_local(value: datetime | None, tz: tzinfo) -> str:
    """Format an instant as a ``YYYY-MM-DDTHH:MM`` wall-clock value in ``tz``."""
    if value is None:
        return ""
    return to_utc(value).astimezone(tz).strftime(_DATETIME_LOCAL)


def from_datetime_local(value: str | None, tz: tzinfo) -> datetime | None:
    """Read a ``YYYY-MM-DDTHH:MM`` wall-clock value in ``tz`` as a UTC instant.

    Values carrying an explicit offset are honoured as-is. Empty or
    malformed input yields ``None``.
    """
    if not value or not value.strip():
        return None
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        return coerce_instant(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tz)
    return to_utc(parsed)
