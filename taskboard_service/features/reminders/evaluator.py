"""Reminder evaluation: which tasks crossed their reminder instant.

The evaluator is pure apart from the ledger it is handed. A view session
calls ``prune`` and then ``evaluate`` on every reminder tick while holding
its lock, so ledger reads and writes for one task never interleave.

Rules for a task to produce a notification:

1. It is pending and has a reminder.
2. ``now`` is at or past the reminder instant.
3. It is not in the ledger, has no live notification, and its current
   reminder instant has not already fired.
"""

from __future__ import annotations

from collections.abc import Collection, Iterable, Iterator
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta, tzinfo
from uuid import UUID

from taskboard_service.features.reminders.formatting import is_reminder_due, reminder_message
from taskboard_service.features.reminders.notifications import ReminderNotification
from taskboard_service.features.tasks.schemas import TaskRead
from taskboard_service.utils.timestamps import to_utc

DEFAULT_SUPPRESSION_WINDOW = timedelta(hours=1)
DEFAULT_UPCOMING_WINDOW = timedelta(hours=1)


@dataclass(frozen=True, slots=True)
class ReminderMark:
    """Ledger entry: the reminder instant that fired and when it fired."""

    reminder_at: datetime
    notified_at: datetime


class ReminderLedger:
    """Tasks that currently hold a fired reminder.

    Besides the active entries, the ledger remembers per task the reminder
    instant that last produced a notification. Releasing an active entry
    keeps that memory, so an unchanged reminder never fires twice.
    """

    def __init__(self) -> None:
        self._active: dict[UUID, ReminderMark] = {}
        self._fired: dict[UUID, datetime] = {}

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._active

    def __len__(self) -> int:
        return len(self._active)

    def __iter__(self) -> Iterator[UUID]:
        return iter(list(self._active))

    def get(self, task_id: UUID) -> ReminderMark | None:
        return self._active.get(task_id)

    def items(self) -> list[tuple[UUID, ReminderMark]]:
        return list(self._active.items())

    def mark(self, task_id: UUID, reminder_at: datetime, now: datetime) -> ReminderMark:
        entry = ReminderMark(reminder_at=to_utc(reminder_at), notified_at=to_utc(now))
        self._active[task_id] = entry
        self._fired[task_id] = entry.reminder_at
        return entry

    def release(self, task_id: UUID) -> bool:
        """Drop the active entry; the fired instant is kept."""
        return self._active.pop(task_id, None) is not None

    def has_fired(self, task_id: UUID, reminder_at: datetime) -> bool:
        return self._fired.get(task_id) == to_utc(reminder_at)

    def fired_ids(self) -> list[UUID]:
        return list(self._fired)

    def forget(self, task_id: UUID) -> None:
        """Drop every trace of a task (it was deleted or its reminder cleared)."""
        self._active.pop(task_id, None)
        self._fired.pop(task_id, None)


def should_release(
    mark: ReminderMark,
    task: TaskRead | None,
    now: datetime,
    window: timedelta = DEFAULT_SUPPRESSION_WINDOW,
) -> bool:
    """Expiry rule for a ledger entry."""
    if task is None or task.completed or task.reminder is None:
        return True
    if to_utc(task.reminder) != mark.reminder_at:
        return True
    return to_utc(now) - mark.reminder_at > window


def prune(
    ledger: ReminderLedger,
    tasks: Iterable[TaskRead],
    now: datetime,
    window: timedelta = DEFAULT_SUPPRESSION_WINDOW,
) -> list[UUID]:
    """Release ledger entries that no longer apply.

    Fired-instant memory is dropped for tasks missing from ``tasks`` or
    without a reminder, so the ledger stays bounded by the snapshot.

    Returns:
        Ids of the released tasks.
    """
    by_id = {task.id: task for task in tasks}
    released = []
    for task_id, mark in ledger.items():
        task = by_id.get(task_id)
        if not should_release(mark, task, now, window):
            continue
        if task is None or task.reminder is None:
            ledger.forget(task_id)
        else:
            ledger.release(task_id)
        released.append(task_id)

    # Fired memory of tasks that are gone or lost their reminder
    for task_id in ledger.fired_ids():
        task = by_id.get(task_id)
        if task is None or task.reminder is None:
            ledger.forget(task_id)
    return released


def evaluate(
    tasks: Iterable[TaskRead],
    now: datetime,
    ledger: ReminderLedger,
    live_task_ids: Collection[UUID] = (),
    *,
    tz: tzinfo = UTC,
) -> list[ReminderNotification]:
    """Create notifications for tasks whose reminder instant has been crossed.

    Every task that gets a notification is marked in ``ledger`` in the same
    step, so a task appears at most once in the result.
    """
    now = to_utc(now)
    created: list[ReminderNotification] = []
    for task in tasks:
        if task.completed or task.reminder is None:
            continue
        reminder_at = to_utc(task.reminder)
        if now < reminder_at:
            continue
        if task.id in ledger or task.id in live_task_ids or ledger.has_fired(task.id, reminder_at):
            continue
        created.append(
            ReminderNotification(
                task_id=task.id,
                title=task.title,
                message=reminder_message(task.title, task.deadline, tz),
                timestamp=now,
            )
        )
        ledger.mark(task.id, reminder_at, now)
    return created


def has_upcoming_reminders(
    tasks: Iterable[TaskRead],
    now: datetime,
    window: timedelta = DEFAULT_UPCOMING_WINDOW,
) -> bool:
    """True when a pending task's reminder is due within ``window``.

    Only reminders at least one whole minute ahead count.
    """
    limit = window // timedelta(minutes=1)
    return any(not task.completed and is_reminder_due(task.reminder, now, limit) for task in tasks)


def upcoming_reminders(tasks: Iterable[TaskRead], limit: int = 3) -> list[TaskRead]:
    """Pending tasks with a reminder, soonest reminder first."""
    pending = [task for task in tasks if not task.completed and task.reminder is not None]
    pending.sort(key=lambda task: to_utc(task.reminder))
    return pending[:limit]
