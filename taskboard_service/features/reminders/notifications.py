"""In-memory notification store backing the reminder bell."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

from taskboard_service.features.reminders.clock import utc_now

if TYPE_CHECKING:
    from taskboard_service.features.reminders.evaluator import ReminderLedger

logger = logging.getLogger(__name__)


class ReminderNotification(BaseModel):
    """One in-app reminder notification.

    ``id`` identifies the notification itself; several notifications may
    exist for the same task over a session's lifetime.
    """

    id: str = Field(default_factory=lambda: uuid4().hex)
    task_id: UUID
    title: str
    message: str
    timestamp: datetime = Field(default_factory=utc_now)
    is_read: bool = False

    model_config = ConfigDict(validate_assignment=True)


class NotificationStore:
    """Ordered collection of live notifications, oldest first.

    Dismissing a notification releases its task from the reminder ledger;
    clearing all notifications leaves the ledger untouched.
    """

    def __init__(self, ledger: ReminderLedger) -> None:
        self._ledger = ledger
        self._items: list[ReminderNotification] = []

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self):
        return iter(list(self._items))

    @property
    def notifications(self) -> list[ReminderNotification]:
        return list(self._items)

    @property
    def unread_count(self) -> int:
        return sum(1 for item in self._items if not item.is_read)

    @property
    def show_badge(self) -> bool:
        return self.unread_count > 0

    @property
    def live_task_ids(self) -> set[UUID]:
        return {item.task_id for item in self._items}

    def append(self, notifications: Iterable[ReminderNotification]) -> None:
        self._items.extend(notifications)

    def open_dropdown(self) -> list[ReminderNotification]:
        """Mark every notification read and return them in stored order."""
        for item in self._items:
            item.is_read = True
        return list(self._items)

    def dismiss(self, notification_id: str) -> ReminderNotification | None:
        """Remove one notification and release its task from the ledger.

        Returns:
            The removed notification, or None for an unknown id.
        """
        for index, item in enumerate(self._items):
            if item.id == notification_id:
                del self._items[index]
                self._ledger.release(item.task_id)
                return item
        return None

    def clear_all(self) -> int:
        """Drop every notification; returns how many were removed."""
        count = len(self._items)
        self._items.clear()
        return count
