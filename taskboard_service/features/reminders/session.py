"""Per-user view session: snapshot, reminder engine and task table.

A view session is mounted while a client has the task page open. It owns
the authoritative task snapshot for that user, keeps it current from the
change feed, and drives two tickers: the reminder ticker (evaluates
reminders) and the table ticker (refreshes the table clock).

Every tick and every user action runs under the session lock, so no
ledger or notification change is ever observed half-applied.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import TYPE_CHECKING, Protocol
from uuid import UUID

from taskboard_service.features.reminders.clock import Ticker, utc_now
from taskboard_service.features.reminders.evaluator import (
    ReminderLedger,
    evaluate,
    has_upcoming_reminders,
    prune,
    upcoming_reminders,
)
from taskboard_service.features.reminders.formatting import (
    desktop_title,
    format_deadline,
    format_time_left,
)
from taskboard_service.features.reminders.notifications import (
    NotificationStore,
    ReminderNotification,
)
from taskboard_service.features.reminders.notifier import DesktopNotifier, PermissionState
from taskboard_service.features.reminders.schemas import BellState, UpcomingReminder
from taskboard_service.features.tasks.events import ChangeOperation, TaskChangedEvent
from taskboard_service.features.taskview.engine import TaskViewEngine, available_categories
from taskboard_service.features.taskview.filters import TaskFilters
from taskboard_service.features.taskview.schemas import TaskRow, TaskTableView
from taskboard_service.features.taskview.sorting import SortColumn, SortState
from taskboard_service.infra.logging import get_lazy_logger
from taskboard_service.infra.metrics.prometheus import (
    reminder_desktop_notifications_total,
    reminder_notifications_total,
    reminder_tick_duration_seconds,
)
from taskboard_service.infra.realtime import ChangeFeedClosedError

if TYPE_CHECKING:
    from taskboard_service.core.settings import ReminderSettings
    from taskboard_service.features.tasks.schemas import TaskRead
    from taskboard_service.infra.realtime import ChangeFeed, Subscription

logger = logging.getLogger(__name__)

SessionListener = Callable[[str, dict], Awaitable[None]]


class TaskSource(Protocol):
    """Read access to a user's tasks with the category resolved."""

    async def list_tasks(self, user_id: str) -> list[TaskRead]: ...

    async def get_task(self, user_id: str, task_id: UUID) -> TaskRead | None: ...


class ReminderSession:
    """View session of one user.

    Example:
        session = ReminderSession("user-1", source, feed, LoggingNotifier(), settings)
        await session.start()
        state = session.bell_state()
        await session.stop()
    """

    def __init__(
        self,
        user_id: str,
        source: TaskSource,
        feed: ChangeFeed | None,
        notifier: DesktopNotifier,
        settings: ReminderSettings,
        *,
        now: Callable[[], datetime] = utc_now,
    ) -> None:
        self.user_id = user_id
        self.settings = settings
        self.tz = settings.tz
        self.notifier = notifier
        self.ledger = ReminderLedger()
        self.store = NotificationStore(self.ledger)
        self.engine = TaskViewEngine(self.tz)

        self._source = source
        self._feed = feed
        self._lock = asyncio.Lock()
        self._tasks: list[TaskRead] = []
        self._version = 0
        self._updating: set[UUID] = set()
        self._listeners: list[SessionListener] = []
        self._subscription: Subscription | None = None
        self._consumer: asyncio.Task[None] | None = None
        self._started = False
        self._lazy = get_lazy_logger(__name__, user_id=user_id)

        self._reminder_ticker = Ticker(
            settings.tick_seconds, self.tick, now=now, name=f"reminders:{user_id}"
        )
        self._table_ticker = Ticker(
            settings.view_tick_seconds, self._table_tick, now=now, name=f"table:{user_id}"
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def started(self) -> bool:
        return self._started

    @property
    def live_updates(self) -> bool:
        return self._subscription is not None and not self._subscription.closed

    async def start(self) -> None:
        """Load the snapshot, subscribe to changes, start both tickers."""
        if self._started:
            return
        tasks = await self._source.list_tasks(self.user_id)
        async with self._lock:
            self._tasks = list(tasks)
            self._version += 1

        if self.notifier.permission is PermissionState.DEFAULT:
            await self.notifier.request_permission()

        self._subscribe()
        self._started = True
        self._reminder_ticker.start()
        self._table_ticker.start()
        self._table_ticker.sample()
        await self.tick(self._reminder_ticker.sample())

        logger.info(
            "View session mounted",
            extra={
                "user_id": self.user_id,
                "task_count": len(self._tasks),
                "live_updates": self.live_updates,
                "operation": "session.start",
            },
        )

    async def stop(self) -> None:
        """Stop both tickers and the change feed consumer."""
        if not self._started:
            return
        self._started = False
        await self._reminder_ticker.stop()
        await self._table_ticker.stop()

        consumer, self._consumer = self._consumer, None
        if consumer is not None:
            consumer.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await consumer
        if self._subscription is not None:
            if self._feed is not None:
                self._feed.unsubscribe(self._subscription)
            self._subscription = None
        self._listeners.clear()
        logger.info("View session dismounted", extra={"user_id": self.user_id, "operation": "session.stop"})

    def _subscribe(self) -> None:
        if self._feed is None:
            logger.warning(
                "No change feed, view session runs on its initial snapshot",
                extra={"user_id": self.user_id, "operation": "session.subscribe"},
            )
            return
        try:
            self._subscription = self._feed.subscribe(self.user_id)
        except ChangeFeedClosedError as exc:
            logger.warning(
                "Change feed subscription failed, continuing on last snapshot",
                extra={"user_id": self.user_id, "error": str(exc), "operation": "session.subscribe"},
            )
            return
        self._consumer = asyncio.create_task(
            self._consume(self._subscription), name=f"feed:{self.user_id}"
        )

    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------

    @property
    def tasks(self) -> list[TaskRead]:
        return list(self._tasks)

    @property
    def version(self) -> int:
        return self._version

    @property
    def updating(self) -> frozenset[UUID]:
        return frozenset(self._updating)

    async def _consume(self, subscription: Subscription) -> None:
        async for event in subscription:
            if not isinstance(event, TaskChangedEvent):
                continue
            try:
                await self.apply_change(event)
            except Exception:
                logger.exception(
                    "Failed to apply task change",
                    extra={
                        "user_id": self.user_id,
                        "task_id": str(event.task_id),
                        "operation": "session.apply_change",
                        **event.to_log_extra(),
                    },
                )

    async def apply_change(self, event: TaskChangedEvent) -> None:
        """Merge one change feed event into the snapshot.

        Inserts and updates re-read the task so the category is resolved;
        an update for a task that no longer exists removes it.
        """
        task = None
        if event.operation is not ChangeOperation.DELETE:
            task = await self._source.get_task(self.user_id, event.task_id)

        async with self._lock:
            if event.operation is ChangeOperation.DELETE or task is None:
                self._remove(event.task_id)
            elif event.operation is ChangeOperation.INSERT:
                if not any(item.id == task.id for item in self._tasks):
                    self._tasks.insert(0, task)
            else:
                self._replace(task)
            self._updating.discard(event.task_id)
            self._version += 1

        self._lazy.debug(lambda: f"applied {event.operation} {event.task_id} (version {self._version})")
        await self._emit("table", self.table().model_dump(mode="json"))

    def begin_update(self, task_id: UUID) -> None:
        """Mark ``task_id`` as having an edit in flight."""
        self._updating.add(task_id)

    def cancel_update(self, task_id: UUID) -> None:
        self._updating.discard(task_id)

    async def apply_confirmed(self, task: TaskRead) -> None:
        """Replace a task with the record the server confirmed.

        A later snapshot from the change feed still replaces this record, and
        a confirmation older than the copy already held is dropped.
        """
        async with self._lock:
            self._updating.discard(task.id)
            current = next((item for item in self._tasks if item.id == task.id), None)
            if current is not None and current.updated_at > task.updated_at:
                self._lazy.debug(lambda: f"stale confirmation for {task.id} ignored")
                return
            self._replace(task)
            self._version += 1

    def _replace(self, task: TaskRead) -> None:
        for index, item in enumerate(self._tasks):
            if item.id == task.id:
                self._tasks[index] = task
                return
        self._tasks.insert(0, task)

    def _remove(self, task_id: UUID) -> None:
        self._tasks = [item for item in self._tasks if item.id != task_id]

    # ------------------------------------------------------------------
    # Reminder ticks
    # ------------------------------------------------------------------

    async def tick(self, now: datetime) -> list[ReminderNotification]:
        """Prune the ledger, evaluate reminders and raise new notifications."""
        started = time.perf_counter()
        async with self._lock:
            tasks = list(self._tasks)
            released = prune(self.ledger, tasks, now, self.settings.suppression_window)
            created = evaluate(tasks, now, self.ledger, self.store.live_task_ids, tz=self.tz)
            self.store.append(created)
            if created and self.notifier.permission is PermissionState.GRANTED:
                for notification in created:
                    await self.notifier.notify(desktop_title(notification.title), notification.message)
                    reminder_desktop_notifications_total.inc()
        reminder_tick_duration_seconds.observe(time.perf_counter() - started)

        if released:
            self._lazy.debug(lambda: f"released {len(released)} ledger entries")
        for notification in created:
            reminder_notifications_total.inc()
            logger.info(
                "Reminder notification emitted",
                extra={
                    "user_id": self.user_id,
                    "task_id": str(notification.task_id),
                    "notification_id": notification.id,
                    "operation": "session.tick",
                },
            )
        await self._emit("bell", self.bell_state().model_dump(mode="json"))
        return created

    async def _table_tick(self, now: datetime) -> None:
        await self._emit("table", self.table().model_dump(mode="json"))

    # ------------------------------------------------------------------
    # Bell actions
    # ------------------------------------------------------------------

    def bell_state(self) -> BellState:
        now = self._reminder_ticker.current
        tasks = self._tasks
        upcoming = [
            UpcomingReminder(
                task_id=task.id,
                title=task.title,
                reminder=task.reminder,
                deadline=task.deadline,
                time_left=format_time_left(task, now),
                reminder_label=format_deadline(task.reminder, self.tz),
                deadline_label=format_deadline(task.deadline, self.tz) if task.deadline else None,
            )
            for task in upcoming_reminders(tasks, self.settings.preview_limit)
        ]
        return BellState(
            unread_count=self.store.unread_count,
            show_badge=self.store.show_badge,
            has_upcoming=has_upcoming_reminders(tasks, now, self.settings.upcoming_window),
            notifications=self.store.notifications,
            upcoming=upcoming,
            current_time=now,
        )

    async def open_dropdown(self) -> BellState:
        async with self._lock:
            self.store.open_dropdown()
        return self.bell_state()

    async def dismiss(self, notification_id: str) -> ReminderNotification | None:
        async with self._lock:
            removed = self.store.dismiss(notification_id)
        if removed is not None:
            logger.info(
                "Notification dismissed",
                extra={
                    "user_id": self.user_id,
                    "task_id": str(removed.task_id),
                    "notification_id": notification_id,
                    "operation": "session.dismiss",
                },
            )
        return removed

    async def clear_all(self) -> int:
        async with self._lock:
            removed = self.store.clear_all()
        self._lazy.debug(lambda: f"cleared {removed} notifications")
        return removed

    # ------------------------------------------------------------------
    # Table
    # ------------------------------------------------------------------

    def table(self) -> TaskTableView:
        now = self._table_ticker.current
        tasks = self._tasks
        rows = self.engine.rows(tasks, self._version, now)
        return TaskTableView(
            rows=[TaskRow.build(task, now, self.tz, updating=task.id in self._updating) for task in rows],
            shown=len(rows),
            total=len(tasks),
            categories=available_categories(tasks),
            filters=self.engine.filters,
            filters_active=self.engine.filters.is_active,
            sort=self.engine.sort,
            now=now,
        )

    async def set_filters(self, filters: TaskFilters) -> TaskTableView:
        async with self._lock:
            self.engine.set_filters(filters)
        return self.table()

    async def clear_filters(self) -> TaskTableView:
        async with self._lock:
            self.engine.clear_filters()
        return self.table()

    async def toggle_category(self, name: str) -> TaskTableView:
        """Add or remove one category from the active category filter."""
        async with self._lock:
            self.engine.toggle_category(name)
        return self.table()

    async def toggle_sort(self, column: SortColumn | str) -> SortState:
        async with self._lock:
            return self.engine.toggle_sort(column)

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def add_listener(self, listener: SessionListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: SessionListener) -> None:
        with contextlib.suppress(ValueError):
            self._listeners.remove(listener)

    async def _emit(self, kind: str, payload: dict) -> None:
        for listener in list(self._listeners):
            try:
                await listener(kind, payload)
            except Exception as exc:
                logger.warning(
                    "Session listener failed, removing it",
                    extra={"user_id": self.user_id, "error": str(exc), "operation": "session.emit"},
                )
                self.remove_listener(listener)
