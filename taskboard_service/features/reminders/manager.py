"""Reference-counted registry of mounted view sessions."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from taskboard_service.features.reminders.notifier import DesktopNotifier, build_notifier
from taskboard_service.features.reminders.session import ReminderSession, TaskSource
from taskboard_service.infra.metrics.prometheus import reminder_sessions_active

if TYPE_CHECKING:
    from taskboard_service.core.settings import ReminderSettings
    from taskboard_service.infra.realtime import ChangeFeed

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class _Mount:
    session: ReminderSession
    refs: int = 0


class ReminderSessionManager:
    """Per-user view sessions shared by every mount of the same user.

    The first ``acquire`` for a user starts the session; the matching last
    ``release`` stops it. ``shutdown`` stops everything at application exit.
    """

    def __init__(
        self,
        source: TaskSource,
        feed: ChangeFeed | None,
        settings: ReminderSettings,
        *,
        notifier_factory: Callable[[], DesktopNotifier] | None = None,
    ) -> None:
        self._source = source
        self._feed = feed
        self._settings = settings
        self._notifier_factory = notifier_factory or (lambda: build_notifier(settings))
        self._mounts: dict[str, _Mount] = {}
        self._lock = asyncio.Lock()

    @property
    def active_count(self) -> int:
        return len(self._mounts)

    def get(self, user_id: str) -> ReminderSession | None:
        mount = self._mounts.get(user_id)
        return mount.session if mount else None

    def mounts(self, user_id: str) -> int:
        mount = self._mounts.get(user_id)
        return mount.refs if mount else 0

    async def acquire(self, user_id: str) -> ReminderSession:
        """Mount a view for ``user_id``, starting its session on first mount."""
        async with self._lock:
            mount = self._mounts.get(user_id)
            if mount is None:
                session = ReminderSession(
                    user_id,
                    self._source,
                    self._feed,
                    self._notifier_factory(),
                    self._settings,
                )
                try:
                    await session.start()
                except Exception:
                    await session.stop()
                    raise
                mount = self._mounts[user_id] = _Mount(session)
                reminder_sessions_active.set(len(self._mounts))
            mount.refs += 1
            return mount.session

    async def release(self, user_id: str) -> bool:
        """Dismount one view of ``user_id``.

        Returns:
            False if the user had no mounted view.
        """
        async with self._lock:
            mount = self._mounts.get(user_id)
            if mount is None:
                return False
            mount.refs -= 1
            if mount.refs > 0:
                return True
            del self._mounts[user_id]
            reminder_sessions_active.set(len(self._mounts))
        await mount.session.stop()
        return True

    async def shutdown(self) -> None:
        async with self._lock:
            mounts = list(self._mounts.values())
            self._mounts.clear()
            reminder_sessions_active.set(0)
        for mount in mounts:
            await mount.session.stop()
        if mounts:
            logger.info("Stopped view sessions", extra={"count": len(mounts), "operation": "manager.shutdown"})


_manager: ReminderSessionManager | None = None


def get_reminder_manager() -> ReminderSessionManager:
    """Get the process-wide session manager.

    Raises:
        RuntimeError: If start_reminder_manager() has not been called.
    """
    if _manager is None:
        raise RuntimeError("Reminder manager not initialized. Call start_reminder_manager() first.")
    return _manager


def start_reminder_manager(
    source: TaskSource,
    feed: ChangeFeed | None,
    settings: ReminderSettings,
    **kwargs,
) -> ReminderSessionManager:
    global _manager
    _manager = ReminderSessionManager(source, feed, settings, **kwargs)
    logger.info(
        "Reminder manager started",
        extra={"tick_seconds": settings.tick_seconds, "view_tick_seconds": settings.view_tick_seconds},
    )
    return _manager


async def stop_reminder_manager() -> None:
    global _manager
    if _manager is not None:
        await _manager.shutdown()
        _manager = None
