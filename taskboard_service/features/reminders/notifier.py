"""Desktop notification capability.

Mirrors in-app reminders to the user's operating system when permission
has been granted. Permission is requested once per view session and only
while it is still ``default``.
"""

from __future__ import annotations

import logging
from collections import deque
from enum import StrEnum
from typing import Protocol, runtime_checkable

from taskboard_service.core.settings import ReminderSettings

logger = logging.getLogger(__name__)


class PermissionState(StrEnum):
    GRANTED = "granted"
    DENIED = "denied"
    DEFAULT = "default"


@runtime_checkable
class DesktopNotifier(Protocol):
    """Operating-system notification sink."""

    @property
    def permission(self) -> PermissionState: ...

    async def request_permission(self) -> PermissionState: ...

    async def notify(self, title: str, body: str) -> None: ...


class LoggingNotifier:
    """Notifier that records mirrored notifications in the log.

    ``grant`` is the answer given when permission is requested. The last
    ``history`` notifications are kept in ``sent``.
    """

    def __init__(self, grant: PermissionState = PermissionState.GRANTED, history: int = 100) -> None:
        self._grant = PermissionState(grant)
        self._permission = PermissionState.DEFAULT
        self.sent: deque[tuple[str, str]] = deque(maxlen=history)

    @property
    def permission(self) -> PermissionState:
        return self._permission

    async def request_permission(self) -> PermissionState:
        if self._permission is PermissionState.DEFAULT:
            self._permission = self._grant
            logger.info(
                "Desktop notification permission resolved",
                extra={"permission": str(self._permission), "operation": "notifier.request_permission"},
            )
        return self._permission

    async def notify(self, title: str, body: str) -> None:
        self.sent.append((title, body))
        logger.info(
            "Desktop notification",
            extra={"title": title, "body": body, "operation": "notifier.notify"},
        )


class NullNotifier:
    """Notifier for environments without a desktop: permission is always denied."""

    @property
    def permission(self) -> PermissionState:
        return PermissionState.DENIED

    async def request_permission(self) -> PermissionState:
        return PermissionState.DENIED

    async def notify(self, title: str, body: str) -> None:
        return None


def build_notifier(settings: ReminderSettings) -> DesktopNotifier:
    """Create the notifier selected by ``REMINDER_NOTIFIER``."""
    if settings.notifier == "null":
        return NullNotifier()
    return LoggingNotifier(grant=PermissionState(settings.notifier_permission))
