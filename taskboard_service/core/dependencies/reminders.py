"""Reminder session manager dependencies."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends

from taskboard_service.core.exceptions import ServiceUnavailableException


def get_session_manager() -> ReminderSessionManager | None:
    """Get the reminder session manager, or None before startup."""
    from taskboard_service.features.reminders.manager import get_reminder_manager

    try:
        return get_reminder_manager()
    except RuntimeError:
        return None


async def require_session_manager(
    manager: Annotated[ReminderSessionManager | None, Depends(get_session_manager)],
) -> ReminderSessionManager:
    """Dependency that requires the reminder session manager.

    Raises:
        ServiceUnavailableException: 503 if the manager is not running
    """
    if manager is None:
        raise ServiceUnavailableException(
            detail="Reminder sessions are not available",
            type="reminders-unavailable",
        )
    return manager


from taskboard_service.features.reminders.manager import ReminderSessionManager  # noqa: E402

ReminderManagerDep = Annotated[ReminderSessionManager, Depends(require_session_manager)]
OptionalReminderManager = Annotated[ReminderSessionManager | None, Depends(get_session_manager)]
