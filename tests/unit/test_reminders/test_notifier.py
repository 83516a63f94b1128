"""Unit tests for desktop notifiers."""

from __future__ import annotations

from taskboard_service.core.settings import ReminderSettings
from taskboard_service.features.reminders.notifier import (
    DesktopNotifier,
    LoggingNotifier,
    NullNotifier,
    PermissionState,
    build_notifier,
)


async def test_logging_notifier_permission_resolves_once():
    notifier = LoggingNotifier(grant=PermissionState.GRANTED)
    assert notifier.permission is PermissionState.DEFAULT

    assert await notifier.request_permission() is PermissionState.GRANTED
    assert notifier.permission is PermissionState.GRANTED


async def test_logging_notifier_denied_stays_denied():
    notifier = LoggingNotifier(grant=PermissionState.DENIED)

    await notifier.request_permission()

    assert notifier.permission is PermissionState.DENIED


async def test_logging_notifier_records_sent():
    notifier = LoggingNotifier()

    await notifier.notify("Task Reminder: A", 'Reminder: "A"')

    assert list(notifier.sent) == [("Task Reminder: A", 'Reminder: "A"')]


async def test_null_notifier_is_denied():
    notifier = NullNotifier()

    assert await notifier.request_permission() is PermissionState.DENIED
    assert notifier.permission is PermissionState.DENIED


def test_build_notifier_selects_backend():
    assert isinstance(build_notifier(ReminderSettings(notifier="null")), NullNotifier)

    notifier = build_notifier(ReminderSettings(notifier="logging", notifier_permission="denied"))
    assert isinstance(notifier, LoggingNotifier)
    assert isinstance(notifier, DesktopNotifier)


async def test_logging_notifier_history_is_bounded():
    notifier = LoggingNotifier(history=2)

    for name in ("A", "B", "C"):
        await notifier.notify(f"Task Reminder: {name}", f'Reminder: "{name}"')

    assert [title for title, _ in notifier.sent] == ["Task Reminder: B", "Task Reminder: C"]
