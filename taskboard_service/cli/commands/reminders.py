"""Reminder inspection commands."""

import sys

import click
from sqlalchemy.exc import SQLAlchemyError

from taskboard_service.cli.utils import bullet, coro, error, header, info, warning
from taskboard_service.core.settings import get_reminder_settings
from taskboard_service.features.reminders.clock import local_now, utc_now
from taskboard_service.features.reminders.evaluator import (
    ReminderLedger,
    evaluate,
    has_upcoming_reminders,
    upcoming_reminders,
)
from taskboard_service.features.reminders.formatting import format_time_until_reminder


@click.group(name="reminders")
def reminders() -> None:
    """Reminder inspection commands."""


@reminders.command()
@click.argument("user_id")
@click.option("--limit", default=5, show_default=True, help="Upcoming reminders to list")
@coro
async def preview(user_id: str, limit: int) -> None:
    """Show which reminders of USER_ID are due now and which come next."""
    from taskboard_service.features.tasks.source import DatabaseTaskSource
    from taskboard_service.infra.database import AsyncSessionLocal

    settings = get_reminder_settings()
    now = utc_now()
    try:
        tasks = await DatabaseTaskSource(AsyncSessionLocal).list_tasks(user_id)
    except SQLAlchemyError as e:
        error(f"Failed to load tasks: {e}")
        sys.exit(1)

    header(f"Reminders for {user_id} at {local_now(settings.tz):%Y-%m-%d %H:%M %Z}")
    due = evaluate(tasks, now, ReminderLedger(), tz=settings.tz)
    if due:
        for notification in due:
            warning(notification.message)
    else:
        info("No reminders due")

    if has_upcoming_reminders(tasks, now, settings.upcoming_window):
        info(f"Upcoming within {settings.upcoming_minutes} minutes")
    upcoming = upcoming_reminders(tasks, limit)
    width = max((len(task.title) for task in upcoming), default=0)
    for task in upcoming:
        bullet(task.title, format_time_until_reminder(task.reminder, now), width=width)
