"""Shared test helpers: task snapshot factory, fake task source, polling."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import UTC, datetime
from uuid import UUID, uuid4

from taskboard_service.features.tasks.schemas import CategoryRead, TaskRead

TEST_USER = "test-user"
OTHER_USER = "other-user"
TEST_TOKEN = "test-token"
OTHER_TOKEN = "other-token"

FIXED_NOW = datetime(2024, 1, 15, 10, 0, tzinfo=UTC)


def make_task(
    title: str = "Task",
    *,
    task_id: UUID | None = None,
    description: str = "",
    completed: bool = False,
    deadline: datetime | None = None,
    reminder: datetime | None = None,
    category: str | None = None,
    created_at: datetime = FIXED_NOW,
    updated_at: datetime | None = None,
) -> TaskRead:
    """Build an immutable task snapshot without touching the database."""
    return TaskRead(
        id=task_id or uuid4(),
        title=title,
        description=description,
        completed=completed,
        deadline=deadline,
        reminder=reminder,
        category=CategoryRead(id=uuid4(), name=category) if category else None,
        created_at=created_at,
        updated_at=updated_at or created_at,
    )


class FakeTaskSource:
    """In-memory TaskSource keyed by user."""

    def __init__(self, tasks: dict[str, list[TaskRead]] | None = None) -> None:
        self.tasks: dict[str, dict[UUID, TaskRead]] = {
            user_id: {task.id: task for task in items} for user_id, items in (tasks or {}).items()
        }
        self.list_calls = 0

    def put(self, user_id: str, task: TaskRead) -> None:
        self.tasks.setdefault(user_id, {})[task.id] = task

    def remove(self, user_id: str, task_id: UUID) -> None:
        self.tasks.get(user_id, {}).pop(task_id, None)

    async def list_tasks(self, user_id: str) -> list[TaskRead]:
        self.list_calls += 1
        return list(self.tasks.get(user_id, {}).values())

    async def get_task(self, user_id: str, task_id: UUID) -> TaskRead | None:
        return self.tasks.get(user_id, {}).get(task_id)


async def wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    """Yield to the event loop until ``predicate()`` holds."""
    async with asyncio.timeout(timeout):
        while not predicate():
            await asyncio.sleep(0.01)
