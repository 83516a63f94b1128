"""Read-only task access for long-lived view sessions.

Request handlers get a session per request; a mounted view session lives
across many requests and opens a short session for every read instead.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from taskboard_service.features.tasks.repository import TaskRepository, get_task_repository
from taskboard_service.features.tasks.schemas import TaskRead

if TYPE_CHECKING:
    from uuid import UUID

    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker


class DatabaseTaskSource:
    """TaskSource backed by the task store.

    Example:
        source = DatabaseTaskSource(AsyncSessionLocal)
        tasks = await source.list_tasks("user-1")
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        repository: TaskRepository | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._repository = repository or get_task_repository()

    async def list_tasks(self, user_id: str) -> list[TaskRead]:
        async with self._session_factory() as session:
            tasks = await self._repository.list_for_user(session, user_id)
            return [TaskRead.model_validate(task) for task in tasks]

    async def get_task(self, user_id: str, task_id: UUID) -> TaskRead | None:
        async with self._session_factory() as session:
            task = await self._repository.get_for_user(session, task_id, user_id)
            return TaskRead.model_validate(task) if task is not None else None
