"""Repositories for the tasks feature.

Every query is scoped to the owning user; a task id that belongs to
someone else behaves exactly like a missing one.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from taskboard_service.core.database import OwnedRepository
from taskboard_service.features.tasks.models import Category, Task

if TYPE_CHECKING:
    from collections.abc import Sequence
    from uuid import UUID

    from sqlalchemy.ext.asyncio import AsyncSession


class TaskRepository(OwnedRepository[Task]):
    """Tasks with their category eager-loaded."""

    def __init__(self) -> None:
        super().__init__(Task)

    async def list_for_user(self, session: AsyncSession, user_id: str) -> Sequence[Task]:
        """All tasks of ``user_id`` with their category, newest first."""
        stmt = (
            self.owned(user_id)
            .options(selectinload(Task.category))
            .order_by(Task.created_at.desc())
        )
        result = await session.execute(stmt)
        items = result.scalars().all()

        self._lazy.debug(lambda: f"db.list_for_user({user_id}) -> {len(items)} tasks")
        return items

    async def get_for_user(
        self,
        session: AsyncSession,
        task_id: UUID,
        user_id: str,
        *,
        reload: bool = False,
    ) -> Task | None:
        """Fetch one task owned by ``user_id``.

        Args:
            reload: Overwrite any instance already in the identity map with
                fresh column values (used after a commit).
        """
        stmt = (
            self.owned(user_id)
            .where(Task.id == task_id)
            .options(selectinload(Task.category))
        )
        if reload:
            stmt = stmt.execution_options(populate_existing=True)
        result = await session.execute(stmt)
        task = result.scalar_one_or_none()

        self._lazy.debug(
            lambda: f"db.get_for_user({task_id}, {user_id}) -> {'found' if task else 'not found'}"
        )
        return task


class CategoryRepository(OwnedRepository[Category]):
    """Repository for per-user categories."""

    def __init__(self) -> None:
        super().__init__(Category)

    async def get_by_name(self, session: AsyncSession, user_id: str, name: str) -> Category | None:
        stmt = self.owned(user_id).where(Category.name == name)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_names(self, session: AsyncSession, user_id: str) -> list[str]:
        """Category names of ``user_id``, sorted."""
        stmt = select(Category.name).where(Category.user_id == user_id).order_by(Category.name)
        result = await session.execute(stmt)
        return list(result.scalars().all())


_task_repository: TaskRepository | None = None
_category_repository: CategoryRepository | None = None


def get_task_repository() -> TaskRepository:
    """Get the shared TaskRepository instance."""
    global _task_repository
    if _task_repository is None:
        _task_repository = TaskRepository()
    return _task_repository


def get_category_repository() -> CategoryRepository:
    """Get the shared CategoryRepository instance."""
    global _category_repository
    if _category_repository is None:
        _category_repository = CategoryRepository()
    return _category_repository
