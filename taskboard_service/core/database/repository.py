"""Owner-scoped generic repository for SQLAlchemy models.

Every row in this service belongs to one user, so the base query is always
filtered by ``user_id``. Sessions are passed explicitly; the service layer
owns commits.

Example:
    class CategoryRepository(OwnedRepository[Category]):
        async def get_by_name(self, session, user_id, name):
            stmt = self.owned(user_id).where(Category.name == name)
            return (await session.execute(stmt)).scalar_one_or_none()
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import select

from taskboard_service.core.database.base import OwnedMixin
from taskboard_service.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from sqlalchemy import Select
    from sqlalchemy.ext.asyncio import AsyncSession


class OwnedRepository[T: OwnedMixin]:
    """Create/delete plus a ``user_id``-scoped ``select`` for model ``T``."""

    __slots__ = ("model", "_logger", "_lazy")

    def __init__(self, model: type[T]) -> None:
        self.model = model
        # Standard logger for INFO/WARNING/ERROR
        self._logger = logging.getLogger(f"repository.{model.__name__}")
        # Lazy logger for DEBUG (zero overhead when DEBUG disabled)
        self._lazy = get_lazy_logger(f"repository.{model.__name__}")

    def owned(self, user_id: str) -> Select[tuple[T]]:
        """``SELECT`` of the model restricted to rows owned by ``user_id``."""
        return select(self.model).where(self.model.user_id == user_id)

    async def create(self, session: AsyncSession, instance: T) -> T:
        """Add, flush and refresh so generated columns (id, timestamps) are populated."""
        session.add(instance)
        await session.flush()
        await session.refresh(instance)

        entity_id = getattr(instance, "id", None)
        self._lazy.debug(lambda: f"db.create: {self.model.__name__}(id={entity_id})")
        return instance

    async def delete(self, session: AsyncSession, instance: T) -> None:
        entity_id = getattr(instance, "id", None)
        await session.delete(instance)
        await session.flush()

        self._logger.info(
            "Row deleted",
            extra={"entity": self.model.__name__, "id": str(entity_id), "operation": "db.delete"},
        )
