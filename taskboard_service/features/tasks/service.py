"""Service layer for task business logic."""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from taskboard_service.core.exceptions import (
    BadRequestException,
    InternalServerException,
    NotFoundException,
)
from taskboard_service.core.services.base import UserScopedService
from taskboard_service.features.tasks.events import (
    TaskChangedEvent,
    TaskCreatedEvent,
    TaskDeletedEvent,
    TaskUpdatedEvent,
)
from taskboard_service.features.tasks.models import Category, Task
from taskboard_service.features.tasks.repository import (
    CategoryRepository,
    TaskRepository,
    get_category_repository,
    get_task_repository,
)
from taskboard_service.features.tasks.schemas import TaskCreate, TaskPatch, TaskRead, TaskUpdate
from taskboard_service.infra.logging import get_log_context
from taskboard_service.infra.metrics.prometheus import task_mutations_total

if TYPE_CHECKING:
    from uuid import UUID

    from sqlalchemy.ext.asyncio import AsyncSession

    from taskboard_service.infra.realtime import ChangeFeed

TITLE_REQUIRED = "Task title is required"


def _clean_title(raw: str | None) -> str:
    title = (raw or "").strip()
    if not title:
        raise BadRequestException(detail=TITLE_REQUIRED, extra={"field": "title"})
    return title


def _clean_description(raw: str | None) -> str:
    return (raw or "").strip()


class TaskService(UserScopedService):
    """Task operations for one authenticated user.

    Mutations commit before their change event is published, so feed
    consumers that re-read the task always see the committed row.
    """

    def __init__(
        self,
        session: AsyncSession,
        user_id: str,
        *,
        feed: ChangeFeed | None = None,
        repository: TaskRepository | None = None,
        categories: CategoryRepository | None = None,
    ) -> None:
        super().__init__(user_id)
        self._session = session
        self._feed = feed
        self._repository = repository or get_task_repository()
        self._categories = categories or get_category_repository()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def list_tasks(self) -> list[TaskRead]:
        """All tasks of the user with category resolved, newest first."""
        tasks = await self._repository.list_for_user(self._session, self.user_id)
        return [TaskRead.model_validate(task) for task in tasks]

    async def get_task(self, task_id: UUID) -> TaskRead | None:
        task = await self._repository.get_for_user(self._session, task_id, self.user_id)
        return TaskRead.model_validate(task) if task is not None else None

    async def get_task_or_raise(self, task_id: UUID) -> TaskRead:
        task = await self.get_task(task_id)
        if task is None:
            raise NotFoundException(
                detail=f"Task with ID {task_id} not found",
                type="task-not-found",
                extra={"task_id": str(task_id)},
            )
        return task

    async def list_category_names(self) -> list[str]:
        return await self._categories.list_names(self._session, self.user_id)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def create_task(self, payload: TaskCreate) -> TaskRead:
        """Create a task; an unknown category name is created on the fly.

        Raises:
            BadRequestException: Title missing or blank.
            InternalServerException: The store rejected the write.
        """
        title = _clean_title(payload.title)
        category = await self._resolve_category(payload.category)

        task = Task(
            user_id=self.user_id,
            title=title,
            description=_clean_description(payload.description),
            completed=False,
            deadline=payload.deadline,
            reminder=payload.reminder,
            category_id=category.id if category else None,
        )
        try:
            await self._repository.create(self._session, task)
            await self._session.commit()
        except SQLAlchemyError as exc:
            await self._fail("create", exc)

        created = await self._reload(task.id)
        task_mutations_total.labels(operation="create").inc()
        self.logger.info(
            "Task created",
            extra=self._log_extra(
                "create_task",
                task_id=str(created.id),
                has_deadline=created.deadline is not None,
                has_reminder=created.reminder is not None,
            ),
        )
        self._publish(TaskCreatedEvent(task_id=created.id, user_id=self.user_id))
        return created

    async def update_task(self, task_id: UUID, payload: TaskUpdate) -> TaskRead:
        """Full edit: every field is replaced, omitted optionals are cleared.

        Raises:
            BadRequestException: Title missing or blank.
            NotFoundException: No such task for this user.
            InternalServerException: The store rejected the write.
        """
        title = _clean_title(payload.title)
        # Resolve first: a failed category insert rolls the session back
        category = await self._resolve_category(payload.category)
        task = await self._get_owned(task_id)

        values = {
            "title": title,
            "description": _clean_description(payload.description),
            "category_id": category.id if category else None,
            "deadline": payload.deadline,
            "reminder": payload.reminder,
            "completed": payload.completed,
        }
        changes = self._apply(task, values)
        return await self._commit_update(task, changes, "update_task")

    async def patch_task(self, task_id: UUID, payload: TaskPatch) -> TaskRead:
        """Partial update: only fields present in the request change.

        Raises:
            BadRequestException: Title provided but blank.
            NotFoundException: No such task for this user.
            InternalServerException: The store rejected the write.
        """
        provided = payload.model_fields_set
        values: dict[str, object] = {}

        if "title" in provided:
            values["title"] = _clean_title(payload.title)
        if "category" in provided:
            category = await self._resolve_category(payload.category)
            values["category_id"] = category.id if category else None
        if "description" in provided:
            values["description"] = _clean_description(payload.description)
        if "deadline" in provided:
            values["deadline"] = payload.deadline
        if "reminder" in provided:
            values["reminder"] = payload.reminder
        if "completed" in provided and payload.completed is not None:
            values["completed"] = payload.completed

        task = await self._get_owned(task_id)
        changes = self._apply(task, values)
        return await self._commit_update(task, changes, "patch_task")

    async def delete_task(self, task_id: UUID) -> None:
        """Delete a task owned by the user.

        Raises:
            NotFoundException: No such task for this user.
            InternalServerException: The store rejected the delete.
        """
        task = await self._get_owned(task_id)
        try:
            await self._repository.delete(self._session, task)
            await self._session.commit()
        except SQLAlchemyError as exc:
            await self._fail("delete", exc)

        task_mutations_total.labels(operation="delete").inc()
        self.logger.info(
            "Task deleted",
            extra=self._log_extra("delete_task", task_id=str(task_id)),
        )
        self._publish(TaskDeletedEvent(task_id=task_id, user_id=self.user_id))

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _get_owned(self, task_id: UUID) -> Task:
        task = await self._repository.get_for_user(self._session, task_id, self.user_id)
        if task is None:
            raise NotFoundException(
                detail=f"Task with ID {task_id} not found",
                type="task-not-found",
                extra={"task_id": str(task_id)},
            )
        return task

    async def _reload(self, task_id: UUID) -> TaskRead:
        task = await self._repository.get_for_user(
            self._session, task_id, self.user_id, reload=True
        )
        if task is None:
            raise NotFoundException(
                detail=f"Task with ID {task_id} not found",
                type="task-not-found",
                extra={"task_id": str(task_id)},
            )
        return TaskRead.model_validate(task)

    @staticmethod
    def _apply(task: Task, values: dict[str, object]) -> list[str]:
        changes = []
        for field, value in values.items():
            if getattr(task, field) != value:
                setattr(task, field, value)
                changes.append(field)
        return changes

    async def _commit_update(self, task: Task, changes: list[str], operation: str) -> TaskRead:
        task_id = task.id
        if changes:
            try:
                await self._session.commit()
            except SQLAlchemyError as exc:
                await self._fail("update", exc)

        updated = await self._reload(task_id)
        if not changes:
            self._lazy.debug(lambda: f"{operation}({task_id}) -> no changes")
            return updated

        task_mutations_total.labels(operation="update").inc()
        self.logger.info(
            "Task updated",
            extra=self._log_extra(operation, task_id=str(task_id), changes=changes),
        )
        self._publish(TaskUpdatedEvent(task_id=task_id, user_id=self.user_id, changes=changes))
        return updated

    async def _resolve_category(self, name: str | None) -> Category | None:
        """Find or create the user's category called ``name``.

        A blank name means "no category". If the category cannot be created
        the task is saved without one.
        """
        name = (name or "").strip()
        if not name:
            return None

        existing = await self._categories.get_by_name(self._session, self.user_id, name)
        if existing is not None:
            return existing

        try:
            category = await self._categories.create(
                self._session, Category(user_id=self.user_id, name=name)
            )
        except IntegrityError:
            # Created concurrently by another request
            await self._session.rollback()
            return await self._categories.get_by_name(self._session, self.user_id, name)
        except SQLAlchemyError as exc:
            await self._session.rollback()
            self.logger.warning(
                "Category creation failed, saving task without category",
                extra=self._log_extra("resolve_category", category=name, error=str(exc)),
            )
            return None

        self.logger.info(
            "Category created",
            extra=self._log_extra("resolve_category", category_id=str(category.id)),
        )
        return category

    async def _fail(self, action: str, exc: SQLAlchemyError) -> NoReturn:
        await self._session.rollback()
        self.logger.error(
            "Task %s failed",
            action,
            extra=self._log_extra(f"{action}_task", error=str(exc)),
            exc_info=True,
        )
        raise InternalServerException(
            detail=f"Failed to {action} task",
            extra={"operation": action},
        ) from exc

    def _publish(self, event: TaskChangedEvent) -> None:
        if self._feed is None or self._feed.closed:
            return
        request_id = get_log_context().get("request_id")
        if request_id:
            event = event.model_copy(update={"correlation_id": request_id})
        delivered = self._feed.publish(self.user_id, event)
        self._lazy.debug(lambda: f"published {event.event_type} for {event.task_id} to {delivered} subscribers")


__all__ = ["TITLE_REQUIRED", "TaskService"]
