"""API router for the tasks feature."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard_service.core.dependencies import AuthUserDep, OptionalChangeFeed, get_db_session
from taskboard_service.core.dependencies.reminders import OptionalReminderManager
from taskboard_service.core.schemas.problem_details import ProblemDetails
from taskboard_service.features.tasks.schemas import (
    CategoryList,
    TaskCreate,
    TaskList,
    TaskPatch,
    TaskRead,
    TaskUpdate,
)
from taskboard_service.features.tasks.service import TaskService
from taskboard_service.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from collections.abc import Awaitable

    from taskboard_service.features.reminders.manager import ReminderSessionManager

router = APIRouter(prefix="/tasks", tags=["tasks"])

# Standard logger for INFO/WARNING/ERROR
logger = logging.getLogger(__name__)
# Lazy logger for DEBUG (zero overhead when DEBUG disabled)
lazy_logger = get_lazy_logger(__name__)

_ERRORS = {
    400: {"model": ProblemDetails, "description": "Task title is required"},
    401: {"model": ProblemDetails, "description": "Authentication required"},
    500: {"model": ProblemDetails, "description": "The task store rejected the operation"},
}
_NOT_FOUND = {404: {"model": ProblemDetails, "description": "Task not found"}}


async def get_task_service(
    session: Annotated[AsyncSession, Depends(get_db_session)],
    user: AuthUserDep,
    feed: OptionalChangeFeed,
) -> TaskService:
    """Task service bound to the request's session and the current user."""
    return TaskService(session, user.user_id, feed=feed)


TaskServiceDep = Annotated[TaskService, Depends(get_task_service)]


@router.get(
    "/",
    response_model=TaskList,
    summary="List tasks",
    description="Return all tasks of the current user with their category, newest first.",
    responses={401: _ERRORS[401]},
)
async def list_tasks(service: TaskServiceDep) -> TaskList:
    tasks = await service.list_tasks()
    lazy_logger.debug(lambda: f"list_tasks -> {len(tasks)} items")
    return TaskList(items=tasks, total=len(tasks))


@router.get(
    "/categories",
    response_model=CategoryList,
    summary="List categories",
    description="Return the names of the current user's categories, sorted.",
    responses={401: _ERRORS[401]},
)
async def list_categories(service: TaskServiceDep) -> CategoryList:
    return CategoryList(items=await service.list_category_names())


@router.get(
    "/{task_id}",
    response_model=TaskRead,
    summary="Get task",
    responses={401: _ERRORS[401], **_NOT_FOUND},
)
async def get_task(task_id: UUID, service: TaskServiceDep) -> TaskRead:
    return await service.get_task_or_raise(task_id)


@router.post(
    "/",
    response_model=TaskRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create task",
    description="Create a task. An unknown category name is created for the current user.",
    responses=_ERRORS,
)
async def create_task(payload: TaskCreate, service: TaskServiceDep) -> TaskRead:
    """Create a new task.

    Args:
        payload: Task data; ``title`` must be non-empty after trimming.
        service: Task service for the current user.

    Returns:
        The created task with its category resolved.
    """
    return await service.create_task(payload)


@router.put(
    "/{task_id}",
    response_model=TaskRead,
    summary="Edit task",
    description="Replace every editable field of a task. Omitted optional fields are cleared.",
    responses={**_ERRORS, **_NOT_FOUND},
)
async def update_task(
    task_id: UUID,
    payload: TaskUpdate,
    service: TaskServiceDep,
    user: AuthUserDep,
    manager: OptionalReminderManager,
) -> TaskRead:
    return await _reconciled(manager, user.user_id, task_id, service.update_task(task_id, payload))


@router.patch(
    "/{task_id}",
    response_model=TaskRead,
    summary="Patch task",
    description="Change only the fields present in the body, e.g. toggle completion.",
    responses={**_ERRORS, **_NOT_FOUND},
)
async def patch_task(
    task_id: UUID,
    payload: TaskPatch,
    service: TaskServiceDep,
    user: AuthUserDep,
    manager: OptionalReminderManager,
) -> TaskRead:
    return await _reconciled(manager, user.user_id, task_id, service.patch_task(task_id, payload))


@router.delete(
    "/{task_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete task",
    responses={401: _ERRORS[401], 500: _ERRORS[500], **_NOT_FOUND},
)
async def delete_task(task_id: UUID, service: TaskServiceDep) -> Response:
    await service.delete_task(task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


async def _reconciled(
    manager: ReminderSessionManager | None,
    user_id: str,
    task_id: UUID,
    edit: Awaitable[TaskRead],
) -> TaskRead:
    """Run ``edit`` while the user's mounted view shows the task as updating.

    The confirmed record replaces the view's copy; on failure the updating
    mark is dropped and the view keeps its previous copy.
    """
    session = manager.get(user_id) if manager is not None else None
    if session is None:
        return await edit
    session.begin_update(task_id)
    try:
        task = await edit
    except Exception:
        session.cancel_update(task_id)
        raise
    await session.apply_confirmed(task)
    return task
