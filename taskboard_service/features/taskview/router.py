"""API router for stateless task table views."""
from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from taskboard_service.core.settings import get_reminder_settings
from taskboard_service.features.reminders.clock import utc_now
from taskboard_service.features.tasks.router import TaskServiceDep
from taskboard_service.features.taskview.engine import available_categories, view
from taskboard_service.features.taskview.filters import CompletionBucket, DeadlineBucket, TaskFilters
from taskboard_service.features.taskview.schemas import TaskRow, TaskTableView
from taskboard_service.features.taskview.sorting import SortColumn, SortDirection, SortState
from taskboard_service.infra.logging import get_lazy_logger

router = APIRouter(prefix="/tasks", tags=["tasks"])

lazy_logger = get_lazy_logger(__name__)


def get_view_params(
    category: Annotated[list[str] | None, Query(description="Category names to keep (repeatable)")] = None,
    deadline: DeadlineBucket = DeadlineBucket.ALL,
    completion: CompletionBucket = CompletionBucket.ALL,
    sort: SortColumn = SortColumn.CREATED_AT,
    direction: SortDirection = SortDirection.DESC,
) -> tuple[TaskFilters, SortState]:
    filters = TaskFilters(categories=frozenset(category or ()), deadline=deadline, completion=completion)
    return filters, SortState(column=sort, direction=direction)


@router.get(
    "/view",
    response_model=TaskTableView,
    summary="Task table",
    description="Filter, sort and annotate the current user's tasks in one call.",
)
async def task_view(
    service: TaskServiceDep,
    params: Annotated[tuple[TaskFilters, SortState], Depends(get_view_params)],
) -> TaskTableView:
    filters, sort = params
    tz = get_reminder_settings().tz
    now = utc_now()
    tasks = await service.list_tasks()
    rows = view(tasks, filters, sort, now, tz)
    lazy_logger.debug(lambda: f"task_view -> {len(rows)}/{len(tasks)} rows")
    return TaskTableView(
        rows=[TaskRow.build(task, now, tz) for task in rows],
        shown=len(rows),
        total=len(tasks),
        categories=available_categories(tasks),
        filters=filters,
        filters_active=filters.is_active,
        sort=sort,
        now=now,
    )
