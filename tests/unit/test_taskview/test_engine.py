"""Unit tests for deadline status and the task view engine."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from taskboard_service.features.taskview.engine import (
    DeadlineStatus,
    TaskViewEngine,
    available_categories,
    deadline_status,
    view,
)
from taskboard_service.features.taskview.filters import CompletionBucket, TaskFilters
from taskboard_service.features.taskview.schemas import TaskRow
from taskboard_service.features.taskview.sorting import SortColumn, SortState
from tests.utils import FIXED_NOW, make_task

NOW = FIXED_NOW


@pytest.mark.parametrize(
    ("deadline", "expected"),
    [
        (None, DeadlineStatus.NONE),
        (NOW - timedelta(minutes=1), DeadlineStatus.OVERDUE),
        (NOW + timedelta(hours=10), DeadlineStatus.TODAY),
        (datetime(2024, 1, 17, 9, 0, tzinfo=UTC), DeadlineStatus.SOON),
        (NOW + timedelta(days=3), DeadlineStatus.SOON),
        (NOW + timedelta(days=3, minutes=1), DeadlineStatus.FUTURE),
        (datetime(2024, 1, 25, tzinfo=UTC), DeadlineStatus.FUTURE),
    ],
)
def test_deadline_status(deadline, expected):
    assert deadline_status(deadline, NOW) is expected


def test_view_filters_then_sorts():
    tasks = [make_task("b"), make_task("c", completed=True), make_task("a")]

    result = view(
        tasks,
        TaskFilters(completion=CompletionBucket.PENDING),
        SortState(column=SortColumn.TITLE, direction="asc"),
        NOW,
    )

    assert [task.title for task in result] == ["a", "b"]


def test_available_categories_are_sorted_and_distinct():
    tasks = [make_task(category="Work"), make_task(category="Home"), make_task(category="Work"), make_task()]

    assert available_categories(tasks) == ["Home", "Work"]


class TestEngine:
    def test_recomputes_only_when_inputs_change(self):
        engine = TaskViewEngine()
        tasks = [make_task("a"), make_task("b")]

        engine.rows(tasks, 1, NOW)
        engine.rows(tasks, 1, NOW)
        assert engine.computations == 1

        engine.rows(tasks, 2, NOW)
        assert engine.computations == 2

        engine.rows(tasks, 2, NOW + timedelta(minutes=1))
        assert engine.computations == 3

        engine.toggle_sort(SortColumn.TITLE)
        assert [t.title for t in engine.rows(tasks, 2, NOW + timedelta(minutes=1))] == ["a", "b"]
        assert engine.computations == 4

    def test_filters_round_trip(self):
        engine = TaskViewEngine()
        engine.set_filters(TaskFilters(completion=CompletionBucket.COMPLETED))

        assert engine.rows([make_task()], 1, NOW) == []

        engine.clear_filters()
        assert len(engine.rows([make_task()], 2, NOW)) == 1

    def test_toggle_category_invalidates_rows(self):
        engine = TaskViewEngine()
        tasks = [make_task("home", category="Home"), make_task("work", category="Work")]
        engine.rows(tasks, 1, NOW)

        assert engine.toggle_category("Home") == TaskFilters(categories=frozenset({"Home"}))
        assert [t.title for t in engine.rows(tasks, 1, NOW)] == ["home"]
        assert engine.computations == 2

        engine.toggle_category("Home")
        assert engine.filters.is_active is False


def test_task_row_annotations():
    task = make_task("t", deadline=NOW + timedelta(hours=2))

    row = TaskRow.build(task, NOW, UTC, updating=True)

    assert row.category_name == "Uncategorized"
    assert row.deadline_status is DeadlineStatus.TODAY
    assert row.deadline_label == "Jan 15, 2024 at 12:00 PM"
    assert row.updating is True
    assert TaskRow.build(make_task(), NOW, UTC).deadline_label == "-"


def test_task_row_edit_values_use_display_timezone():
    task = make_task(
        deadline=datetime(2024, 1, 15, 17, 0, tzinfo=UTC),
        reminder=datetime(2024, 1, 15, 16, 30, tzinfo=UTC),
    )

    row = TaskRow.build(task, NOW, ZoneInfo("America/New_York"))

    assert row.deadline_input == "2024-01-15T12:00"
    assert row.reminder_input == "2024-01-15T11:30"
    assert TaskRow.build(make_task(), NOW, UTC).reminder_input == ""
