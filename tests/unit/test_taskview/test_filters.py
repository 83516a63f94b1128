"""Unit tests for task table filters."""

from __future__ import annotations

from datetime import UTC, timedelta, timezone

import pytest
from pydantic import ValidationError

from taskboard_service.features.taskview.filters import CompletionBucket, DeadlineBucket, TaskFilters
from taskboard_service.features.taskview.schemas import FilterUpdate
from tests.utils import FIXED_NOW, make_task

NOW = FIXED_NOW


def _titles(tasks, filters, tz=UTC):
    return [task.title for task in tasks if filters.matches(task, NOW, tz)]


class TestCategoryFilter:
    def test_empty_set_matches_everything(self):
        tasks = [make_task("a", category="Work"), make_task("b")]

        assert _titles(tasks, TaskFilters()) == ["a", "b"]

    def test_selected_categories(self):
        tasks = [make_task("a", category="Work"), make_task("b", category="Home"), make_task("c")]

        assert _titles(tasks, TaskFilters(categories=frozenset({"Work"}))) == ["a"]

    def test_uncategorized_name_matches_tasks_without_category(self):
        tasks = [make_task("a", category="Work"), make_task("b")]

        assert _titles(tasks, TaskFilters(categories=frozenset({"Uncategorized"}))) == ["b"]

    def test_toggle_category(self):
        filters = TaskFilters().toggle_category("Work").toggle_category("Home")
        assert filters.categories == {"Work", "Home"}

        filters = filters.toggle_category("Work")
        assert filters.categories == {"Home"}


class TestDeadlineFilter:
    @pytest.fixture
    def tasks(self):
        return [
            make_task("overdue", deadline=NOW - timedelta(hours=1)),
            make_task("today", deadline=NOW + timedelta(hours=5)),
            make_task("next-week", deadline=NOW + timedelta(days=7)),
            make_task("none"),
        ]

    @pytest.mark.parametrize(
        ("bucket", "expected"),
        [
            (DeadlineBucket.ALL, ["overdue", "today", "next-week", "none"]),
            (DeadlineBucket.OVERDUE, ["overdue"]),
            (DeadlineBucket.TODAY, ["overdue", "today"]),
            (DeadlineBucket.UPCOMING, ["today", "next-week"]),
            (DeadlineBucket.NO_DEADLINE, ["none"]),
        ],
    )
    def test_buckets(self, tasks, bucket, expected):
        assert _titles(tasks, TaskFilters(deadline=bucket)) == expected

    def test_today_uses_display_timezone(self):
        # 23:30 UTC on the 15th is the 16th in UTC+2
        late = make_task("late", deadline=NOW.replace(hour=23, minute=30))

        assert _titles([late], TaskFilters(deadline=DeadlineBucket.TODAY), UTC) == ["late"]
        assert _titles([late], TaskFilters(deadline=DeadlineBucket.TODAY), timezone(timedelta(hours=2))) == []


class TestCompletionFilter:
    def test_completed_and_pending(self):
        tasks = [make_task("done", completed=True), make_task("open")]

        assert _titles(tasks, TaskFilters(completion=CompletionBucket.COMPLETED)) == ["done"]
        assert _titles(tasks, TaskFilters(completion=CompletionBucket.PENDING)) == ["open"]

    def test_filters_combine(self):
        tasks = [
            make_task("work-done", category="Work", completed=True),
            make_task("work-open", category="Work"),
            make_task("home-open", category="Home"),
        ]
        filters = TaskFilters(categories=frozenset({"Work"}), completion=CompletionBucket.PENDING)

        assert _titles(tasks, filters) == ["work-open"]


class TestActive:
    def test_default_is_inactive(self):
        assert TaskFilters().is_active is False

    @pytest.mark.parametrize(
        "filters",
        [
            TaskFilters(categories=frozenset({"Work"})),
            TaskFilters(deadline=DeadlineBucket.TODAY),
            TaskFilters(completion=CompletionBucket.COMPLETED),
        ],
    )
    def test_any_constraint_is_active(self, filters):
        assert filters.is_active is True

    def test_cleared(self):
        filters = TaskFilters(categories=frozenset({"Work"}), deadline=DeadlineBucket.TODAY)

        assert filters.cleared() == TaskFilters()


class TestFilterUpdate:
    def test_to_filters(self):
        update = FilterUpdate(categories=["Work", "Work"], deadline="overdue", completion="pending")

        filters = update.to_filters()

        assert filters.categories == frozenset({"Work"})
        assert filters.deadline is DeadlineBucket.OVERDUE
        assert filters.completion is CompletionBucket.PENDING

    def test_unknown_bucket_is_rejected(self):
        with pytest.raises(ValidationError):
            FilterUpdate(deadline="someday").to_filters()
