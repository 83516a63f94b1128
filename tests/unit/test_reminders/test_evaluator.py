"""Unit tests for reminder evaluation and the reminder ledger."""

from __future__ import annotations

from datetime import timedelta

from taskboard_service.features.reminders.evaluator import (
    ReminderLedger,
    evaluate,
    has_upcoming_reminders,
    prune,
    should_release,
    upcoming_reminders,
)
from tests.utils import FIXED_NOW, make_task

NOW = FIXED_NOW


# ──────────────────────────────────────────────────────────────
# evaluate
# ──────────────────────────────────────────────────────────────


class TestEvaluate:
    """Tests for which tasks produce a notification."""

    def test_crossed_reminder_creates_notification(self):
        task = make_task("Call Bob", reminder=NOW - timedelta(minutes=5))
        ledger = ReminderLedger()

        created = evaluate([task], NOW, ledger)

        assert len(created) == 1
        assert created[0].task_id == task.id
        assert created[0].title == "Call Bob"
        assert created[0].message == 'Reminder: "Call Bob"'
        assert created[0].is_read is False
        assert task.id in ledger

    def test_reminder_exactly_now_is_due(self):
        task = make_task(reminder=NOW)

        assert len(evaluate([task], NOW, ReminderLedger())) == 1

    def test_future_reminder_is_not_due(self):
        task = make_task(reminder=NOW + timedelta(seconds=1))

        assert evaluate([task], NOW, ReminderLedger()) == []

    def test_completed_task_never_fires(self):
        task = make_task(completed=True, reminder=NOW - timedelta(minutes=1))

        assert evaluate([task], NOW, ReminderLedger()) == []

    def test_task_without_reminder_never_fires(self):
        task = make_task(deadline=NOW - timedelta(days=1))

        assert evaluate([task], NOW, ReminderLedger()) == []

    def test_message_includes_deadline(self):
        task = make_task(
            "Report",
            reminder=NOW - timedelta(minutes=1),
            deadline=NOW.replace(hour=14, minute=30),
        )

        [notification] = evaluate([task], NOW, ReminderLedger())

        assert notification.message == 'Reminder: "Report" - scheduled for Jan 15, 2024 at 2:30 PM'

    def test_ledger_suppresses_second_notification(self):
        task = make_task(reminder=NOW - timedelta(minutes=5))
        ledger = ReminderLedger()

        evaluate([task], NOW, ledger)
        again = evaluate([task], NOW + timedelta(seconds=10), ledger)

        assert again == []

    def test_live_notification_suppresses(self):
        task = make_task(reminder=NOW - timedelta(minutes=5))

        assert evaluate([task], NOW, ReminderLedger(), live_task_ids={task.id}) == []

    def test_released_entry_does_not_refire_same_instant(self):
        task = make_task(reminder=NOW - timedelta(minutes=5))
        ledger = ReminderLedger()
        evaluate([task], NOW, ledger)

        ledger.release(task.id)

        assert task.id not in ledger
        assert ledger.has_fired(task.id, task.reminder)
        assert evaluate([task], NOW + timedelta(minutes=1), ledger) == []

    def test_new_reminder_instant_fires_again(self):
        task = make_task(reminder=NOW - timedelta(minutes=30))
        ledger = ReminderLedger()
        evaluate([task], NOW, ledger)
        ledger.release(task.id)

        moved = task.model_copy(update={"reminder": NOW - timedelta(minutes=1)})

        assert len(evaluate([moved], NOW, ledger)) == 1

    def test_each_task_fires_at_most_once_per_call(self):
        tasks = [make_task(f"T{i}", reminder=NOW - timedelta(minutes=i)) for i in range(3)]

        created = evaluate(tasks, NOW, ReminderLedger())

        assert sorted(n.title for n in created) == ["T0", "T1", "T2"]
        assert len({n.task_id for n in created}) == 3


# ──────────────────────────────────────────────────────────────
# Ledger expiry
# ──────────────────────────────────────────────────────────────


class TestPrune:
    """Tests for ledger entry release."""

    def _fired(self, task, now=NOW):
        ledger = ReminderLedger()
        evaluate([task], now, ledger)
        return ledger

    def test_entry_kept_while_task_unchanged(self):
        task = make_task(reminder=NOW - timedelta(minutes=5))
        ledger = self._fired(task)

        assert prune(ledger, [task], NOW + timedelta(minutes=10)) == []
        assert task.id in ledger

    def test_deleted_task_is_forgotten(self):
        task = make_task(reminder=NOW - timedelta(minutes=5))
        ledger = self._fired(task)

        assert prune(ledger, [], NOW) == [task.id]
        assert task.id not in ledger
        assert not ledger.has_fired(task.id, task.reminder)

    def test_completed_task_is_released(self):
        task = make_task(reminder=NOW - timedelta(minutes=5))
        ledger = self._fired(task)

        done = task.model_copy(update={"completed": True})

        assert prune(ledger, [done], NOW) == [task.id]
        assert ledger.has_fired(task.id, task.reminder)

    def test_cleared_reminder_is_forgotten(self):
        task = make_task(reminder=NOW - timedelta(minutes=5))
        ledger = self._fired(task)

        cleared = task.model_copy(update={"reminder": None})

        assert prune(ledger, [cleared], NOW) == [task.id]
        assert not ledger.has_fired(task.id, task.reminder)

    def test_changed_reminder_is_released(self):
        task = make_task(reminder=NOW - timedelta(minutes=5))
        ledger = self._fired(task)

        moved = task.model_copy(update={"reminder": NOW + timedelta(hours=2)})

        assert prune(ledger, [moved], NOW) == [task.id]

    def test_entry_expires_after_window(self):
        task = make_task(reminder=NOW - timedelta(minutes=5))
        ledger = self._fired(task)

        assert prune(ledger, [task], NOW + timedelta(minutes=55)) == []
        assert prune(ledger, [task], NOW + timedelta(minutes=56)) == [task.id]

    def test_released_task_memory_dropped_once_gone(self):
        task = make_task(reminder=NOW - timedelta(minutes=5))
        ledger = self._fired(task)
        done = task.model_copy(update={"completed": True})
        prune(ledger, [done], NOW)
        assert ledger.fired_ids() == [task.id]

        assert prune(ledger, [], NOW) == []
        assert ledger.fired_ids() == []

    def test_released_task_memory_dropped_when_reminder_cleared(self):
        task = make_task(reminder=NOW - timedelta(minutes=5))
        ledger = self._fired(task)
        ledger.release(task.id)

        prune(ledger, [task.model_copy(update={"reminder": None})], NOW)

        assert ledger.fired_ids() == []

    def test_memory_bounded_by_snapshot(self):
        ledger = ReminderLedger()
        for minutes in range(1, 51):
            task = make_task(reminder=NOW - timedelta(minutes=minutes))
            evaluate([task], NOW, ledger)
            ledger.release(task.id)
        assert len(ledger.fired_ids()) == 50

        prune(ledger, [], NOW)

        assert ledger.fired_ids() == []

    def test_custom_window(self):
        task = make_task(reminder=NOW)
        mark = self._fired(task).get(task.id)

        assert not should_release(mark, task, NOW + timedelta(minutes=5), timedelta(minutes=10))
        assert should_release(mark, task, NOW + timedelta(minutes=11), timedelta(minutes=10))


# ──────────────────────────────────────────────────────────────
# Upcoming
# ──────────────────────────────────────────────────────────────


class TestUpcoming:
    """Tests for the upcoming indicator and preview list."""

    def test_reminder_within_hour_is_upcoming(self):
        assert has_upcoming_reminders([make_task(reminder=NOW + timedelta(minutes=30))], NOW)

    def test_reminder_exactly_sixty_minutes_ahead_is_upcoming(self):
        assert has_upcoming_reminders([make_task(reminder=NOW + timedelta(minutes=60))], NOW)

    def test_reminder_beyond_window_is_not_upcoming(self):
        assert not has_upcoming_reminders([make_task(reminder=NOW + timedelta(minutes=61))], NOW)

    def test_less_than_a_minute_ahead_is_not_upcoming(self):
        assert not has_upcoming_reminders([make_task(reminder=NOW + timedelta(seconds=59))], NOW)

    def test_past_or_completed_is_not_upcoming(self):
        tasks = [
            make_task(reminder=NOW - timedelta(minutes=10)),
            make_task(completed=True, reminder=NOW + timedelta(minutes=10)),
        ]

        assert not has_upcoming_reminders(tasks, NOW)

    def test_custom_window(self):
        task = make_task(reminder=NOW + timedelta(hours=3))

        assert has_upcoming_reminders([task], NOW, timedelta(hours=4))

    def test_upcoming_reminders_sorted_and_limited(self):
        later = make_task("later", reminder=NOW + timedelta(hours=5))
        soon = make_task("soon", reminder=NOW + timedelta(minutes=5))
        past = make_task("past", reminder=NOW - timedelta(hours=1))
        done = make_task("done", completed=True, reminder=NOW)
        middle = make_task("middle", reminder=NOW + timedelta(hours=1))
        none = make_task("none")

        result = upcoming_reminders([later, soon, past, done, middle, none], limit=3)

        assert [task.title for task in result] == ["past", "soon", "middle"]
