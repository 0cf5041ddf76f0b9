"""
Tests for completion and streak statistics
"""
from habitly.core.models import Habit, HistoryRecord, Streak
from habitly.services.stats_service import (
    completion_percent,
    daily_summary,
    least_consistent,
    most_consistent,
    streak_summary,
)
from tests.conftest import TODAY, WEEKDAYS, days_ago, records


def habit(name, repeat_days=None, history=None, streak=None):
    return Habit(
        name=name,
        id=name.lower(),
        repeat_days=list(range(7)) if repeat_days is None else repeat_days,
        history=history or [],
        streak=streak or Streak(),
    )


class TestCompletionPercent:
    def test_no_habits(self):
        assert completion_percent([], TODAY) == 0

    def test_only_scheduled_habits_count(self):
        habits = [
            habit("Read", history=records([TODAY])),
            habit("Walk"),
            habit("Gym", repeat_days=WEEKDAYS, history=records([TODAY])),
            habit("Brunch", repeat_days=[0], history=records([TODAY])),
        ]
        assert completion_percent(habits, TODAY) == 67

    def test_half_rounds_up(self):
        habits = [habit("Read", history=records([TODAY]))] + [habit(f"H{i}") for i in range(7)]
        assert completion_percent(habits, TODAY) == 13

    def test_skip_and_partial_are_not_done(self):
        habits = [
            habit("Read", history=[HistoryRecord(date=TODAY.isoformat(), status="skip")]),
            habit("Run", history=[HistoryRecord(date=TODAY.isoformat(), status="partial", value=5)]),
        ]
        assert completion_percent(habits, TODAY) == 0


class TestDailySummary:
    def test_last_week_oldest_first(self):
        habits = [
            habit("Read", history=records([days_ago(6), days_ago(1), TODAY])),
            habit("Gym", repeat_days=WEEKDAYS, history=records([TODAY])),
        ]
        summary = daily_summary(habits, TODAY)

        assert [d.date for d in summary] == [days_ago(n).isoformat() for n in range(6, -1, -1)]
        assert (summary[0].scheduled, summary[0].done, summary[0].percent) == (1, 1, 100)
        # Sunday: only the daily habit is due
        assert (summary[1].scheduled, summary[1].done, summary[1].percent) == (1, 0, 0)
        assert (summary[-1].scheduled, summary[-1].done, summary[-1].percent) == (2, 2, 100)

    def test_custom_length(self):
        assert len(daily_summary([], TODAY, days=30)) == 30


class TestStreakStats:
    def test_streak_summary(self):
        habits = [
            habit("Read", streak=Streak(current=4, longest=9)),
            habit("Walk", streak=Streak(current=6, longest=6)),
        ]
        summary = streak_summary(habits)
        assert (summary.max_current, summary.max_longest) == (6, 9)

    def test_empty(self):
        summary = streak_summary([])
        assert (summary.max_current, summary.max_longest) == (0, 0)
        assert most_consistent([]) is None
        assert least_consistent([]) is None

    def test_consistency_ranking(self):
        habits = [
            habit("Read", streak=Streak(current=1, longest=5)),
            habit("Walk", streak=Streak(current=0, longest=12)),
            habit("Gym", streak=Streak(current=0, longest=12)),
            habit("Floss", streak=Streak(current=0, longest=0)),
        ]
        assert most_consistent(habits).name == "Walk"
        assert least_consistent(habits).name == "Floss"
