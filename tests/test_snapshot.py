"""
Tests for snapshot parsing and repair of stored entries
"""
import json

import pytest

from habitly.core.models import DEFAULT_EMOJI, Habit, HistoryRecord, Streak
from habitly.core.snapshot import (
    FALLBACK_REPEAT_DAYS,
    PLACEHOLDER_NAME,
    parse_habits,
    sanitize_habit,
    serialize_habits,
)


def blob(data) -> bytes:
    return json.dumps(data).encode("utf-8")


class TestParseHabits:
    @pytest.mark.parametrize("raw", [None, b"", b"{broken", b"\xff\xfe\x00", blob({"habits": []}), blob("text")])
    def test_unreadable_blob_yields_empty(self, raw):
        assert parse_habits(raw) == []

    def test_non_object_entry_gets_defaults(self):
        habits = parse_habits(blob([42, {"id": "a", "name": "Read"}]))

        assert len(habits) == 2
        assert habits[0].name == PLACEHOLDER_NAME
        assert habits[0].id
        assert habits[1].id == "a"

    def test_round_trip(self):
        habit = Habit(
            id="h1",
            name="Pushups",
            emoji="💪",
            goal_type="count",
            goal_value=20,
            repeat_days=[1, 3, 5],
            reminder="06:45",
            created_at="2026-01-02T08:00:00Z",
            streak=Streak(current=2, longest=7),
            history=[
                HistoryRecord(date="2026-10-14", status="done", value=25),
                HistoryRecord(date="2026-10-16", status="partial", value=12.5),
            ],
        )
        assert parse_habits(serialize_habits([habit])) == [habit]

    def test_non_ascii_preserved(self):
        raw = serialize_habits([Habit(id="x", name="Lire 📖", created_at="2026-01-01T00:00:00Z")])
        assert "📖".encode("utf-8") in raw
        assert parse_habits(raw)[0].name == "Lire 📖"


class TestSanitizeHabit:
    def test_empty_entry(self):
        habit = sanitize_habit({})

        assert habit.id
        assert habit.name == PLACEHOLDER_NAME
        assert habit.emoji == DEFAULT_EMOJI
        assert habit.goal_type == "simple"
        assert habit.goal_value is None
        assert habit.repeat_days == FALLBACK_REPEAT_DAYS
        assert habit.reminder is None
        assert habit.created_at
        assert habit.streak == Streak(0, 0)
        assert habit.history == []

    def test_generated_ids_are_unique(self):
        assert sanitize_habit({}).id != sanitize_habit({}).id

    def test_numeric_id_kept_as_string(self):
        assert sanitize_habit({"id": 17}).id == "17"

    @pytest.mark.parametrize("goal_type", ["distance", None, 3, ["count"]])
    def test_unknown_goal_type_falls_back(self, goal_type):
        assert sanitize_habit({"goalType": goal_type}).goal_type == "simple"

    @pytest.mark.parametrize("raw,expected", [
        ("15", 15),
        (30.0, 30),
        ("abc", None),
        ("nan", None),
        (True, None),
        (None, None),
    ])
    def test_goal_value_coercion(self, raw, expected):
        assert sanitize_habit({"goalValue": raw}).goal_value == expected

    def test_repeat_days_filtered(self):
        habit = sanitize_habit({"repeatDays": [3, "1", 9, -1, 3, "x", 0, 2.5]})
        assert habit.repeat_days == [3, 1, 0]

    def test_empty_repeat_days_kept(self):
        assert sanitize_habit({"repeatDays": []}).repeat_days == []

    @pytest.mark.parametrize("raw", [None, "daily", {"mon": True}])
    def test_non_list_repeat_days_use_fallback(self, raw):
        assert sanitize_habit({"repeatDays": raw}).repeat_days == FALLBACK_REPEAT_DAYS

    @pytest.mark.parametrize("raw,expected", [
        ({"current": "3", "longest": 8}, Streak(3, 8)),
        ({"current": "many"}, Streak(0, 0)),
        ("streak", Streak(0, 0)),
    ])
    def test_streak_coercion(self, raw, expected):
        assert sanitize_habit({"streak": raw}).streak == expected

    def test_history_repair(self):
        habit = sanitize_habit({"history": [
            {"date": "2026-10-15", "status": "done"},
            {"date": "2026-10-13", "status": "skip"},
            {"date": "2026-10-15", "status": "partial", "value": "4"},
            {"date": "2026-02-30", "status": "done"},
            {"date": "yesterday", "status": "done"},
            {"date": "2026-10-14", "status": "finished"},
            {"date": "2026-10-14", "status": ["done"]},
            "2026-10-12",
        ]})

        assert habit.history == [
            HistoryRecord(date="2026-10-13", status="skip"),
            HistoryRecord(date="2026-10-15", status="partial", value=4),
        ]

    def test_history_not_a_list(self):
        assert sanitize_habit({"history": {"2026-10-15": "done"}}).history == []
