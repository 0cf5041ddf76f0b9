#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Habitly - Core Data Models
Habit, history record and streak models with validation helpers
"""

import uuid
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from enum import Enum
from typing import Dict, List, Optional, Union, Any
import logging

from habitly.utils.validators import is_valid_date, is_valid_time, is_positive_int, is_number

logger = logging.getLogger(__name__)

DEFAULT_EMOJI = "🏃"

# ===== ENUMS =====

class GoalType(Enum):
    """How a habit is measured"""
    SIMPLE = "simple"
    TIME = "time"
    COUNT = "count"


class HabitStatus(Enum):
    """Outcome recorded for one day"""
    DONE = "done"
    SKIP = "skip"
    PARTIAL = "partial"


GOAL_TYPES_WITH_VALUE = (GoalType.TIME.value, GoalType.COUNT.value)

# ===== EXCEPTIONS =====

class HabitError(Exception):
    """Base error for habit operations"""
    pass


class ValidationError(HabitError):
    """Invalid input to a habit operation"""
    pass


class NotFoundError(HabitError):
    """Operation targets an id that is not in the collection"""

    def __init__(self, habit_id: str):
        super().__init__(f"Habit {habit_id!r} not found")
        self.habit_id = habit_id


class DuplicateIdError(HabitError):
    """Create collides with an existing id"""

    def __init__(self, habit_id: str):
        super().__init__(f"Habit {habit_id!r} already exists")
        self.habit_id = habit_id

# ===== VALIDATION HELPERS =====

def validate_text(text: str, min_length: int = 1, max_length: int = 200, field_name: str = "text") -> str:
    """Strip and length-check a text field"""
    if not isinstance(text, str):
        raise ValidationError(f"{field_name} must be a string")

    text = text.strip()
    if len(text) < min_length:
        raise ValidationError(f"{field_name} must be at least {min_length} characters")

    if len(text) > max_length:
        raise ValidationError(f"{field_name} must be at most {max_length} characters")

    return text


def validate_enum_value(value: Union[str, Enum], enum_class: type, field_name: str = "value") -> str:
    """Check value against an enum and return its string form"""
    if isinstance(value, enum_class):
        return value.value
    try:
        return enum_class(value).value
    except ValueError:
        valid_values = [e.value for e in enum_class]
        raise ValidationError(f"{field_name} must be one of: {valid_values}")


def validate_iso_date(value: Union[date, str], field_name: str = "date") -> str:
    """Return the ISO YYYY-MM-DD form of a date or date string"""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if not is_valid_date(value):
        raise ValidationError(f"{field_name} must be an ISO date (YYYY-MM-DD), got {value!r}")
    try:
        return date.fromisoformat(value).isoformat()
    except ValueError:
        raise ValidationError(f"{field_name} is not a calendar date: {value!r}")


def validate_repeat_days(days: Any) -> List[int]:
    """Sorted unique weekday indices, 0=Sunday..6=Saturday"""
    if not isinstance(days, (list, tuple, set, frozenset)):
        raise ValidationError("repeat_days must be a collection of weekday indices")
    for day in days:
        if isinstance(day, bool) or not isinstance(day, int) or not 0 <= day <= 6:
            raise ValidationError(f"repeat_days entries must be integers 0..6, got {day!r}")
    return sorted(set(days))

# ===== CORE MODELS =====

@dataclass
class HistoryRecord:
    """One day's outcome for a habit"""
    date: str  # ISO date (YYYY-MM-DD)
    status: str = HabitStatus.DONE.value
    value: Optional[float] = None  # minutes or repetitions actually done

    @property
    def is_done(self) -> bool:
        return self.status == HabitStatus.DONE.value

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"date": self.date, "status": self.status}
        if self.value is not None:
            data["value"] = self.value
        return data


@dataclass
class Streak:
    """Derived streak cache. Only the engine writes it."""
    current: int = 0
    longest: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {"current": self.current, "longest": self.longest}


@dataclass
class Habit:
    """One tracked recurring activity"""
    name: str
    id: Optional[str] = None
    emoji: str = DEFAULT_EMOJI
    goal_type: str = GoalType.SIMPLE.value
    goal_value: Optional[int] = None
    repeat_days: List[int] = field(default_factory=lambda: list(range(7)))
    reminder: Optional[str] = None  # HH:MM
    created_at: Optional[str] = None
    streak: Streak = field(default_factory=Streak)
    history: List[HistoryRecord] = field(default_factory=list)

    # ===== QUERIES =====

    def record_for(self, on_date: Union[date, str]) -> Optional[HistoryRecord]:
        key = on_date.isoformat() if isinstance(on_date, date) else on_date
        for record in self.history:
            if record.date == key:
                return record
        return None

    def status_on(self, on_date: Union[date, str]) -> Optional[str]:
        """Recorded status for a day, None when nothing was recorded"""
        record = self.record_for(on_date)
        return record.status if record else None

    def is_done_on(self, on_date: Union[date, str]) -> bool:
        return self.status_on(on_date) == HabitStatus.DONE.value

    # ===== SERIALIZATION =====

    def to_dict(self) -> Dict[str, Any]:
        """Snapshot shape (camelCase keys)"""
        return {
            "id": self.id,
            "name": self.name,
            "emoji": self.emoji,
            "goalType": self.goal_type,
            "goalValue": self.goal_value,
            "repeatDays": list(self.repeat_days),
            "reminder": self.reminder,
            "createdAt": self.created_at,
            "streak": self.streak.to_dict(),
            "history": [r.to_dict() for r in self.history],
        }


def new_habit_id() -> str:
    return str(uuid.uuid4())


def validate_habit(habit: Habit) -> Habit:
    """Check user-editable fields and return a normalized copy.

    Raises ValidationError for an empty name, an unknown goal type, a missing or
    non-positive goal value on time/count habits, bad weekday indices, a
    malformed reminder time or a history with malformed or repeated dates.
    """
    name = validate_text(habit.name, min_length=1, max_length=200, field_name="name")
    goal_type = validate_enum_value(habit.goal_type, GoalType, "goal_type")

    goal_value = habit.goal_value
    if goal_type in GOAL_TYPES_WITH_VALUE:
        if not is_positive_int(goal_value):
            raise ValidationError(f"goal_value must be a positive integer for {goal_type} habits")
    else:
        goal_value = None

    if habit.reminder is not None and not is_valid_time(habit.reminder):
        raise ValidationError("reminder must be in HH:MM format (24-hour)")

    if not isinstance(habit.emoji, str) or not habit.emoji:
        raise ValidationError("emoji must be a non-empty string")

    if habit.id is not None and (not isinstance(habit.id, str) or not habit.id):
        raise ValidationError("id must be a non-empty string")

    if not isinstance(habit.streak, Streak):
        raise ValidationError("streak must be a Streak")

    return replace(
        habit,
        name=name,
        goal_type=goal_type,
        goal_value=goal_value,
        repeat_days=validate_repeat_days(habit.repeat_days),
        history=validate_history(habit.history),
    )


def validate_record_value(value: Any) -> Optional[float]:
    if value is not None and not is_number(value):
        raise ValidationError(f"value must be a number, got {value!r}")
    return value


def validate_history(history: Any) -> List[HistoryRecord]:
    """Checked copy of a history, sorted by date; one record per date"""
    if not isinstance(history, (list, tuple)):
        raise ValidationError("history must be a list of HistoryRecord")

    records: Dict[str, HistoryRecord] = {}
    for record in history:
        if not isinstance(record, HistoryRecord):
            raise ValidationError(f"history entries must be HistoryRecord, got {type(record).__name__}")
        day = validate_iso_date(record.date, "history date")
        if day in records:
            raise ValidationError(f"history has more than one record for {day}")
        records[day] = HistoryRecord(
            date=day,
            status=validate_enum_value(record.status, HabitStatus, "history status"),
            value=validate_record_value(record.value),
        )
    return [records[day] for day in sorted(records)]


__all__ = [
    'GoalType',
    'HabitStatus',
    'HabitError',
    'ValidationError',
    'NotFoundError',
    'DuplicateIdError',
    'HistoryRecord',
    'Streak',
    'Habit',
    'new_habit_id',
    'validate_text',
    'validate_enum_value',
    'validate_iso_date',
    'validate_repeat_days',
    'validate_habit',
    'validate_record_value',
    'validate_history',
]
