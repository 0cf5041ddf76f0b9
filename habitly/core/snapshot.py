#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Habitly - Snapshot codec
Serialization of the whole habit collection and lenient parsing of stored blobs.

Parsing never raises: an absent or unparsable blob yields an empty collection and
malformed entries are repaired field by field, so data written by earlier schema
versions still loads.
"""

import json
import logging
import math
from datetime import date
from typing import Any, Dict, List, Optional

from habitly.core.models import (
    DEFAULT_EMOJI,
    GoalType,
    Habit,
    HabitStatus,
    HistoryRecord,
    Streak,
    new_habit_id,
)
from habitly.utils.datetime_utils import now_iso
from habitly.utils.validators import is_number, is_valid_date

logger = logging.getLogger(__name__)

STORAGE_KEY = "habitly:habits_v1"
PLACEHOLDER_NAME = "Unnamed"
FALLBACK_REPEAT_DAYS = [1, 2, 3, 4, 5]

_GOAL_TYPES = {g.value for g in GoalType}
_STATUSES = {s.value for s in HabitStatus}


def serialize_habits(habits: List[Habit]) -> bytes:
    return json.dumps([h.to_dict() for h in habits], ensure_ascii=False).encode("utf-8")


def parse_habits(blob: Optional[bytes]) -> List[Habit]:
    """Decode a stored blob into habits, degrading to [] when it cannot be read"""
    if not blob:
        return []

    try:
        data = json.loads(blob)
    except (UnicodeDecodeError, ValueError) as e:
        logger.warning(f"Snapshot is not valid JSON, starting empty: {e}")
        return []

    if not isinstance(data, list):
        logger.warning(f"Snapshot root is {type(data).__name__}, expected a list; starting empty")
        return []

    habits = []
    for index, item in enumerate(data):
        if not isinstance(item, dict):
            logger.warning(f"Snapshot entry {index} is not an object; replaced with defaults")
            item = {}
        habits.append(sanitize_habit(item))
    return habits


def sanitize_habit(raw: Dict[str, Any]) -> Habit:
    """Coerce one stored entry into a Habit"""
    habit_id = raw.get("id")
    name = raw.get("name")
    goal_type = raw.get("goalType")
    repeat_days = raw.get("repeatDays")
    streak = raw.get("streak")
    history = raw.get("history")
    emoji = raw.get("emoji")
    reminder = raw.get("reminder")
    created_at = raw.get("createdAt")

    return Habit(
        id=str(habit_id) if habit_id not in (None, "") else new_habit_id(),
        name=name.strip() if isinstance(name, str) and name.strip() else PLACEHOLDER_NAME,
        emoji=emoji if isinstance(emoji, str) and emoji else DEFAULT_EMOJI,
        goal_type=goal_type if isinstance(goal_type, str) and goal_type in _GOAL_TYPES else GoalType.SIMPLE.value,
        goal_value=_number_or_none(raw.get("goalValue")),
        repeat_days=_sanitize_repeat_days(repeat_days),
        reminder=reminder if isinstance(reminder, str) else None,
        created_at=str(created_at) if created_at else now_iso(),
        streak=_sanitize_streak(streak),
        history=_sanitize_history(history) if isinstance(history, list) else [],
    )


def _number_or_none(value: Any) -> Optional[float]:
    if isinstance(value, str):
        try:
            value = float(value)
        except ValueError:
            return None
        if math.isfinite(value) and value.is_integer():
            value = int(value)
    if not is_number(value) or (isinstance(value, float) and not math.isfinite(value)):
        return None
    return value


def _to_int(value: Any) -> Optional[int]:
    number = _number_or_none(value)
    if number is None or (isinstance(number, float) and not number.is_integer()):
        return None
    return int(number)


def _sanitize_repeat_days(days: Any) -> List[int]:
    if not isinstance(days, list):
        return list(FALLBACK_REPEAT_DAYS)
    result: List[int] = []
    for day in days:
        index = _to_int(day)
        if index is not None and 0 <= index <= 6 and index not in result:
            result.append(index)
    return result


def _sanitize_streak(streak: Any) -> Streak:
    if not isinstance(streak, dict):
        return Streak()
    return Streak(
        current=_to_int(streak.get("current")) or 0,
        longest=_to_int(streak.get("longest")) or 0,
    )


def _sanitize_history(entries: List[Any]) -> List[HistoryRecord]:
    by_date: Dict[str, HistoryRecord] = {}
    dropped = 0
    for entry in entries:
        if not isinstance(entry, dict) or not _is_calendar_date(entry.get("date")) \
                or not isinstance(entry.get("status"), str) or entry["status"] not in _STATUSES:
            dropped += 1
            continue
        by_date[entry["date"]] = HistoryRecord(
            date=entry["date"],
            status=entry["status"],
            value=_number_or_none(entry.get("value")),
        )

    if dropped:
        logger.warning(f"Dropped {dropped} malformed history entries")

    return [by_date[key] for key in sorted(by_date)]


def _is_calendar_date(value: Any) -> bool:
    if not is_valid_date(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True
