# services/stats_service.py

from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Sequence

from habitly.core.models import Habit
from habitly.core.streaks import is_scheduled
from habitly.utils.datetime_utils import last_n_dates


@dataclass
class DaySummary:
    date: str
    scheduled: int
    done: int
    percent: int


@dataclass
class StreakSummary:
    max_current: int = 0
    max_longest: int = 0


def _percent(done: int, total: int) -> int:
    """Half-up rounded percentage"""
    if total == 0:
        return 0
    return int(done * 100 / total + 0.5)


def summarize_day(habits: Sequence[Habit], on_date: date) -> DaySummary:
    scheduled = [h for h in habits if is_scheduled(h.repeat_days, on_date)]
    done = sum(1 for h in scheduled if h.is_done_on(on_date))
    return DaySummary(
        date=on_date.isoformat(),
        scheduled=len(scheduled),
        done=done,
        percent=_percent(done, len(scheduled)),
    )


def completion_percent(habits: Sequence[Habit], on_date: date) -> int:
    """Share of the habits scheduled on on_date that are marked done"""
    return summarize_day(habits, on_date).percent


def daily_summary(habits: Sequence[Habit], today: date, days: int = 7) -> List[DaySummary]:
    """Per-day completion for the last `days` days, oldest first"""
    return [summarize_day(habits, day) for day in last_n_dates(days, today)]


def streak_summary(habits: Sequence[Habit]) -> StreakSummary:
    summary = StreakSummary()
    for habit in habits:
        summary.max_current = max(summary.max_current, habit.streak.current)
        summary.max_longest = max(summary.max_longest, habit.streak.longest)
    return summary


def most_consistent(habits: Sequence[Habit]) -> Optional[Habit]:
    best = None
    for habit in habits:
        if best is None or habit.streak.longest > best.streak.longest:
            best = habit
    return best


def least_consistent(habits: Sequence[Habit]) -> Optional[Habit]:
    worst = None
    for habit in habits:
        if worst is None or habit.streak.longest < worst.streak.longest:
            worst = habit
    return worst
