"""
Streak computation.

A date is *scheduled* when its weekday (0=Sunday..6=Saturday) is in the habit's
``repeat_days``; it is *satisfied* when the history holds a ``done`` record for
it. Unscheduled dates never extend or break a run. Both values look back over a
trailing window ending at ``today``.
"""

from datetime import date, timedelta
from typing import Dict, Iterable, Sequence

from habitly.core.models import HistoryRecord, Streak
from habitly.utils.datetime_utils import weekday_index

STREAK_WINDOW_DAYS = 365


def is_scheduled(repeat_days: Iterable[int], on_date: date) -> bool:
    return weekday_index(on_date) in set(repeat_days)


def _done_dates(history: Sequence[HistoryRecord]) -> Dict[str, bool]:
    return {record.date: record.is_done for record in history}


def current_streak(repeat_days: Iterable[int], history: Sequence[HistoryRecord],
                   today: date, window: int = STREAK_WINDOW_DAYS) -> int:
    """Consecutive satisfied scheduled dates ending at the latest scheduled date <= today"""
    days = set(repeat_days)
    if not days:
        return 0

    done = _done_dates(history)
    count = 0
    for offset in range(window):
        day = today - timedelta(days=offset)
        if weekday_index(day) not in days:
            continue
        if not done.get(day.isoformat(), False):
            break
        count += 1
    return count


def longest_streak(repeat_days: Iterable[int], history: Sequence[HistoryRecord],
                   today: date, window: int = STREAK_WINDOW_DAYS) -> int:
    """Longest run of satisfied scheduled dates from `window` days ago through today"""
    days = set(repeat_days)
    if not days:
        return 0

    done = _done_dates(history)
    longest = 0
    running = 0
    for offset in range(window, -1, -1):
        day = today - timedelta(days=offset)
        if weekday_index(day) not in days:
            continue
        if done.get(day.isoformat(), False):
            running += 1
            longest = max(longest, running)
        else:
            running = 0
    return longest


def compute_streak(repeat_days: Iterable[int], history: Sequence[HistoryRecord], today: date) -> Streak:
    days = list(repeat_days)
    return Streak(
        current=current_streak(days, history, today),
        longest=longest_streak(days, history, today),
    )
