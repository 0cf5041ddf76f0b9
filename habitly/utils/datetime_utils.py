# utils/datetime_utils.py

from datetime import date, datetime, timedelta
from typing import List, Optional, Union

import pytz

from habitly.config import config


def get_timezone(tz_name: Optional[str] = None):
    return pytz.timezone(tz_name or config.timezone)


def now_local(tz_name: Optional[str] = None) -> datetime:
    return datetime.now(get_timezone(tz_name))


def today(tz_name: Optional[str] = None) -> date:
    """Calendar date in the configured timezone"""
    return now_local(tz_name).date()


def now_iso() -> str:
    return datetime.now(pytz.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def parse_date(value: Union[date, str]) -> date:
    """Accept a date or an ISO YYYY-MM-DD string"""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(value, "%Y-%m-%d").date()


def weekday_index(value: date) -> int:
    """0=Sunday .. 6=Saturday"""
    return value.isoweekday() % 7


def last_n_dates(n: int, end: date) -> List[date]:
    """The n dates ending at `end`, oldest first"""
    return [end - timedelta(days=offset) for offset in range(n - 1, -1, -1)]
