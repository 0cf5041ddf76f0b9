# utils/validators.py

import re

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def is_valid_date(date_str: str) -> bool:
    return isinstance(date_str, str) and bool(_DATE_RE.match(date_str))


def is_valid_time(time_str: str) -> bool:
    """HH:MM in 24-hour format"""
    return isinstance(time_str, str) and bool(_TIME_RE.match(time_str))


def is_positive_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)
