"""
Month Bucketing

Every record is filed under the calendar month of its date, written as a
"YYYY-MM" key. The same key is stored alongside the record and used as the
filter for every "by month" query, so all screens agree on which month a
record belongs to.
"""

import calendar
import re
from datetime import date, datetime
from typing import Optional, Union

MONTH_KEY_PATTERN = re.compile(r"^(\d{4})-(0[1-9]|1[0-2])$")


def month_key_of(value: Union[date, datetime]) -> str:
    """
    Return the canonical month key for a date.

    Only the year and month are used, so any two dates in the same
    calendar month produce the same key.
    """
    return f"{value.year:04d}-{value.month:02d}"


def parse_month_key(key: str) -> tuple[int, int]:
    """
    Split a month key into (year, month).

    Raises:
        ValueError: If the key is not a well-formed "YYYY-MM" string
    """
    match = MONTH_KEY_PATTERN.match(key or "")
    if not match:
        raise ValueError(f"Invalid month key: {key!r} (expected YYYY-MM)")
    return int(match.group(1)), int(match.group(2))


def is_month_key(key: str) -> bool:
    """Check whether a string is a well-formed month key."""
    return bool(MONTH_KEY_PATTERN.match(key or ""))


def shift_month(key: str, months: int) -> str:
    """Move a month key forward (or backward) by a number of months."""
    year, month = parse_month_key(key)
    index = year * 12 + (month - 1) + months
    return f"{index // 12:04d}-{index % 12 + 1:02d}"


def next_month(key: str) -> str:
    """Month selector "next" button."""
    return shift_month(key, 1)


def previous_month(key: str) -> str:
    """Month selector "previous" button."""
    return shift_month(key, -1)


def current_month_key(today: Optional[date] = None) -> str:
    """Month key for today (the default month on every screen)."""
    return month_key_of(today or date.today())


def month_label(key: str) -> str:
    """Long display label, e.g. "March 2024"."""
    year, month = parse_month_key(key)
    return f"{calendar.month_name[month]} {year}"


def month_bounds(key: str) -> tuple[date, date]:
    """First and last calendar day of the month."""
    year, month = parse_month_key(key)
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)
