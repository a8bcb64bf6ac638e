from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta
from typing import List, Optional, Tuple, Union
from zoneinfo import ZoneInfo

from config import get_settings

CivilDateLike = Union[date, datetime, str]


# -----------------------------
# Fixed civil timezone
# -----------------------------
def booking_tz() -> ZoneInfo:
    return ZoneInfo(get_settings().BOOKING_TIMEZONE)


def today() -> date:
    """Current civil date in the booking timezone, whatever the host clock says."""
    return datetime.now(booking_tz()).date()


def to_civil_date(value: CivilDateLike) -> date:
    """
    Normalize a date-like value into a civil date in the booking timezone.
    Accepts a `date`, an aware `datetime` (converted into the booking zone
    first) or a 'YYYY-MM-DD' string. Naive datetimes are rejected because
    their day is ambiguous.
    """
    if isinstance(value, datetime):
        if value.tzinfo is None or value.utcoffset() is None:
            raise ValueError("datetime must include a timezone offset")
        return value.astimezone(booking_tz()).date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        return date.fromisoformat(value.strip())
    raise ValueError(f"not a civil date: {value!r}")


# -----------------------------
# Range arithmetic
# -----------------------------
def dates_in_range(start: date, end: date) -> List[date]:
    """
    Inclusive, ascending list of civil dates from start to end.
    Falls back to [start] when end < start.
    """
    if end < start:
        return [start]
    return [start + timedelta(days=offset) for offset in range((end - start).days + 1)]


def days_count(start: date, end: date) -> int:
    """Same as len(dates_in_range(start, end)) without building the list."""
    return max((end - start).days, 0) + 1


def covers(start: date, end: Optional[date], day: date) -> bool:
    # A missing end means a single-day range
    return start <= day <= (end or start)


def ranges_overlap(a_start: date, a_end: date, b_start: date, b_end: date) -> bool:
    """
    Closed interval overlap: [start, end]
    Unlike time slots, two leave ranges sharing a boundary day do overlap.
    """
    return a_start <= b_end and b_start <= a_end


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    """First and last civil date of a month (1-12)."""
    if not 1 <= month <= 12:
        raise ValueError(f"month must be in 1..12, got {month}")
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


# -----------------------------
# Booking window
# -----------------------------
def max_booking_date(current: Optional[date] = None) -> date:
    """December 31st of the year after the current one."""
    current = current or today()
    return date(current.year + 1, 12, 31)


def is_within_booking_window(day: date, current: Optional[date] = None) -> bool:
    current = current or today()
    return current <= day <= max_booking_date(current)
