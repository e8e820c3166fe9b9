"""Calendar/day-index arithmetic for habitgrid.

Every date the engine touches is reduced to an integer day index: the number
of whole days between EPOCH and a UTC calendar date. EPOCH is a Monday, so
weeks line up with multiples of seven and `weekday(day) == day % 7`.
"""

from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta, timezone
from typing import List, Optional, Tuple, Union

from habitgrid.errors import ValidationError
from habitgrid.models.constants import DAYS_PER_WEEK, MONTH_GRID_DAYS

# First Monday of 1970
EPOCH = date(1970, 1, 5)

# Day indices representable as a calendar date
DAY_MIN = (date.min - EPOCH).days
DAY_MAX = (date.max - EPOCH).days


def _utc_date(value: Union[date, datetime]) -> date:
    if isinstance(value, datetime):
        # Naive datetimes are taken as UTC
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    return value


def day_index(value: Union[date, datetime]) -> int:
    """Return the day index of a date (or the UTC date of a datetime)."""
    return (_utc_date(value) - EPOCH).days


def check_day(day: int) -> int:
    """Return `day` unchanged, rejecting indices outside the calendar range.

    Raises:
        ValidationError: If `day` has no calendar date
    """
    if not DAY_MIN <= day <= DAY_MAX:
        raise ValidationError(f"day {day} is outside the supported range {DAY_MIN}..{DAY_MAX}")
    return day


def date_from_day_index(day: int) -> date:
    return EPOCH + timedelta(days=check_day(day))


def today_index(now: Optional[datetime] = None) -> int:
    """Day index of the current UTC date."""
    return day_index(now if now is not None else datetime.utcnow())


def weekday(day: int) -> int:
    """Weekday of a day index (Monday=0 ... Sunday=6)."""
    return day % DAYS_PER_WEEK


def day_of_month(day: int) -> int:
    return date_from_day_index(day).day


def week_start(day: int) -> int:
    """Day index of the Monday starting the week that contains `day`."""
    return day - weekday(day)


def month_bounds(year: int, month: int) -> Tuple[int, int]:
    """Return (first_day, last_day) day indices of a calendar month.

    Raises:
        ValidationError: If month is outside 1..12
    """
    if not 1 <= month <= 12:
        raise ValidationError(f"month must be between 1 and 12, got {month}")
    try:
        _, days_in_month = calendar.monthrange(year, month)
        first = day_index(date(year, month, 1))
    except ValueError as e:
        raise ValidationError(str(e)) from e
    return first, first + days_in_month - 1


def month_grid(year: int, month: int) -> List[int]:
    """Return the fixed-size day grid used to render a month.

    The grid is six Monday-first weeks (42 day indices) starting at the Monday
    on or before the 1st, so it always covers the whole month plus the
    leading/trailing days of the adjacent months.
    """
    first, _ = month_bounds(year, month)
    start = week_start(first)
    check_day(start)
    check_day(start + MONTH_GRID_DAYS - 1)
    return list(range(start, start + MONTH_GRID_DAYS))
