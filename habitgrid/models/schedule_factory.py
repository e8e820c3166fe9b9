"""Schedule creation factory for habitgrid.

This module centralizes validation of user-supplied recurrence parameters so
that invalid input is rejected before anything is written.
"""

from typing import Optional, Union

from pydantic import ValidationError as PydanticValidationError

from habitgrid.errors import ValidationError
from habitgrid.models.constants import (
    MIN_INTERVAL_DAYS,
    MONTHDAY_MAX,
    MONTHDAY_MIN,
    WEEKDAY_MASK_ALL,
)
from habitgrid.models.schedule import (
    CustomSchedule,
    DailySchedule,
    FrequencyType,
    MonthlySchedule,
    WeeklySchedule,
)


def validate_title(title: Optional[str]) -> str:
    """Return the stripped title, rejecting empty ones.

    Raises:
        ValidationError: If the title is missing or blank
    """
    cleaned = (title or "").strip()
    if not cleaned:
        raise ValidationError("title must not be empty")
    return cleaned


def parse_frequency_type(frequency_type: Union[str, FrequencyType]) -> FrequencyType:
    """Convert a frequency type string to the enum.

    Raises:
        ValidationError: If the value names no known variant
    """
    if isinstance(frequency_type, FrequencyType):
        return frequency_type
    try:
        return FrequencyType(str(frequency_type or "").strip().lower())
    except ValueError:
        raise ValidationError(
            f"frequency_type must be one of {[f.value for f in FrequencyType]}, got {frequency_type!r}"
        )


def build_schedule(
    frequency_type: Union[str, FrequencyType],
    *,
    effective_from: int,
    weekday_mask: Optional[int] = None,
    monthday: Optional[int] = None,
    interval_days: Optional[int] = None,
    task_id: Optional[int] = None,
):
    """Build a validated schedule version for the given frequency type.

    Only the parameter the variant needs is consulted; the others are ignored.

    Args:
        frequency_type: One of daily, weekly, monthly, custom
        effective_from: First day index the version governs
        weekday_mask: Weekly only, 7-bit mask with at least one bit set
        monthday: Monthly only, in [1, 28]
        interval_days: Custom only, >= 1
        task_id: Owning task id, if already known

    Returns:
        A DailySchedule, WeeklySchedule, MonthlySchedule or CustomSchedule

    Raises:
        ValidationError: If the required parameter is absent or out of range
    """
    freq = parse_frequency_type(frequency_type)
    common = {"task_id": task_id, "effective_from": effective_from, "effective_to": None}

    try:
        if freq == FrequencyType.DAILY:
            return DailySchedule(**common)

        if freq == FrequencyType.WEEKLY:
            if weekday_mask is None or not 1 <= int(weekday_mask) <= WEEKDAY_MASK_ALL:
                raise ValidationError("weekly schedules need at least one weekday selected")
            return WeeklySchedule(weekday_mask=int(weekday_mask), **common)

        if freq == FrequencyType.MONTHLY:
            if monthday is None or not MONTHDAY_MIN <= int(monthday) <= MONTHDAY_MAX:
                raise ValidationError(f"monthday must be between {MONTHDAY_MIN} and {MONTHDAY_MAX}")
            return MonthlySchedule(monthday=int(monthday), **common)

        if interval_days is None or int(interval_days) < MIN_INTERVAL_DAYS:
            raise ValidationError(f"interval_days must be >= {MIN_INTERVAL_DAYS}")
        return CustomSchedule(interval_days=int(interval_days), **common)
    except PydanticValidationError as e:
        raise ValidationError(str(e)) from e
