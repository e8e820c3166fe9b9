"""Schedule models (versioned recurrence rules) for habitgrid.

A schedule version governs a task over an inclusive window of day indices
`[effective_from, effective_to]`; `effective_to=None` means open-ended.
Rules are never edited in place: an edit closes the open version and opens a
new one, so days before the edit keep their original due/not-due answers.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Iterable, Literal, Optional, Set, Tuple, Union

from pydantic import BaseModel, Field, field_validator

from habitgrid.models.constants import (
    DAYS_PER_WEEK,
    MIN_INTERVAL_DAYS,
    MONTHDAY_MAX,
    MONTHDAY_MIN,
    WEEKDAY_MASK_ALL,
)


class FrequencyType(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    CUSTOM = "custom"


def weekday_mask_from_days(days: Iterable[int]) -> int:
    """Encode weekday indices (Mon=0 ... Sun=6) into a 7-bit mask."""
    mask = 0
    for day in days:
        if not 0 <= int(day) < DAYS_PER_WEEK:
            raise ValueError(f"weekday must be in 0..6, got {day}")
        mask |= 1 << int(day)
    return mask


def weekdays_from_mask(mask: int) -> Set[int]:
    """Decode a 7-bit weekday mask into the set of weekday indices it selects."""
    return {day for day in range(DAYS_PER_WEEK) if mask & (1 << day)}


class ScheduleBase(BaseModel):
    """Fields shared by every schedule variant."""

    id: Optional[int] = Field(None, description="Schedule version id (assigned on persist)")
    task_id: Optional[int] = Field(None, description="Owning task id")
    effective_from: int = Field(..., description="First day index this version governs")
    effective_to: Optional[int] = Field(
        None, description="Last day index this version governs (inclusive); None if open-ended"
    )

    @field_validator("effective_to")
    @classmethod
    def _validate_effective_to(cls, v, info):
        start = info.data.get("effective_from")
        if v is not None and start is not None and v < start:
            raise ValueError("effective_to must be >= effective_from")
        return v

    @property
    def frequency_type(self) -> FrequencyType:
        return FrequencyType(self.type)

    def covers(self, day: int) -> bool:
        """Whether `day` falls inside this version's effective window."""
        if day < self.effective_from:
            return False
        return self.effective_to is None or day <= self.effective_to

    def rule_key(self) -> Tuple:
        """Recurrence rule identity, ignoring the window and ids."""
        return (
            self.type,
            getattr(self, "weekday_mask", None),
            getattr(self, "monthday", None),
            getattr(self, "interval_days", None),
        )


class DailySchedule(ScheduleBase):
    type: Literal["daily"] = "daily"


class WeeklySchedule(ScheduleBase):
    type: Literal["weekly"] = "weekly"
    weekday_mask: int = Field(
        ..., ge=1, le=WEEKDAY_MASK_ALL, description="Bit i set = due on weekday i (Mon=0)"
    )

    @property
    def weekdays(self) -> Set[int]:
        return weekdays_from_mask(self.weekday_mask)


class MonthlySchedule(ScheduleBase):
    type: Literal["monthly"] = "monthly"
    monthday: int = Field(..., ge=MONTHDAY_MIN, le=MONTHDAY_MAX, description="Day of month")


class CustomSchedule(ScheduleBase):
    type: Literal["custom"] = "custom"
    interval_days: int = Field(
        ..., ge=MIN_INTERVAL_DAYS, description="Due every N days, anchored at effective_from"
    )


Schedule = Annotated[
    Union[DailySchedule, WeeklySchedule, MonthlySchedule, CustomSchedule],
    Field(discriminator="type"),
]
