"""Data models for habitgrid."""

from habitgrid.models.task import Task
from habitgrid.models.schedule import (
    Schedule,
    FrequencyType,
    DailySchedule,
    WeeklySchedule,
    MonthlySchedule,
    CustomSchedule,
    weekday_mask_from_days,
    weekdays_from_mask,
)
from habitgrid.models.views import TrackedTask, TaskWithStats, MonthTask, MonthViewDay

__all__ = [
    "Task",
    "Schedule",
    "FrequencyType",
    "DailySchedule",
    "WeeklySchedule",
    "MonthlySchedule",
    "CustomSchedule",
    "weekday_mask_from_days",
    "weekdays_from_mask",
    "TrackedTask",
    "TaskWithStats",
    "MonthTask",
    "MonthViewDay",
]
