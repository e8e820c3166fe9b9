"""Recurrence & streak engine for habitgrid."""

from habitgrid.engine.days import (
    EPOCH,
    DAY_MIN,
    DAY_MAX,
    check_day,
    day_index,
    date_from_day_index,
    today_index,
    weekday,
    week_start,
    month_bounds,
    month_grid,
)
from habitgrid.engine.evaluator import is_due, effective_schedule, first_effective_day, is_task_due
from habitgrid.engine.streaks import current_streak, best_streak, task_streaks, weekly_streak
from habitgrid.engine.month_view import build_month_view

__all__ = [
    "EPOCH",
    "DAY_MIN",
    "DAY_MAX",
    "check_day",
    "day_index",
    "date_from_day_index",
    "today_index",
    "weekday",
    "week_start",
    "month_bounds",
    "month_grid",
    "is_due",
    "effective_schedule",
    "first_effective_day",
    "is_task_due",
    "current_streak",
    "best_streak",
    "task_streaks",
    "weekly_streak",
    "build_month_view",
]
