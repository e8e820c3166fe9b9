"""Schedule evaluation: is a task due on a given day?"""

from __future__ import annotations

from typing import Optional, Sequence

from habitgrid.engine.days import day_of_month, weekday
from habitgrid.models.schedule import FrequencyType


def is_due(schedule, day: int) -> bool:
    """Decide whether `schedule` makes its task due on `day`.

    Days outside the schedule's effective window are never due. Malformed
    rules (empty weekly mask, monthday that the month does not have,
    non-positive interval, unknown type) evaluate to never-due instead of
    raising; rejecting them is the job of the schedule factory.
    """
    if schedule is None:
        return False
    if day < schedule.effective_from:
        return False
    if schedule.effective_to is not None and day > schedule.effective_to:
        return False

    kind = getattr(schedule, "type", None)

    if kind == FrequencyType.DAILY.value:
        return True

    if kind == FrequencyType.WEEKLY.value:
        mask = getattr(schedule, "weekday_mask", None) or 0
        return bool(mask & (1 << weekday(day)))

    if kind == FrequencyType.MONTHLY.value:
        monthday = getattr(schedule, "monthday", None)
        return monthday is not None and day_of_month(day) == monthday

    if kind == FrequencyType.CUSTOM.value:
        interval = getattr(schedule, "interval_days", None)
        if not interval or interval < 1:
            return False
        return (day - schedule.effective_from) % interval == 0

    return False


def effective_schedule(schedules: Sequence, day: int):
    """Return the schedule version whose window covers `day`, or None.

    Windows of one task do not overlap; if malformed data makes them overlap,
    the version that started latest wins.
    """
    found = None
    for schedule in schedules:
        if schedule.covers(day):
            if found is None or schedule.effective_from >= found.effective_from:
                found = schedule
    return found


def first_effective_day(schedules: Sequence) -> Optional[int]:
    """Earliest day any schedule version governs, or None without schedules."""
    if not schedules:
        return None
    return min(s.effective_from for s in schedules)


def is_task_due(schedules: Sequence, day: int) -> bool:
    """Whether a task with the given schedule history is due on `day`."""
    return is_due(effective_schedule(schedules, day), day)
