"""Streak calculation for habitgrid.

A streak is a run of consecutive due days that were all completed. Days on
which a task is not due are transparent: they neither extend nor break a run.
Completions recorded on non-due days are never inspected, so they do not count.

All functions here are pure: they work on a TrackedTask snapshot and a set of
completed day indices (or (task_id, day) keys for the aggregate).
"""

from __future__ import annotations

import logging
from typing import AbstractSet, Iterable, Optional, Tuple

from habitgrid.engine.days import week_start
from habitgrid.engine.evaluator import effective_schedule, first_effective_day, is_due
from habitgrid.models.constants import DAYS_PER_WEEK
from habitgrid.models.views import TrackedTask

logger = logging.getLogger(__name__)


def current_streak(tracked: TrackedTask, completed_days: AbstractSet[int], reference_day: int) -> int:
    """Count the completed due days ending at `reference_day`.

    Walks backward from `reference_day`. A due day that is not done breaks the
    streak, except on `reference_day` itself (not done *yet* today). The walk
    stops at the first day without an effective schedule.
    """
    count = 0
    day = reference_day
    while True:
        schedule = effective_schedule(tracked.schedules, day)
        if schedule is None:
            break
        if is_due(schedule, day):
            if day in completed_days:
                count += 1
            elif day != reference_day:
                break
        day -= 1
    return count


def best_streak(tracked: TrackedTask, completed_days: AbstractSet[int], until_day: int) -> int:
    """Longest run of completed due days between the task's first effective day and `until_day`.

    Same due/skip/break rules as current_streak, without the grace for the
    last day. A day with no effective schedule resets the run.
    """
    start = first_effective_day(tracked.schedules)
    if start is None:
        return 0

    best = 0
    run = 0
    for day in range(start, until_day + 1):
        schedule = effective_schedule(tracked.schedules, day)
        if schedule is None:
            run = 0
            continue
        if not is_due(schedule, day):
            continue
        if day in completed_days:
            run += 1
            best = max(best, run)
        else:
            run = 0
    return best


def task_streaks(tracked: TrackedTask, completed_days: AbstractSet[int], reference_day: int) -> Tuple[int, int]:
    """Return (current_streak, best_streak) for a task as of `reference_day`."""
    current = current_streak(tracked, completed_days, reference_day)
    best = best_streak(tracked, completed_days, reference_day)
    # The forward scan sees every run the backward walk sees.
    return current, max(best, current)


def _week_status(
    tracked_tasks: Iterable[TrackedTask],
    completed_keys: AbstractSet[Tuple[int, int]],
    start_day: int,
    end_day: int,
) -> Optional[bool]:
    """Evaluate the days [start_day, end_day] across every task.

    Returns None if nothing was due, True if every due occurrence was done,
    False otherwise.
    """
    due_count = 0
    for tracked in tracked_tasks:
        for day in range(start_day, end_day + 1):
            if not is_due(effective_schedule(tracked.schedules, day), day):
                continue
            due_count += 1
            if (tracked.id, day) not in completed_keys:
                return False
    return True if due_count > 0 else None


def weekly_streak(
    tracked_tasks: Iterable[TrackedTask],
    completed_keys: AbstractSet[Tuple[int, int]],
    today: int,
    include_current_week: bool = False,
) -> int:
    """Count consecutive perfect weeks across all tasks.

    Weeks run Monday..Sunday. Counting starts at the most recently completed
    week and walks backward until a week in which some due occurrence was not
    completed. Weeks with nothing due are skipped without breaking the streak.

    The current week is not counted unless `include_current_week` is set; then
    it counts provisionally if something was due by today and all of it is
    done. An unfinished current week never breaks the streak.

    Archived tasks belong in `tracked_tasks`: their closed windows keep past
    weeks as they were and make them never due afterwards.
    """
    tracked_tasks = [t for t in tracked_tasks if t.schedules]
    if not tracked_tasks:
        return 0

    floor = min(first_effective_day(t.schedules) for t in tracked_tasks)
    this_monday = week_start(today)

    streak = 0
    if include_current_week and _week_status(tracked_tasks, completed_keys, this_monday, today):
        streak += 1

    monday = this_monday - DAYS_PER_WEEK
    while monday + DAYS_PER_WEEK - 1 >= floor:
        status = _week_status(tracked_tasks, completed_keys, monday, monday + DAYS_PER_WEEK - 1)
        if status is False:
            break
        if status:
            streak += 1
        monday -= DAYS_PER_WEEK

    logger.debug(f"Weekly streak as of day {today}: {streak} (include_current_week={include_current_week})")
    return streak
