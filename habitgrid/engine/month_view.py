"""Month view builder: join schedules and completions over a month grid."""

from __future__ import annotations

from typing import AbstractSet, Iterable, List, Tuple

from habitgrid.engine.days import month_grid
from habitgrid.engine.evaluator import effective_schedule, is_due
from habitgrid.models.views import MonthTask, MonthViewDay, TrackedTask


def build_month_view(
    year: int,
    month: int,
    tracked_tasks: Iterable[TrackedTask],
    completed_keys: AbstractSet[Tuple[int, int]],
) -> List[MonthViewDay]:
    """Build one MonthViewDay per cell of `month_grid(year, month)`.

    Each day lists the tasks due on it (sorted by id) using the schedule
    version effective on that day, so later edits never change earlier days.
    Archived tasks are included: their closed window keeps them on the days
    they governed and off every later day. Cells outside the month are
    included; telling them apart is left to the caller (see `month_bounds`).
    """
    ordered = sorted(tracked_tasks, key=lambda t: t.id)

    result: List[MonthViewDay] = []
    for day in month_grid(year, month):
        tasks: List[MonthTask] = []
        for tracked in ordered:
            if not is_due(effective_schedule(tracked.schedules, day), day):
                continue
            tasks.append(
                MonthTask(
                    id=tracked.id,
                    title=tracked.task.title,
                    is_done=(tracked.id, day) in completed_keys,
                )
            )
        due_count = len(tasks)
        done_count = sum(1 for t in tasks if t.is_done)
        result.append(
            MonthViewDay(
                day=day,
                due_count=due_count,
                done_count=done_count,
                all_done=due_count > 0 and due_count == done_count,
                tasks=tasks,
            )
        )
    return result
