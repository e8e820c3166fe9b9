"""Task operations for habitgrid.

This is the request/response boundary of the engine: every operation takes a
SQLAlchemy session, loads what it needs, and hands a snapshot to the pure
engine functions. Mutations run under a single process-wide lock so that
read-modify-write operations (toggle, schedule transitions) are serialized.
"""

from __future__ import annotations

import logging
import threading
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from habitgrid.database.completion_repository import CompletionRepository
from habitgrid.database.repository import TaskRepository
from habitgrid.engine.days import check_day, month_grid, today_index
from habitgrid.engine.evaluator import effective_schedule, is_due
from habitgrid.engine.month_view import build_month_view
from habitgrid.engine.streaks import task_streaks, weekly_streak
from habitgrid.errors import NotFoundError, StorageError, ValidationError
from habitgrid.models.schedule_factory import build_schedule, validate_title
from habitgrid.models.views import MonthViewDay, TaskWithStats, TrackedTask

logger = logging.getLogger(__name__)

# Serializes every mutation in this process.
_write_lock = threading.RLock()


def _stats_for(tracked: TrackedTask, completed_days: set, day: int) -> TaskWithStats:
    schedule = effective_schedule(tracked.schedules, day)
    current, best = task_streaks(tracked, completed_days, day)
    return TaskWithStats(
        task=tracked.task,
        # Fall back to the latest version (e.g. a day before the task existed)
        schedule=schedule or (tracked.schedules[-1] if tracked.schedules else None),
        current_streak=current,
        best_streak=best,
        is_due=is_due(schedule, day),
        today_status=day in completed_days,
    )


def _resolve_day(day: Optional[int]) -> int:
    """The requested day index, or today when omitted."""
    return today_index() if day is None else check_day(day)


def _require_task(tasks: TaskRepository, task_id: int) -> None:
    if not tasks.exists(task_id):
        raise NotFoundError(task_id)


def add_task(
    db: Session,
    *,
    title: str,
    frequency_type: str,
    weekday_mask: Optional[int] = None,
    monthday: Optional[int] = None,
    interval_days: Optional[int] = None,
    notes: Optional[str] = None,
    day: Optional[int] = None,
) -> TaskWithStats:
    """Create a task and its initial schedule, effective from `day` (default today).

    Raises:
        ValidationError: If the title or schedule parameters are invalid (nothing is written)
    """
    day = _resolve_day(day)
    cleaned_title = validate_title(title)
    schedule = build_schedule(
        frequency_type,
        effective_from=day,
        weekday_mask=weekday_mask,
        monthday=monthday,
        interval_days=interval_days,
    )

    with _write_lock:
        tasks = TaskRepository(db)
        task = tasks.create(title=cleaned_title, notes=notes, schedule=schedule)
        logger.info(f"Added task {task.id} ({schedule.type}) effective from day {day}")
        return get_task(db, task.id, day=day)


def get_task(db: Session, task_id: int, day: Optional[int] = None) -> TaskWithStats:
    """Return one task with its stats as of `day` (default today).

    Raises:
        NotFoundError: If the task does not exist
    """
    day = _resolve_day(day)
    try:
        tracked = TaskRepository(db).get_tracked(task_id)
        if tracked is None:
            raise NotFoundError(task_id)
        completed = CompletionRepository(db).completed_days(task_id)
    except SQLAlchemyError as e:
        raise StorageError(f"Failed to load task {task_id}") from e
    return _stats_for(tracked, completed, day)


def list_tasks(db: Session, day: Optional[int] = None) -> List[TaskWithStats]:
    """Return every active task, newest first, with stats as of `day` (default today)."""
    day = _resolve_day(day)
    try:
        tracked_tasks = TaskRepository(db).list_tracked(active_only=True)
        keys = CompletionRepository(db).completed_keys(end_day=day)
    except SQLAlchemyError as e:
        raise StorageError("Failed to list tasks") from e

    by_task: dict = {t.id: set() for t in tracked_tasks}
    for task_id, completed_day in keys:
        if task_id in by_task:
            by_task[task_id].add(completed_day)
    return [_stats_for(t, by_task[t.id], day) for t in tracked_tasks]


def edit_task(
    db: Session,
    task_id: int,
    *,
    new_title: str,
    new_frequency_type: str,
    new_weekday_mask: Optional[int] = None,
    new_monthday: Optional[int] = None,
    new_interval_days: Optional[int] = None,
    new_notes: Optional[str] = None,
    day: Optional[int] = None,
) -> TaskWithStats:
    """Rename a task and, if its recurrence rule changed, switch rules from `day`.

    The open schedule version is closed at `day - 1` and the new rule opens at
    `day` (default today) in one transaction. Completions are left untouched,
    so month views and streaks for days before `day` do not change.

    Raises:
        ValidationError: If the new parameters are invalid, the task is archived,
            or `day` precedes the open version
        NotFoundError: If the task does not exist
    """
    day = _resolve_day(day)
    cleaned_title = validate_title(new_title)
    new_schedule = build_schedule(
        new_frequency_type,
        effective_from=day,
        weekday_mask=new_weekday_mask,
        monthday=new_monthday,
        interval_days=new_interval_days,
        task_id=task_id,
    )

    with _write_lock:
        tasks = TaskRepository(db)
        task = tasks.get(task_id)
        if task is None:
            raise NotFoundError(task_id)
        if task.archived_at is not None:
            raise ValidationError(f"task {task_id} is archived")
        current = tasks.schedules.get_open_row(task_id)
        rule_changed = current is None or current.to_pydantic().rule_key() != new_schedule.rule_key()
        tasks.update(
            task_id,
            title=cleaned_title,
            notes=new_notes,
            schedule=new_schedule if rule_changed else None,
            day=day,
        )
        if rule_changed:
            logger.info(f"Task {task_id} switched to {new_schedule.type} from day {day}")
        return get_task(db, task_id, day=day)


def archive_task(db: Session, task_id: int, day: Optional[int] = None) -> None:
    """Archive a task; `day` (default today) is the last day its schedule governs.

    Raises:
        NotFoundError: If the task does not exist
    """
    day = _resolve_day(day)
    with _write_lock:
        tasks = TaskRepository(db)
        if tasks.archive(task_id, day) is None:
            raise NotFoundError(task_id)


def delete_task(db: Session, task_id: int) -> None:
    """Irreversibly remove a task, its schedule history and its completions.

    Raises:
        NotFoundError: If the task does not exist
    """
    with _write_lock:
        if not TaskRepository(db).delete(task_id):
            raise NotFoundError(task_id)


def delete_all_tasks(db: Session) -> None:
    """Irreversibly remove every task."""
    with _write_lock:
        TaskRepository(db).delete_all()


def toggle_completion(db: Session, task_id: int, day: int) -> bool:
    """Flip the done state of (task_id, day) and return the new state.

    The store does not check that the task is due on `day`; completions on
    non-due days are kept but never count toward streaks.

    Raises:
        ValidationError: If `day` has no calendar date
        NotFoundError: If the task does not exist
    """
    check_day(day)
    with _write_lock:
        _require_task(TaskRepository(db), task_id)
        done = CompletionRepository(db).toggle_completion(task_id, day)
    logger.debug(f"Toggled task {task_id} day {day} -> {done}")
    return done


def get_month_view(db: Session, year: int, month: int) -> List[MonthViewDay]:
    """Return the month grid for (year, month) with due/done tasks per day.

    Raises:
        ValidationError: If month is outside 1..12
    """
    grid = month_grid(year, month)
    try:
        tracked_tasks = TaskRepository(db).list_tracked(active_only=False)
        keys = CompletionRepository(db).completed_keys(grid[0], grid[-1])
    except SQLAlchemyError as e:
        raise StorageError(f"Failed to load month view {year}-{month:02d}") from e
    return build_month_view(year, month, tracked_tasks, keys)


def get_weekly_streak(db: Session, today: Optional[int] = None, include_current_week: bool = False) -> int:
    """Return the number of consecutive perfect weeks across all tasks, archived ones included."""
    today = _resolve_day(today)
    try:
        tracked_tasks = TaskRepository(db).list_tracked(active_only=False)
        keys = CompletionRepository(db).completed_keys(end_day=today)
    except SQLAlchemyError as e:
        raise StorageError("Failed to load weekly streak") from e
    return weekly_streak(tracked_tasks, keys, today, include_current_week=include_current_week)
