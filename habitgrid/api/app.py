"""FastAPI web application for habitgrid."""

import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Response, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from habitgrid.database.database import get_db, init_db
from habitgrid.engine.days import month_bounds
from habitgrid.errors import HabitGridError, NotFoundError, StorageError, ValidationError
from habitgrid.models.views import MonthViewDay, TaskWithStats
from habitgrid.services import task_service

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    init_db()
    yield


app = FastAPI(
    title="habitgrid API",
    description="Recurring tasks, completions, streaks and month views",
    version="0.1.0",
    lifespan=lifespan,
)


# Request models
class TaskCreateRequest(BaseModel):
    title: str
    frequency_type: str = Field(..., description="daily, weekly, monthly or custom")
    weekday_mask: Optional[int] = Field(None, description="Weekly: bit i = weekday i (Mon=0)")
    monthday: Optional[int] = Field(None, description="Monthly: day of month 1..28")
    interval_days: Optional[int] = Field(None, description="Custom: every N days")
    notes: Optional[str] = None
    day: Optional[int] = Field(None, description="Day index the schedule starts (default today)")


class TaskEditRequest(BaseModel):
    new_title: str
    new_frequency_type: str
    new_weekday_mask: Optional[int] = None
    new_monthday: Optional[int] = None
    new_interval_days: Optional[int] = None
    new_notes: Optional[str] = None
    day: Optional[int] = Field(None, description="Day index the edit takes effect (default today)")


# Response models
class TaskResponse(BaseModel):
    task: TaskWithStats


class TaskListResponse(BaseModel):
    tasks: List[TaskWithStats]
    count: int


class ToggleResponse(BaseModel):
    task_id: int
    day: int
    done: bool


class MonthViewResponse(BaseModel):
    """Month grid; days outside [first_day, last_day] belong to adjacent months."""

    year: int
    month: int
    first_day: int
    last_day: int
    days: List[MonthViewDay]


class WeeklyStreakResponse(BaseModel):
    weekly_streak: int


def _raise_http(e: HabitGridError) -> None:
    """Translate an engine error into an HTTPException."""
    if isinstance(e, NotFoundError):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    if isinstance(e, ValidationError):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    if isinstance(e, StorageError):
        logger.error(f"Storage failure: {str(e)}")
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e)) from e


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "version": "0.1.0"}


@app.post("/tasks", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
def create_task(request: TaskCreateRequest, db: Session = Depends(get_db)):
    """Create a task with its initial schedule."""
    try:
        task = task_service.add_task(
            db,
            title=request.title,
            frequency_type=request.frequency_type,
            weekday_mask=request.weekday_mask,
            monthday=request.monthday,
            interval_days=request.interval_days,
            notes=request.notes,
            day=request.day,
        )
    except HabitGridError as e:
        _raise_http(e)
    return TaskResponse(task=task)


@app.get("/tasks", response_model=TaskListResponse)
def list_tasks(day: Optional[int] = None, db: Session = Depends(get_db)):
    """List active tasks with streaks as of `day` (default today)."""
    try:
        tasks = task_service.list_tasks(db, day=day)
    except HabitGridError as e:
        _raise_http(e)
    return TaskListResponse(tasks=tasks, count=len(tasks))


@app.get("/tasks/{task_id}", response_model=TaskResponse)
def get_task(task_id: int, day: Optional[int] = None, db: Session = Depends(get_db)):
    try:
        task = task_service.get_task(db, task_id, day=day)
    except HabitGridError as e:
        _raise_http(e)
    return TaskResponse(task=task)


@app.put("/tasks/{task_id}", response_model=TaskResponse)
def edit_task(task_id: int, request: TaskEditRequest, db: Session = Depends(get_db)):
    """Rename a task and/or switch its recurrence rule from `day` on."""
    try:
        task = task_service.edit_task(
            db,
            task_id,
            new_title=request.new_title,
            new_frequency_type=request.new_frequency_type,
            new_weekday_mask=request.new_weekday_mask,
            new_monthday=request.new_monthday,
            new_interval_days=request.new_interval_days,
            new_notes=request.new_notes,
            day=request.day,
        )
    except HabitGridError as e:
        _raise_http(e)
    return TaskResponse(task=task)


@app.post("/tasks/{task_id}/archive", status_code=status.HTTP_204_NO_CONTENT)
def archive_task(task_id: int, day: Optional[int] = None, db: Session = Depends(get_db)):
    try:
        task_service.archive_task(db, task_id, day=day)
    except HabitGridError as e:
        _raise_http(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@app.delete("/tasks/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task(task_id: int, db: Session = Depends(get_db)):
    """Permanently delete a task, its schedule history and completions."""
    try:
        task_service.delete_task(db, task_id)
    except HabitGridError as e:
        _raise_http(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@app.delete("/tasks", status_code=status.HTTP_204_NO_CONTENT)
def delete_all_tasks(db: Session = Depends(get_db)):
    """Permanently delete every task."""
    try:
        task_service.delete_all_tasks(db)
    except HabitGridError as e:
        _raise_http(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@app.post("/tasks/{task_id}/completions/{day}/toggle", response_model=ToggleResponse)
def toggle_completion(task_id: int, day: int, db: Session = Depends(get_db)):
    try:
        done = task_service.toggle_completion(db, task_id, day)
    except HabitGridError as e:
        _raise_http(e)
    return ToggleResponse(task_id=task_id, day=day, done=done)


@app.get("/month-view/{year}/{month}", response_model=MonthViewResponse)
def month_view(year: int, month: int, db: Session = Depends(get_db)):
    """Month grid (six Monday-first weeks) with due/done tasks per day."""
    try:
        first_day, last_day = month_bounds(year, month)
        days = task_service.get_month_view(db, year, month)
    except HabitGridError as e:
        _raise_http(e)
    return MonthViewResponse(year=year, month=month, first_day=first_day, last_day=last_day, days=days)


@app.get("/weekly-streak", response_model=WeeklyStreakResponse)
def weekly_streak(include_current_week: bool = False, db: Session = Depends(get_db)):
    try:
        streak = task_service.get_weekly_streak(db, include_current_week=include_current_week)
    except HabitGridError as e:
        _raise_http(e)
    return WeeklyStreakResponse(weekly_streak=streak)
