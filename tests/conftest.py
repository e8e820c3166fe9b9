"""Pytest fixtures and configuration for habitgrid tests."""

import pytest
from datetime import datetime
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from habitgrid.database.database import Base, get_db
from habitgrid.database import models  # noqa: F401
from habitgrid.database.repository import TaskRepository
from habitgrid.database.completion_repository import CompletionRepository
from habitgrid.models.schedule import DailySchedule
from habitgrid.models.task import Task
from habitgrid.models.views import TrackedTask


# Use in-memory SQLite database for tests
TEST_DATABASE_URL = "sqlite:///:memory:"


@pytest.fixture(scope="function")
def db_session():
    """Create a database session for testing.

    Uses an in-memory SQLite database that is created fresh for each test.
    """
    # Create engine with StaticPool for in-memory database
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )

    # Create all tables
    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def task_repository(db_session: Session):
    """Create a TaskRepository instance for testing."""
    return TaskRepository(db_session)


@pytest.fixture
def completion_repository(db_session: Session):
    """Create a CompletionRepository instance for testing."""
    return CompletionRepository(db_session)


@pytest.fixture
def daily_task(task_repository):
    """A persisted task with a daily schedule starting at day 0."""
    return task_repository.create(
        title="Drink water",
        notes=None,
        schedule=DailySchedule(effective_from=0),
    )


@pytest.fixture
def make_tracked():
    """Factory for in-memory TrackedTask snapshots used by the pure engine tests."""

    def _make(*schedules, task_id: int = 1, title: str = "Habit", is_active: bool = True):
        task = Task(
            id=task_id,
            title=title,
            is_active=is_active,
            created_at=datetime(2024, 1, 1),
        )
        return TrackedTask(
            task=task,
            schedules=[s.model_copy(update={"task_id": task_id}) for s in schedules],
        )

    return _make


@pytest.fixture
def test_client(db_session: Session, monkeypatch):
    """Create a FastAPI test client with overridden database dependency."""
    from habitgrid.api import app as app_module

    # Schema comes from the db_session fixture; skip startup initialization
    monkeypatch.setattr(app_module, "init_db", lambda: None)

    def override_get_db():
        try:
            yield db_session
        finally:
            pass  # Don't close the session here, let the fixture handle it

    app_module.app.dependency_overrides[get_db] = override_get_db

    with TestClient(app_module.app) as client:
        yield client

    # Clean up dependency overrides
    app_module.app.dependency_overrides.clear()
