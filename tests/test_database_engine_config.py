"""Tests for engine configuration, the SQLite connect listener and the migration runner."""

import pytest
from sqlalchemy import create_engine, text

from habitgrid.database import database as db


class TestEngineKwargs:
    def test_sqlite_shares_connections_across_threads(self):
        kwargs = db.get_engine_kwargs("sqlite:///./habitgrid.db")

        assert kwargs["connect_args"] == {"check_same_thread": False}
        assert kwargs["pool_pre_ping"] is True
        # SQLite should not require pool sizing knobs.
        assert "pool_size" not in kwargs
        assert "max_overflow" not in kwargs

    def test_server_database_pooling_from_env(self, monkeypatch):
        monkeypatch.setenv("DB_POOL_SIZE", "3")
        monkeypatch.setenv("DB_MAX_OVERFLOW", "7")
        monkeypatch.setenv("DB_POOL_TIMEOUT_SEC", "12")

        kwargs = db.get_engine_kwargs("postgresql+psycopg://u:p@localhost:5432/db")

        assert "connect_args" not in kwargs
        assert (kwargs["pool_size"], kwargs["max_overflow"], kwargs["pool_timeout"]) == (3, 7, 12)


def _pragmas(url):
    engine = create_engine(url)
    try:
        with engine.connect() as conn:
            journal = conn.execute(text("PRAGMA journal_mode")).scalar().lower()
            foreign_keys = conn.execute(text("PRAGMA foreign_keys")).scalar()
    finally:
        engine.dispose()
    return journal, foreign_keys


class TestSqlitePragmas:
    """The connect listener turns on WAL and foreign keys for SQLite deployments only."""

    def test_sqlite_deployment_gets_wal_and_foreign_keys(self, tmp_path, monkeypatch):
        monkeypatch.setattr(db, "DATABASE_URL", "sqlite:///./habitgrid.db")

        assert _pragmas(f"sqlite:///{tmp_path / 'wal.db'}") == ("wal", 1)

    def test_listener_is_guarded_by_database_url(self, tmp_path, monkeypatch):
        monkeypatch.setattr(db, "DATABASE_URL", "postgresql+psycopg://u:p@localhost/db")

        journal, foreign_keys = _pragmas(f"sqlite:///{tmp_path / 'plain.db'}")

        assert journal != "wal"
        assert foreign_keys == 0

    @pytest.mark.parametrize(
        "url, expected",
        [("sqlite:///./habitgrid.db", True), ("postgresql+psycopg://u:p@localhost/db", False)],
    )
    def test_is_sqlite_url(self, url, expected):
        assert db._is_sqlite_url(url) is expected


def test_missing_requirements_reports_absent_schema(tmp_path):
    """The migration runner only stamps head when every expected table and column exists."""
    from habitgrid.database import models  # noqa: F401
    from habitgrid.database.migrate_runner import missing_requirements

    empty = create_engine(f"sqlite:///{tmp_path / 'empty.db'}")
    with empty.connect() as conn:
        missing = missing_requirements(conn)
    assert "missing table: task" in missing
    assert "missing table: task_completion" in missing
    empty.dispose()

    full = create_engine(f"sqlite:///{tmp_path / 'full.db'}")
    db.Base.metadata.create_all(bind=full)
    with full.connect() as conn:
        assert missing_requirements(conn) == []
    full.dispose()
