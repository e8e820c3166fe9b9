"""Database migration runner for production.

Goal:
- Prefer Alembic migrations for deterministic schema management.
- If the database already has the expected tables but Alembic history is out
  of sync (tables created by `create_all()`), detect that safely and `stamp head`.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import List, Tuple

from alembic import command
from alembic.config import Config
from sqlalchemy import inspect

from habitgrid.database.database import DATABASE_URL, _is_sqlite_url, build_engine

logger = logging.getLogger(__name__)


def _alembic_cfg() -> Config:
    cfg = Config(os.getenv("ALEMBIC_INI", "alembic.ini"))
    cfg.set_main_option("sqlalchemy.url", DATABASE_URL)
    return cfg


def _required_schema_checks() -> List[Tuple[str, str]]:
    """Return (table, column) pairs required to safely stamp head."""
    return [
        ("task", "id"),
        ("task", "archived_at"),
        ("task_schedule", "effective_from"),
        ("task_schedule", "effective_to"),
        ("task_schedule", "weekday_mask"),
        ("task_schedule", "monthday"),
        ("task_schedule", "interval_days"),
        ("task_completion", "day"),
        ("task_completion", "done_at"),
    ]


def missing_requirements(conn) -> List[str]:
    inspector = inspect(conn)
    tables = set(inspector.get_table_names())
    missing: List[str] = []
    columns_by_table = {}
    for table, column in _required_schema_checks():
        if table not in tables:
            if f"missing table: {table}" not in missing:
                missing.append(f"missing table: {table}")
            continue
        if table not in columns_by_table:
            columns_by_table[table] = {c["name"] for c in inspector.get_columns(table)}
        if column not in columns_by_table[table]:
            missing.append(f"missing column: {table}.{column}")
    return missing


def main() -> int:
    if _is_sqlite_url(DATABASE_URL):
        command.upgrade(_alembic_cfg(), "head")
        return 0

    engine = build_engine(DATABASE_URL)

    try:
        command.upgrade(_alembic_cfg(), "head")
        return 0
    except Exception as e:
        msg = str(e).lower()
        looks_like_already_applied = any(s in msg for s in ["duplicate", "already exists", "exists"])
        if not looks_like_already_applied:
            raise

        # Only stamp head if we can verify the expected schema is present.
        with engine.begin() as conn:
            missing = missing_requirements(conn)
        if missing:
            raise RuntimeError(
                "Alembic upgrade failed and schema is not at expected baseline; refusing to stamp head. "
                + "; ".join(missing)
            ) from e

        logger.warning("Schema already present; stamping alembic head")
        command.stamp(_alembic_cfg(), "head")
        return 0


if __name__ == "__main__":
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))
    sys.exit(main())
