from __future__ import annotations

import logging

from sqlalchemy import text as sql_text
from sqlalchemy.exc import SQLAlchemyError

from backend.db import get_engine

logger = logging.getLogger(__name__)

TEMPLATES_TABLE = "task_templates"
LOGS_TABLE = "daily_task_logs"
USER_SETTINGS_TABLE = "user_settings"


async def init_db():
    engine = get_engine()
    async with engine.begin() as conn:
        await conn.execute(
            sql_text(
                f"""
                CREATE TABLE IF NOT EXISTS {TEMPLATES_TABLE} (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    title TEXT NOT NULL,
                    category TEXT NOT NULL DEFAULT 'General',
                    task_type TEXT NOT NULL DEFAULT 'recurring',
                    difficulty INTEGER DEFAULT 3,
                    priority TEXT DEFAULT 'none',
                    notes TEXT,
                    url TEXT,
                    details TEXT,
                    due_date TEXT,
                    due_time TEXT,
                    list_name TEXT,
                    recurrence_interval_days INTEGER,
                    is_active BOOLEAN NOT NULL DEFAULT TRUE,
                    archived_at TEXT,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
                """
            )
        )
        await conn.execute(
            sql_text(
                f"""
                CREATE TABLE IF NOT EXISTS {LOGS_TABLE} (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    task_template_id TEXT NOT NULL REFERENCES {TEMPLATES_TABLE}(id) ON DELETE CASCADE,
                    log_date TEXT NOT NULL,
                    completed BOOLEAN NOT NULL DEFAULT FALSE,
                    completed_at TEXT,
                    created_at TEXT NOT NULL,
                    UNIQUE (user_id, task_template_id, log_date)
                )
                """
            )
        )
        await conn.execute(
            sql_text(
                f"""
                CREATE TABLE IF NOT EXISTS {USER_SETTINGS_TABLE} (
                    user_id TEXT PRIMARY KEY,
                    momentum_threshold INTEGER DEFAULT 5,
                    timezone TEXT,
                    updated_at TEXT
                )
                """
            )
        )

    async def ensure_index(index_sql: str) -> None:
        try:
            async with engine.begin() as conn:
                await conn.execute(sql_text(index_sql))
        except SQLAlchemyError as exc:
            logger.warning("Index creation skipped: %s", exc)

    await ensure_index(
        f"CREATE INDEX IF NOT EXISTS idx_{LOGS_TABLE}_user_date "
        f"ON {LOGS_TABLE} (user_id, log_date)"
    )
    await ensure_index(
        f"CREATE INDEX IF NOT EXISTS idx_{TEMPLATES_TABLE}_user_active "
        f"ON {TEMPLATES_TABLE} (user_id, is_active, archived_at)"
    )
    await ensure_index(
        f"CREATE INDEX IF NOT EXISTS idx_{TEMPLATES_TABLE}_user_due "
        f"ON {TEMPLATES_TABLE} (user_id, due_date)"
    )
