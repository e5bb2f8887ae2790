from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import text as sql_text

from backend.db import get_sessionmaker
from backend.task_rules import (
    DEFAULT_MOMENTUM_THRESHOLD,
    clamp_momentum_threshold,
    normalize_difficulty,
    normalize_priority,
    normalize_task_type,
)

TEMPLATES_TABLE = "task_templates"
LOGS_TABLE = "daily_task_logs"
USER_SETTINGS_TABLE = "user_settings"

TEMPLATE_COLUMNS = [
    "id",
    "user_id",
    "title",
    "category",
    "task_type",
    "difficulty",
    "priority",
    "notes",
    "url",
    "details",
    "due_date",
    "due_time",
    "list_name",
    "recurrence_interval_days",
    "is_active",
    "archived_at",
    "created_at",
    "updated_at",
]
EDITABLE_TEMPLATE_COLUMNS = {
    "title",
    "category",
    "task_type",
    "difficulty",
    "priority",
    "notes",
    "url",
    "details",
    "due_date",
    "due_time",
    "list_name",
    "recurrence_interval_days",
    "is_active",
    "archived_at",
}
# Dropped from a patch when null; the columns are NOT NULL.
NON_NULLABLE_TEMPLATE_COLUMNS = {"task_type", "category", "priority", "difficulty", "is_active"}
LOG_COLUMNS = ["id", "user_id", "task_template_id", "log_date", "completed", "completed_at", "created_at"]


def _new_id() -> str:
    return uuid4().hex


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _iso_or_none(value):
    if value is None:
        return None
    if hasattr(value, "isoformat"):
        return value.isoformat()
    value_str = str(value).strip()
    return value_str or None


def _normalize_time_value(value):
    if value is None:
        return None
    if hasattr(value, "strftime"):
        return value.strftime("%H:%M:%S")
    value_str = str(value).strip()
    return value_str or None


def _normalize_template_row(row) -> dict:
    if not row:
        return {}
    payload = dict(row)
    payload["is_active"] = bool(payload.get("is_active"))
    payload["difficulty"] = normalize_difficulty(payload.get("difficulty"))
    payload["priority"] = normalize_priority(payload.get("priority"))
    for key in ("due_date", "archived_at", "created_at", "updated_at"):
        payload[key] = _iso_or_none(payload.get(key))
    payload["due_time"] = _normalize_time_value(payload.get("due_time"))
    return payload


def _normalize_log_row(row) -> dict:
    payload = dict(row)
    payload["completed"] = bool(payload.get("completed"))
    return payload


def _clean_template_patch(patch: dict) -> dict:
    clean = {}
    for key, value in (patch or {}).items():
        if key not in EDITABLE_TEMPLATE_COLUMNS:
            continue
        if value is None and key in NON_NULLABLE_TEMPLATE_COLUMNS:
            continue
        if key == "task_type":
            value = normalize_task_type(value)
        elif key == "priority":
            value = normalize_priority(value)
        elif key == "difficulty":
            value = normalize_difficulty(value)
        elif key == "due_time":
            value = _normalize_time_value(value)
        elif key in {"due_date", "archived_at"}:
            value = _iso_or_none(value)
        elif key == "title":
            value = str(value or "").strip()
            if not value:
                raise ValueError("Title required")
        clean[key] = value
    return clean


async def list_templates(user_id: str, include_archived: bool = True) -> list[dict]:
    where = "user_id = :user_id"
    if not include_archived:
        where += " AND archived_at IS NULL"
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        rows = (await session.execute(
            sql_text(
                f"SELECT {', '.join(TEMPLATE_COLUMNS)} FROM {TEMPLATES_TABLE} "
                f"WHERE {where} ORDER BY created_at ASC"
            ),
            {"user_id": user_id},
        )).mappings().all()
    return [_normalize_template_row(row) for row in rows]


async def list_scheduling_templates(user_id: str, since_iso: str) -> list[dict]:
    """Active templates, including ones archived on or after ``since_iso``."""
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        rows = (await session.execute(
            sql_text(
                f"SELECT {', '.join(TEMPLATE_COLUMNS)} FROM {TEMPLATES_TABLE} "
                "WHERE user_id = :user_id AND is_active = TRUE "
                "AND (archived_at IS NULL OR archived_at >= :since) "
                "ORDER BY created_at ASC"
            ),
            {"user_id": user_id, "since": since_iso},
        )).mappings().all()
    return [_normalize_template_row(row) for row in rows]


async def list_due_templates(user_id: str, start_iso: str, end_iso: str) -> list[dict]:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        rows = (await session.execute(
            sql_text(
                f"""
                SELECT {', '.join(TEMPLATE_COLUMNS)}
                FROM {TEMPLATES_TABLE}
                WHERE user_id = :user_id
                  AND due_date IS NOT NULL
                  AND due_date BETWEEN :start_date AND :end_date
                ORDER BY due_date
                """
            ),
            {"user_id": user_id, "start_date": start_iso, "end_date": end_iso},
        )).mappings().all()
    return [_normalize_template_row(row) for row in rows]


async def get_template(user_id: str, template_id: str) -> dict:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        row = (await session.execute(
            sql_text(
                f"SELECT {', '.join(TEMPLATE_COLUMNS)} FROM {TEMPLATES_TABLE} "
                "WHERE id = :id AND user_id = :user_id"
            ),
            {"id": template_id, "user_id": user_id},
        )).mappings().fetchone()
    if not row:
        raise LookupError(f"Task template {template_id} not found")
    return _normalize_template_row(row)


async def create_template(user_id: str, payload: dict) -> dict:
    clean = _clean_template_patch(payload)
    if not clean.get("title"):
        raise ValueError("Title required")
    now = _now_iso()
    record = {
        "id": _new_id(),
        "user_id": user_id,
        "title": clean["title"],
        "category": (clean.get("category") or "General").strip() or "General",
        "task_type": clean.get("task_type") or "recurring",
        "difficulty": clean.get("difficulty", 3),
        "priority": clean.get("priority") or "none",
        "notes": clean.get("notes"),
        "url": clean.get("url"),
        "details": clean.get("details"),
        "due_date": clean.get("due_date"),
        "due_time": clean.get("due_time"),
        "list_name": clean.get("list_name"),
        "recurrence_interval_days": clean.get("recurrence_interval_days"),
        "is_active": True,
        "archived_at": None,
        "created_at": now,
        "updated_at": now,
    }
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(
                f"INSERT INTO {TEMPLATES_TABLE} ({', '.join(TEMPLATE_COLUMNS)}) "
                f"VALUES ({', '.join(':' + col for col in TEMPLATE_COLUMNS)})"
            ),
            record,
        )
        await session.commit()
    return record


async def update_template(user_id: str, template_id: str, patch: dict) -> dict:
    clean = _clean_template_patch(patch)
    if not clean:
        return await get_template(user_id, template_id)
    clean["updated_at"] = _now_iso()
    assignments = ", ".join(f"{key} = :{key}" for key in clean)
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        result = await session.execute(
            sql_text(
                f"UPDATE {TEMPLATES_TABLE} SET {assignments} "
                "WHERE id = :template_id AND user_id = :user_id"
            ),
            {**clean, "template_id": template_id, "user_id": user_id},
        )
        await session.commit()
    if result.rowcount == 0:
        raise LookupError(f"Task template {template_id} not found")
    return await get_template(user_id, template_id)


async def set_template_active(user_id: str, template_id: str, is_active: bool) -> dict:
    patch = {"is_active": bool(is_active)}
    if is_active:
        patch["archived_at"] = None
    return await update_template(user_id, template_id, patch)


async def archive_template(user_id: str, template_id: str) -> dict:
    return await update_template(user_id, template_id, {"archived_at": _now_iso()})


async def delete_template(user_id: str, template_id: str) -> None:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(f"DELETE FROM {LOGS_TABLE} WHERE user_id = :user_id AND task_template_id = :id"),
            {"user_id": user_id, "id": template_id},
        )
        await session.execute(
            sql_text(f"DELETE FROM {TEMPLATES_TABLE} WHERE user_id = :user_id AND id = :id"),
            {"user_id": user_id, "id": template_id},
        )
        await session.commit()


async def upsert_task_log(user_id: str, template_id: str, log_date: str, completed: bool) -> dict:
    now = _now_iso()
    record = {
        "id": _new_id(),
        "user_id": user_id,
        "task_template_id": template_id,
        "log_date": log_date,
        "completed": bool(completed),
        "completed_at": now if completed else None,
        "created_at": now,
    }
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        row = (await session.execute(
            sql_text(
                f"""
                INSERT INTO {LOGS_TABLE} ({', '.join(LOG_COLUMNS)})
                VALUES ({', '.join(':' + col for col in LOG_COLUMNS)})
                ON CONFLICT (user_id, task_template_id, log_date)
                DO UPDATE SET completed = EXCLUDED.completed, completed_at = EXCLUDED.completed_at
                RETURNING {', '.join(LOG_COLUMNS)}
                """
            ),
            record,
        )).mappings().fetchone()
        await session.commit()
    return _normalize_log_row(row) if row else record


async def list_logs_range(
    user_id: str,
    start_iso: str,
    end_iso: str,
    completed_only: bool = False,
) -> list[dict]:
    """Logs in ``[start_iso, end_iso]`` joined with their template, newest first."""
    completed_clause = "AND l.completed = TRUE" if completed_only else ""
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        rows = (await session.execute(
            sql_text(
                f"""
                SELECT
                    l.id, l.task_template_id, l.log_date, l.completed, l.completed_at,
                    t.title AS title, t.category AS category, t.notes AS notes,
                    t.details AS details, t.task_type AS task_type,
                    t.difficulty AS difficulty
                FROM {LOGS_TABLE} l
                LEFT JOIN {TEMPLATES_TABLE} t ON t.id = l.task_template_id
                WHERE l.user_id = :user_id
                  AND l.log_date BETWEEN :start_date AND :end_date
                  {completed_clause}
                ORDER BY l.log_date DESC
                """
            ),
            {"user_id": user_id, "start_date": start_iso, "end_date": end_iso},
        )).mappings().all()
    return [_normalize_log_row(row) for row in rows]


async def get_earliest_log_date(user_id: str) -> str | None:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        row = (await session.execute(
            sql_text(f"SELECT MIN(log_date) FROM {LOGS_TABLE} WHERE user_id = :user_id"),
            {"user_id": user_id},
        )).fetchone()
    return row[0] if row and row[0] else None


async def count_completions(user_id: str, template_id: str) -> int:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        row = (await session.execute(
            sql_text(
                f"SELECT COUNT(*) FROM {LOGS_TABLE} "
                "WHERE user_id = :user_id AND task_template_id = :id AND completed = TRUE"
            ),
            {"user_id": user_id, "id": template_id},
        )).fetchone()
    return int(row[0] or 0) if row else 0


async def get_user_settings(user_id: str) -> dict:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        row = (await session.execute(
            sql_text(
                f"SELECT momentum_threshold, timezone FROM {USER_SETTINGS_TABLE} WHERE user_id = :user_id"
            ),
            {"user_id": user_id},
        )).mappings().fetchone()
    if not row:
        return {"momentum_threshold": DEFAULT_MOMENTUM_THRESHOLD, "timezone": None}
    return {
        "momentum_threshold": clamp_momentum_threshold(row.get("momentum_threshold")),
        "timezone": row.get("timezone"),
    }


async def _upsert_user_setting(user_id: str, column: str, value) -> None:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(
                f"""
                INSERT INTO {USER_SETTINGS_TABLE} (user_id, {column}, updated_at)
                VALUES (:user_id, :value, :updated_at)
                ON CONFLICT (user_id) DO UPDATE SET {column} = EXCLUDED.{column}, updated_at = EXCLUDED.updated_at
                """
            ),
            {"user_id": user_id, "value": value, "updated_at": _now_iso()},
        )
        await session.commit()


async def set_momentum_threshold(user_id: str, value) -> int:
    threshold = clamp_momentum_threshold(value)
    await _upsert_user_setting(user_id, "momentum_threshold", threshold)
    return threshold


async def set_timezone(user_id: str, timezone_name: str) -> str:
    await _upsert_user_setting(user_id, "timezone", timezone_name)
    return timezone_name


async def delete_all_logs(user_id: str) -> int:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        result = await session.execute(
            sql_text(f"DELETE FROM {LOGS_TABLE} WHERE user_id = :user_id"),
            {"user_id": user_id},
        )
        await session.commit()
    return int(result.rowcount or 0)


async def list_all_logs(user_id: str) -> list[dict]:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        rows = (await session.execute(
            sql_text(
                f"SELECT {', '.join(LOG_COLUMNS)} FROM {LOGS_TABLE} "
                "WHERE user_id = :user_id ORDER BY log_date"
            ),
            {"user_id": user_id},
        )).mappings().all()
    return [_normalize_log_row(row) for row in rows]
