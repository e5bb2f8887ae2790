from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import Dict, Iterable, List

from backend import repositories
from backend.task_rules import normalize_difficulty

logger = logging.getLogger(__name__)


def aggregate_completed_logs(logs: Iterable[dict]) -> dict:
    count_by_date: Dict[str, int] = {}
    difficulty_sum_by_date: Dict[str, int] = {}
    tasks_by_date: Dict[str, List[dict]] = {}
    for log in logs:
        if not log.get("completed"):
            continue
        day_key = str(log.get("log_date"))[:10]
        count_by_date[day_key] = count_by_date.get(day_key, 0) + 1
        difficulty_sum_by_date[day_key] = (
            difficulty_sum_by_date.get(day_key, 0) + normalize_difficulty(log.get("difficulty"))
        )
        tasks_by_date.setdefault(day_key, []).append(
            {
                "title": log.get("title") or "Completed task",
                "category": log.get("category") or "General",
                "completed_at": log.get("completed_at"),
                "notes": log.get("notes"),
                "details": log.get("details"),
                "task_type": log.get("task_type"),
            }
        )
    return {
        "completed_count_by_date": count_by_date,
        "difficulty_sum_by_date": difficulty_sum_by_date,
        "completed_tasks_by_date": tasks_by_date,
    }


def group_due_templates(templates: Iterable[dict]) -> Dict[str, List[dict]]:
    grouped: Dict[str, List[dict]] = {}
    for template in templates:
        due_date = template.get("due_date")
        if not due_date:
            continue
        grouped.setdefault(str(due_date)[:10], []).append(
            {"title": template.get("title"), "category": template.get("category")}
        )
    return grouped


def validate_range(start: date | None, end: date | None) -> None:
    if not start or not end:
        raise ValueError("Both start and end dates are required")
    if start > end:
        raise ValueError("start must be before or equal to end")


async def load_daily_range(user_id: str, start: date, end: date) -> dict:
    validate_range(start, end)
    start_iso, end_iso = start.isoformat(), end.isoformat()
    logs, due_templates, earliest = await asyncio.gather(
        repositories.list_logs_range(user_id, start_iso, end_iso, completed_only=True),
        repositories.list_due_templates(user_id, start_iso, end_iso),
        repositories.get_earliest_log_date(user_id),
    )
    payload = aggregate_completed_logs(logs)
    payload["scheduled_tasks_by_date"] = group_due_templates(due_templates)
    has_more_past = bool(earliest and str(earliest)[:10] < start_iso)
    logger.debug("History %s..%s for %s: %d days", start_iso, end_iso, user_id, len(payload["completed_count_by_date"]))
    return {"start": start_iso, "end": end_iso, "data": payload, "has_more_past": has_more_past}
