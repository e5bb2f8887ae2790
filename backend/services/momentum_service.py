from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Dict, Iterable, List, Set
from zoneinfo import ZoneInfo

from backend import repositories
from backend.momentum import (
    DEFAULT_WINDOW_SIZE,
    MomentumDay,
    Task,
    calculate_daily_score,
    calculate_effort,
    calculate_system_health,
    get_day_type,
)
from backend.task_rules import normalize_difficulty

logger = logging.getLogger(__name__)


def date_keys(start: date, end: date) -> List[str]:
    if start > end:
        return []
    return [(start + timedelta(days=offset)).isoformat() for offset in range((end - start).days + 1)]


def _local_day(template: dict, field: str, tz: ZoneInfo | None = None) -> date | None:
    raw = template.get(field)
    if not raw:
        return None
    if isinstance(raw, datetime):
        stamp = raw
    else:
        try:
            stamp = datetime.fromisoformat(str(raw).replace("Z", "+00:00"))
        except ValueError:
            logger.warning("Unparseable %s %r on template %s", field, raw, template.get("id"))
            return None
    if tz is not None:
        if stamp.tzinfo is None:
            stamp = stamp.replace(tzinfo=timezone.utc)
        stamp = stamp.astimezone(tz)
    return stamp.date()


def _is_scheduled_on(template: dict, day_key: str) -> bool:
    if template.get("task_type") == "recurring":
        return True
    due_date = template.get("due_date")
    if due_date:
        return str(due_date)[:10] == day_key
    return template.get("task_type") == "one_off"


def scheduled_difficulties_by_date(
    templates: Iterable[dict],
    start: date,
    end: date,
    tz: ZoneInfo | None = None,
    completed_on: Dict[str, Set[str]] | None = None,
) -> Dict[str, List[int]]:
    """Difficulties of the tasks that were on the schedule for each day.

    Recurring tasks are always scheduled, one-off tasks on their due date, and
    undated one-off tasks on every day. Nothing is scheduled before the day a
    template was created or after the day it was archived, and inactive
    templates are skipped. A task is always scheduled on a day it was
    completed (``completed_on`` maps template id to day keys), so finishing
    a one-off early, or archiving it on completion, still counts against
    the effort it produced.
    """
    keys = date_keys(start, end)
    completed_on = completed_on or {}
    scheduled: Dict[str, List[int]] = {}
    for template in templates:
        if not template.get("is_active", True):
            continue
        difficulty = normalize_difficulty(template.get("difficulty"))
        created = _local_day(template, "created_at", tz)
        archived = _local_day(template, "archived_at", tz)
        done_days = completed_on.get(template.get("id"), set())
        for day_key in keys:
            day = date.fromisoformat(day_key)
            if created is not None and day < created:
                continue
            if day_key in done_days:
                scheduled.setdefault(day_key, []).append(difficulty)
                continue
            if archived is not None and day > archived:
                continue
            if template.get("archived_at") and archived is None:
                continue
            if _is_scheduled_on(template, day_key):
                scheduled.setdefault(day_key, []).append(difficulty)
    return scheduled


def completed_template_days(logs: Iterable[dict]) -> Dict[str, Set[str]]:
    days: Dict[str, Set[str]] = {}
    for log in logs:
        if log.get("completed") and log.get("task_template_id"):
            days.setdefault(log["task_template_id"], set()).add(str(log.get("log_date"))[:10])
    return days


def completed_difficulties_by_date(logs: Iterable[dict]) -> Dict[str, List[int]]:
    completed: Dict[str, List[int]] = {}
    for log in logs:
        if not log.get("completed"):
            continue
        day_key = str(log.get("log_date"))[:10]
        completed.setdefault(day_key, []).append(normalize_difficulty(log.get("difficulty")))
    return completed


def build_momentum_days(
    scheduled: Dict[str, List[int]],
    completed: Dict[str, List[int]],
    end: date,
    window: int = DEFAULT_WINDOW_SIZE,
) -> List[MomentumDay]:
    days = []
    for offset in range(window):
        day_key = (end - timedelta(days=offset)).isoformat()
        days.append(
            MomentumDay(
                date=day_key,
                scheduled_tasks=[Task(difficulty=value) for value in scheduled.get(day_key, [])],
                completed_tasks=[Task(difficulty=value) for value in completed.get(day_key, [])],
            )
        )
    return days


def describe_day(day: MomentumDay) -> dict:
    scheduled_effort = calculate_effort(day.scheduled_tasks)
    completed_effort = calculate_effort(day.completed_tasks)
    return {
        "date": day.date,
        "scheduled_effort": scheduled_effort,
        "completed_effort": completed_effort,
        "day_type": get_day_type(completed_effort, scheduled_effort),
        "daily_score": round(calculate_daily_score(completed_effort, scheduled_effort), 4),
    }


async def load_system_health(
    user_id: str,
    today: date,
    window: int = DEFAULT_WINDOW_SIZE,
    tz: ZoneInfo | None = None,
) -> dict:
    start = today - timedelta(days=window - 1)
    # archived_at is stored in UTC; one extra day covers the shift into the user zone.
    since = (start - timedelta(days=1)).isoformat()
    templates = await repositories.list_scheduling_templates(user_id, since)
    logs = await repositories.list_logs_range(user_id, start.isoformat(), today.isoformat(), completed_only=True)

    scheduled = scheduled_difficulties_by_date(
        templates, start, today, tz=tz, completed_on=completed_template_days(logs)
    )
    completed = completed_difficulties_by_date(logs)
    days = build_momentum_days(scheduled, completed, today, window)
    result = calculate_system_health(days, window)
    logger.debug("System health for %s on %s: %s", user_id, today, result.percent)
    return {
        **result.as_dict(),
        "window": window,
        "today": today.isoformat(),
        "days": [describe_day(day) for day in days],
    }
