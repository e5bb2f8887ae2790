from __future__ import annotations

from typing import Iterable

from backend.task_rules import should_appear_in_checklist


def _item(template: dict, log: dict | None) -> dict:
    return {
        "id": template["id"],
        "title": template.get("title") or "",
        "category": template.get("category") or "General",
        "task_type": template.get("task_type") or "recurring",
        "difficulty": template.get("difficulty", 3),
        "priority": template.get("priority") or "none",
        "checked": bool(log and log.get("completed")),
        "completed_at": log.get("completed_at") if log else None,
    }


def build_checklist(day_iso: str, templates: Iterable[dict], day_logs: Iterable[dict]) -> dict:
    """Split templates into the open checklist and the tasks already done on ``day_iso``."""
    logs_by_template = {log["task_template_id"]: log for log in day_logs}
    items = []
    completed = []
    for template in templates:
        log = logs_by_template.get(template["id"])
        has_completed_log = bool(log and log.get("completed"))
        if has_completed_log:
            completed.append(_item(template, log))
        elif should_appear_in_checklist(template, has_completed_log):
            items.append(_item(template, log))
    return {"date": day_iso, "items": items, "completed": completed}


def pending_count(checklist: dict) -> int:
    return len(checklist.get("items", []))
