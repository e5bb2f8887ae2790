from __future__ import annotations

import csv
import io
from datetime import date

EXPORT_HEADERS = [
    "record_type",
    "id",
    "title",
    "category",
    "task_type",
    "difficulty",
    "priority",
    "is_active",
    "archived_at",
    "task_template_id",
    "log_date",
    "completed",
    "completed_at",
    "created_at",
    "updated_at",
]


def _cell(value) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def export_filename(today: date) -> str:
    return f"checklist-log-export-{today.isoformat()}.csv"


def build_export_csv(templates: list[dict], logs: list[dict]) -> str:
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=EXPORT_HEADERS, lineterminator="\n")
    writer.writeheader()
    for template in templates:
        writer.writerow(
            {
                "record_type": "task_template",
                **{key: _cell(template.get(key)) for key in EXPORT_HEADERS if key in template},
            }
        )
    for log in logs:
        writer.writerow(
            {
                "record_type": "daily_task_log",
                "id": _cell(log.get("id")),
                "task_template_id": _cell(log.get("task_template_id")),
                "log_date": _cell(log.get("log_date")),
                "completed": _cell(log.get("completed")),
                "completed_at": _cell(log.get("completed_at")),
                "created_at": _cell(log.get("created_at")),
            }
        )
    return buffer.getvalue()
