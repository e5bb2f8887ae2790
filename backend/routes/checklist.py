from __future__ import annotations

import logging
from datetime import date as dt_date

from fastapi import APIRouter, Depends, HTTPException

from backend.auth import require_user_id
from backend.schemas import ChecklistResponse, ChecklistTogglePayload
from backend import repositories
from backend.services.checklist_service import build_checklist
from backend.task_rules import should_auto_archive

logger = logging.getLogger(__name__)

router = APIRouter()


def _parse_day(day: str) -> str:
    try:
        return dt_date.fromisoformat(day).isoformat()
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid date format")


@router.get("/v1/checklist/{day}", response_model=ChecklistResponse)
async def get_checklist(day: str, user_id: str = Depends(require_user_id)):
    day_iso = _parse_day(day)
    templates = await repositories.list_templates(user_id, include_archived=True)
    day_logs = await repositories.list_logs_range(user_id, day_iso, day_iso)
    return build_checklist(day_iso, templates, day_logs)


@router.put("/v1/checklist/{day}/{template_id}")
async def toggle_task(
    day: str,
    template_id: str,
    payload: ChecklistTogglePayload,
    user_id: str = Depends(require_user_id),
):
    day_iso = _parse_day(day)
    try:
        template = await repositories.get_template(user_id, template_id)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc

    log = await repositories.upsert_task_log(user_id, template_id, day_iso, payload.checked)
    if should_auto_archive(template["task_type"]):
        if payload.checked and not template.get("archived_at"):
            await repositories.archive_template(user_id, template_id)
        elif not payload.checked and template.get("archived_at"):
            # Unchecking on the same day brings the one-off back.
            await repositories.update_template(user_id, template_id, {"archived_at": None})
    logger.info("Task %s %s on %s for %s", template_id, "checked" if payload.checked else "unchecked", day_iso, user_id)
    return {"ok": True, "log": log}
