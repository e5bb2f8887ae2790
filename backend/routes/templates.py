from __future__ import annotations

import logging
from datetime import date, timedelta

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.encoders import jsonable_encoder

from backend.auth import require_user_id, user_today
from backend.schemas import (
    TemplateActivePayload,
    TemplateCreate,
    TemplateListResponse,
    TemplatePatch,
    TemplateResponse,
    UpcomingTasksResponse,
)
from backend import repositories
from backend.task_rules import (
    REACTIVATION_BLOCKED_MESSAGE,
    can_convert_to_one_off,
    can_reactivate,
    conversion_error,
)

logger = logging.getLogger(__name__)

router = APIRouter()

UPCOMING_FIELDS = ("id", "title", "category", "due_date", "due_time")


@router.get("/v1/templates", response_model=TemplateListResponse)
async def list_templates(
    include_archived: bool = Query(True),
    user_id: str = Depends(require_user_id),
):
    items = await repositories.list_templates(user_id, include_archived=include_archived)
    return {"items": jsonable_encoder(items)}


@router.get("/v1/templates/upcoming", response_model=UpcomingTasksResponse)
async def upcoming_templates(
    days: int = Query(7, ge=1, le=31),
    user_id: str = Depends(require_user_id),
    today: date = Depends(user_today),
):
    """Tasks with a due date from today through the next ``days - 1`` days, soonest first."""
    end = today + timedelta(days=days - 1)
    rows = await repositories.list_due_templates(user_id, today.isoformat(), end.isoformat())
    items = [{field: row.get(field) for field in UPCOMING_FIELDS} for row in rows]
    return {"start": today.isoformat(), "end": end.isoformat(), "items": items}


@router.post("/v1/templates", status_code=201, response_model=TemplateResponse)
async def create_template(payload: TemplateCreate, user_id: str = Depends(require_user_id)):
    try:
        record = await repositories.create_template(user_id, payload.model_dump(exclude_unset=True))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    logger.info("Created %s template %s for %s", record["task_type"], record["id"], user_id)
    return jsonable_encoder(record)


@router.patch("/v1/templates/{template_id}", response_model=TemplateResponse)
async def patch_template(template_id: str, payload: TemplatePatch, user_id: str = Depends(require_user_id)):
    patch = payload.model_dump(exclude_unset=True)
    try:
        current = await repositories.get_template(user_id, template_id)
        if patch.get("task_type") == "one_off" and current["task_type"] == "recurring":
            completions = await repositories.count_completions(user_id, template_id)
            if not can_convert_to_one_off(current["task_type"], completions):
                raise HTTPException(status_code=400, detail=conversion_error(completions))
        record = await repositories.update_template(user_id, template_id, patch)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return jsonable_encoder(record)


@router.put("/v1/templates/{template_id}/active", response_model=TemplateResponse)
async def set_template_active(
    template_id: str,
    payload: TemplateActivePayload,
    user_id: str = Depends(require_user_id),
):
    try:
        current = await repositories.get_template(user_id, template_id)
        if payload.is_active:
            completions = await repositories.count_completions(user_id, template_id)
            if not can_reactivate(current, completions > 0):
                raise HTTPException(status_code=400, detail=REACTIVATION_BLOCKED_MESSAGE)
        record = await repositories.set_template_active(user_id, template_id, payload.is_active)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return jsonable_encoder(record)


@router.delete("/v1/templates/{template_id}")
async def delete_template(template_id: str, user_id: str = Depends(require_user_id)):
    try:
        await repositories.get_template(user_id, template_id)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    await repositories.delete_template(user_id, template_id)
    logger.info("Deleted template %s for %s", template_id, user_id)
    return {"ok": True}
