from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends

from backend.auth import require_user_id, user_zone
from backend import repositories
from backend.services.checklist_service import build_checklist, pending_count
from backend.services.momentum_service import load_system_health
from backend.settings import get_settings

router = APIRouter()


@router.get("/v1/header")
async def header_snapshot(user_id: str = Depends(require_user_id), zone: ZoneInfo = Depends(user_zone)):
    today = datetime.now(zone).date()
    today_iso = today.isoformat()
    templates = await repositories.list_templates(user_id, include_archived=True)
    day_logs = await repositories.list_logs_range(user_id, today_iso, today_iso)
    checklist = build_checklist(today_iso, templates, day_logs)
    health = await load_system_health(user_id, today, get_settings().momentum_window_days, tz=zone)
    return {
        "today": today_iso,
        "pending_tasks": pending_count(checklist),
        "completed_today": len(checklist["completed"]),
        "system_health": health["percent"],
    }
