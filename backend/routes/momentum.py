from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends, Query

from backend.auth import require_user_id, user_zone
from backend.schemas import SystemHealthResponse
from backend.services.momentum_service import load_system_health
from backend.settings import get_settings

router = APIRouter()


@router.get("/v1/momentum/system-health", response_model=SystemHealthResponse)
async def system_health(
    window: int | None = Query(None, ge=1, le=366),
    user_id: str = Depends(require_user_id),
    zone: ZoneInfo = Depends(user_zone),
):
    today = datetime.now(zone).date()
    return await load_system_health(user_id, today, window or get_settings().momentum_window_days, tz=zone)
