from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from backend.auth import require_user_id, user_today
from backend import repositories
from backend.schemas import MomentumThresholdPayload, TimezonePayload
from backend.services.export_service import build_export_csv, export_filename

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/v1/settings/momentum-threshold")
async def get_momentum_threshold(user_id: str = Depends(require_user_id)):
    user_settings = await repositories.get_user_settings(user_id)
    return {"momentum_threshold": user_settings["momentum_threshold"]}


@router.put("/v1/settings/momentum-threshold")
async def set_momentum_threshold(payload: MomentumThresholdPayload, user_id: str = Depends(require_user_id)):
    threshold = await repositories.set_momentum_threshold(user_id, payload.momentum_threshold)
    return {"momentum_threshold": threshold}


@router.get("/v1/settings/timezone")
async def get_timezone(user_id: str = Depends(require_user_id)):
    user_settings = await repositories.get_user_settings(user_id)
    return {"timezone": user_settings.get("timezone")}


@router.put("/v1/settings/timezone")
async def set_timezone(payload: TimezonePayload, user_id: str = Depends(require_user_id)):
    name = payload.timezone.strip()
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise HTTPException(status_code=400, detail=f"Unknown timezone: {name}")
    await repositories.set_timezone(user_id, name)
    return {"timezone": name}


@router.get("/v1/settings/export")
async def export_data(user_id: str = Depends(require_user_id), today=Depends(user_today)):
    templates, logs = await asyncio.gather(
        repositories.list_templates(user_id, include_archived=True),
        repositories.list_all_logs(user_id),
    )
    filename = export_filename(today)
    return Response(
        content=build_export_csv(templates, logs),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.delete("/v1/settings/logs")
async def reset_logs(user_id: str = Depends(require_user_id)):
    deleted = await repositories.delete_all_logs(user_id)
    logger.warning("Deleted %d task logs for %s at %s", deleted, user_id, datetime.now(timezone.utc).isoformat())
    return {"ok": True, "deleted": deleted}
