from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query

from backend.auth import require_user_id
from backend.schemas import DailyRangeResponse
from backend.services.history_service import load_daily_range

router = APIRouter()


@router.get("/v1/history/daily", response_model=DailyRangeResponse)
async def daily_range(
    start: date = Query(...),
    end: date = Query(...),
    user_id: str = Depends(require_user_id),
):
    try:
        return await load_daily_range(user_id, start, end)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
