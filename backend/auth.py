from __future__ import annotations

import logging
import secrets
from datetime import date, datetime
from zoneinfo import ZoneInfo

from fastapi import Depends, Header, HTTPException

from backend import repositories
from backend.settings import get_settings

logger = logging.getLogger(__name__)


async def require_user_id(
    x_user_email: str | None = Header(default=None, alias="X-User-Email"),
    x_backend_token: str | None = Header(default=None, alias="X-Backend-Token"),
) -> str:
    """Trust the dashboard's shared secret and use the caller's email as user id."""
    settings = get_settings()
    if not x_backend_token or not secrets.compare_digest(x_backend_token, settings.backend_session_secret):
        raise HTTPException(status_code=401, detail="Invalid backend token")
    if not x_user_email or not x_user_email.strip():
        raise HTTPException(status_code=401, detail="Missing user email")
    user_id = x_user_email.strip().lower()
    if settings.allowed_emails and user_id not in settings.allowed_emails:
        logger.warning("Rejected request for non-allowed user %s", user_id)
        raise HTTPException(status_code=403, detail="User not allowed")
    return user_id


async def user_zone(user_id: str = Depends(require_user_id)) -> ZoneInfo:
    user_settings = await repositories.get_user_settings(user_id)
    return get_settings().zone(user_settings.get("timezone"))


async def user_today(zone: ZoneInfo = Depends(user_zone)) -> date:
    """The current calendar day in the user's configured timezone."""
    return datetime.now(zone).date()
