from __future__ import annotations

import logging
from datetime import date, timedelta

import pandas as pd
import requests
import streamlit as st

from dashboard.data import repositories

logger = logging.getLogger(__name__)

HISTORY_COLUMNS = ["date", "count", "difficulty_sum"]


def history_to_frame(payload: dict, start_date: date, end_date: date) -> pd.DataFrame:
    """One row per calendar day in range, zero-filled where nothing was completed."""
    data = (payload or {}).get("data", {})
    counts = data.get("completed_count_by_date", {})
    difficulty = data.get("difficulty_sum_by_date", {})
    days = pd.date_range(start_date, end_date, freq="D").date
    if len(days) == 0:
        return pd.DataFrame(columns=HISTORY_COLUMNS)
    frame = pd.DataFrame({"date": days})
    keys = frame["date"].apply(lambda d: d.isoformat())
    frame["count"] = keys.map(lambda key: int(counts.get(key, 0) or 0))
    frame["difficulty_sum"] = keys.map(lambda key: int(difficulty.get(key, 0) or 0))
    return frame


@st.cache_data(ttl=60, show_spinner=False)
def load_history_cached(user_email, start_iso, end_iso):
    return repositories.get_daily_range(start_iso, end_iso)


def load_history(user_email, start_date, end_date):
    payload = load_history_cached(user_email, start_date.isoformat(), end_date.isoformat())
    return history_to_frame(payload, start_date, end_date), payload


def daily_counts(frame: pd.DataFrame) -> dict:
    """ISO date -> completed count for a frame built by ``history_to_frame``."""
    if frame is None or frame.empty:
        return {}
    return {row["date"].isoformat(): int(row["count"]) for _, row in frame.iterrows()}


@st.cache_data(ttl=60, show_spinner=False)
def load_system_health_cached(user_email, window):
    return repositories.get_system_health(window)


@st.cache_data(ttl=120, show_spinner=False)
def load_upcoming_cached(user_email, days):
    return repositories.get_upcoming_tasks(days)


@st.cache_data(ttl=30, show_spinner=False)
def load_header_cached(user_email, day_iso):
    try:
        return repositories.get_header_snapshot()
    except (RuntimeError, requests.RequestException) as exc:
        logger.warning("Header snapshot unavailable: %s", exc)
        return {"today": day_iso, "pending_tasks": 0, "completed_today": 0, "system_health": None}


@st.cache_data(ttl=120, show_spinner=False)
def load_templates_cached(user_email):
    return repositories.list_templates(include_archived=True)


@st.cache_data(ttl=300, show_spinner=False)
def load_momentum_threshold_cached(user_email):
    return repositories.get_momentum_threshold()


def month_bounds(year, month):
    start = date(year, month, 1)
    if month == 12:
        end = date(year, 12, 31)
    else:
        end = date(year, month + 1, 1) - timedelta(days=1)
    return start, end


def invalidate_runtime_caches():
    for loader in (
        load_history_cached,
        load_system_health_cached,
        load_header_cached,
        load_upcoming_cached,
        load_templates_cached,
        load_momentum_threshold_cached,
    ):
        loader.clear()
