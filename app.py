import logging
from datetime import date

import streamlit as st

from dashboard.auth import enforce_login, get_current_user_email, get_display_name, get_secret
from dashboard.constants import DEFAULT_MOMENTUM_THRESHOLD
from dashboard.context import DashboardContext
from dashboard.data import api_client, repositories
from dashboard.data.api_client import ApiError
from dashboard.data.loaders import (
    invalidate_runtime_caches,
    load_header_cached,
    load_momentum_threshold_cached,
)
from dashboard.header import render_global_header
from dashboard.logging_config import configure_logging
from dashboard.router import render_router

configure_logging()
logger = logging.getLogger("dashboard.app")

st.set_page_config(page_title="Momentum Checklist", layout="wide")

st.markdown(
    """
<style>
.section-title {
    font-size: 20px;
    font-weight: 600;
    margin: 0 0 8px 0;
}

.small-label {
    color: #6b7280;
    font-size: 13px;
    letter-spacing: 0.2px;
}

.stMetric {
    padding: 10px 12px;
    border-radius: 12px;
    border: 1px solid #e5e7eb;
}

.sticky-header-wrap {
    margin-bottom: 6px;
}
</style>
""",
    unsafe_allow_html=True,
)

enforce_login()

api_client.configure(get_secret, get_current_user_email)
repositories.configure(invalidate_callback=invalidate_runtime_caches)

if not repositories.api_enabled():
    st.error("API_BASE_URL and BACKEND_SESSION_SECRET must be configured.")
    st.stop()

current_user_email = get_current_user_email()
current_user_name = get_display_name(current_user_email)

snapshot = load_header_cached(current_user_email, date.today().isoformat())
try:
    today = date.fromisoformat(snapshot.get("today") or "")
except ValueError:
    today = date.today()

try:
    momentum_threshold = load_momentum_threshold_cached(current_user_email)
except ApiError as exc:
    logger.warning("Momentum threshold unavailable: %s", exc)
    momentum_threshold = DEFAULT_MOMENTUM_THRESHOLD

st.markdown(
    f"<div class='small-label' style='margin-bottom:10px;'>Welcome, <strong>{current_user_name}</strong>.</div>",
    unsafe_allow_html=True,
)

context = DashboardContext(
    user_email=current_user_email,
    display_name=current_user_name,
    today=today,
    momentum_threshold=momentum_threshold,
)

render_global_header(context, snapshot)
render_router(context)
