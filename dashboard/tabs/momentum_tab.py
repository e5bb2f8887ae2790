from datetime import timedelta

import streamlit as st

from dashboard.constants import MOMENTUM_WINDOW_DAYS, TREND_WEEKS
from dashboard.data.api_client import ApiError
from dashboard.data.loaders import daily_counts, load_history, load_system_health_cached
from dashboard.metrics import week_start, weekly_totals
from dashboard.visualizations import day_type_bar, system_health_ring, weekly_trend_bar

WINDOW_OPTIONS = [7, 14, 30]


def _render_weekly_trend(ctx):
    start = week_start(ctx.today) - timedelta(weeks=TREND_WEEKS - 1)
    try:
        frame, _ = load_history(ctx.user_email, start, ctx.today)
    except ApiError as exc:
        st.error(f"Could not load the weekly trend: {exc}")
        return
    series = weekly_totals(daily_counts(frame), ctx.today, weeks=TREND_WEEKS)
    cols = st.columns([3, 1])
    cols[0].plotly_chart(weekly_trend_bar(series, title=f"Past {TREND_WEEKS} weeks"), use_container_width=True)
    cols[1].metric("This week", series[-1]["total"] if series else 0)


def render_momentum_tab(ctx):
    st.markdown("<div class='section-title'>Momentum</div>", unsafe_allow_html=True)
    window = st.segmented_control(
        "Window (days)",
        WINDOW_OPTIONS,
        key="momentum.window",
        default=MOMENTUM_WINDOW_DAYS,
    ) or MOMENTUM_WINDOW_DAYS

    try:
        health = load_system_health_cached(ctx.user_email, int(window))
    except ApiError as exc:
        st.error(f"Could not load system health: {exc}")
        return

    breakdown = health.get("breakdown", {})
    cols = st.columns([1, 1])
    cols[0].plotly_chart(system_health_ring(health.get("percent", 0), breakdown), use_container_width=True)
    with cols[1]:
        st.metric("Active days", breakdown.get("active", 0))
        st.metric("Neutral days", breakdown.get("neutral", 0))
        st.metric("Inactive days", breakdown.get("inactive", 0))
        st.caption(
            "A day is active when at least 60% of the scheduled effort was completed. "
            "Harder tasks carry more effort."
        )

    days = health.get("days", [])
    if days:
        st.plotly_chart(day_type_bar(days, title=f"Last {len(days)} days"), use_container_width=True)
    else:
        st.info("No scheduled tasks yet.")

    _render_weekly_trend(ctx)
