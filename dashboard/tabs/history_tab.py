from datetime import date, timedelta

import pandas as pd
import streamlit as st

from dashboard.constants import MONTH_NAMES
from dashboard.data.api_client import ApiError
from dashboard.data.loaders import daily_counts, load_history, month_bounds
from dashboard.metrics import compute_key_metrics, week_start, week_summary
from dashboard.visualizations import (
    activity_heatmap,
    build_month_heatmap_grid,
    build_week_heatmap_grid,
    build_year_heatmap_grid,
)

VIEW_LABELS = {"week": "Week", "month": "Month", "year": "Year"}


def _render_metrics(metrics):
    cols = st.columns(4)
    cols[0].metric("Current streak", f"{metrics['streak_days']} d")
    cols[1].metric("Consistency", f"{metrics['consistency_pct']}%")
    cols[2].metric("Avg difficulty", metrics["avg_difficulty"])
    cols[3].metric("Tasks / day", metrics["avg_tasks_per_day"])


def _render_day_detail(payload, selected_day):
    data = (payload or {}).get("data", {})
    tasks = data.get("completed_tasks_by_date", {}).get(selected_day.isoformat(), [])
    st.markdown(
        f"<div class='small-label'>Completed on {selected_day.isoformat()}</div>",
        unsafe_allow_html=True,
    )
    if not tasks:
        st.caption("Nothing completed on this day.")
        return
    for task in tasks:
        st.markdown(f"- **{task.get('title')}** · {task.get('category')} · difficulty {task.get('difficulty')}")


def _render_week(ctx, threshold):
    today = ctx.today
    picked = st.date_input("Week of", value=today, max_value=today, key="history.week_of")
    start = week_start(picked)
    end = start + timedelta(days=6)
    try:
        # The week before is loaded too for the comparison.
        frame, payload = load_history(ctx.user_email, start - timedelta(days=7), end)
    except ApiError as exc:
        st.error(f"Could not load history: {exc}")
        return

    counts = daily_counts(frame)
    summary = week_summary(counts, start, today)
    cols = st.columns(2)
    cols[0].metric("Tasks completed", summary["total"])
    cols[1].metric("vs last week", summary["change"])

    z, text, x_labels, y_labels = build_week_heatmap_grid(start, counts, threshold)
    st.plotly_chart(
        activity_heatmap(z, text, x_labels, y_labels, title=f"{start.isoformat()} to {end.isoformat()}", height=140),
        use_container_width=True,
    )
    table = pd.DataFrame(summary["days"])
    table["date"] = table["date"].apply(lambda day: day.isoformat())
    st.dataframe(
        table.rename(
            columns={"date": "Date", "weekday": "Day", "count": "Completed", "change": "vs last week", "level": "Level"}
        ),
        hide_index=True,
        use_container_width=True,
    )

    selected_day = st.date_input("Day", value=min(today, end), min_value=start, max_value=end, key="history.week_day")
    _render_day_detail(payload, selected_day)


def _render_month(ctx, threshold):
    today = ctx.today
    top = st.columns([1, 1, 1])
    year = top[0].selectbox(
        "Year",
        list(range(today.year, today.year - 5, -1)),
        key="history.year",
    )
    month = top[1].selectbox(
        "Month",
        list(range(1, 13)),
        index=today.month - 1,
        format_func=lambda value: MONTH_NAMES[value - 1],
        key="history.month",
    )
    range_mode = top[2].segmented_control(
        "Range",
        ["mtd", "full"],
        format_func=lambda value: "Month to date" if value == "mtd" else "Full month",
        key="history.range_mode",
        default="mtd",
    ) or "mtd"

    month_start, month_end = month_bounds(year, month)
    try:
        month_frame, month_payload = load_history(ctx.user_email, month_start, month_end)
    except ApiError as exc:
        st.error(f"Could not load history: {exc}")
        return

    metrics = compute_key_metrics(month_frame, year, month, today, ctx.momentum_threshold, range_mode=range_mode)
    _render_metrics(metrics)

    z, text, x_labels, y_labels = build_month_heatmap_grid(year, month, daily_counts(month_frame), threshold)
    st.plotly_chart(
        activity_heatmap(z, text, x_labels, y_labels, title=f"{MONTH_NAMES[month - 1]} {year}", height=260),
        use_container_width=True,
    )

    default_day = today if (today.year, today.month) == (year, month) else month_end
    selected_day = st.date_input(
        "Day",
        value=default_day,
        min_value=month_start,
        max_value=month_end,
        key=f"history.day.{year}.{month}",
    )
    _render_day_detail(month_payload, selected_day)


def _render_year(ctx, threshold):
    today = ctx.today
    year = st.selectbox(
        "Year",
        list(range(today.year, today.year - 5, -1)),
        key="history.year_view",
    )
    try:
        year_frame, _ = load_history(ctx.user_email, date(year, 1, 1), date(year, 12, 31))
    except ApiError as exc:
        st.error(f"Could not load the year: {exc}")
        return
    z, text, x_labels, y_labels = build_year_heatmap_grid(year, daily_counts(year_frame), threshold)
    st.plotly_chart(
        activity_heatmap(z, text, x_labels, y_labels, title=str(year)),
        use_container_width=True,
    )


def render_history_tab(ctx):
    st.markdown("<div class='section-title'>History</div>", unsafe_allow_html=True)
    view = st.segmented_control(
        "View",
        list(VIEW_LABELS),
        format_func=VIEW_LABELS.get,
        key="history.view",
        default="month",
    ) or "month"
    color_mode = st.segmented_control(
        "Colors",
        ["intensity", "threshold"],
        format_func=lambda value: "By volume" if value == "intensity" else "By momentum threshold",
        key="history.color_mode",
        default="intensity",
    ) or "intensity"
    threshold = ctx.momentum_threshold if color_mode == "threshold" else None

    if view == "week":
        _render_week(ctx, threshold)
    elif view == "year":
        _render_year(ctx, threshold)
    else:
        _render_month(ctx, threshold)
