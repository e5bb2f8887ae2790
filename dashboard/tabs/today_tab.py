import logging

import streamlit as st

from dashboard.constants import DIFFICULTY_LABELS, PRIORITY_META, TASK_TYPE_LABELS, UPCOMING_DAYS
from dashboard.data import repositories
from dashboard.data.api_client import ApiError
from dashboard.data.loaders import load_upcoming_cached

logger = logging.getLogger(__name__)


def _get_selected_date(ctx):
    if "today.selected_date" not in st.session_state:
        st.session_state["today.selected_date"] = ctx.today
    return st.session_state["today.selected_date"]


def _save_toggle(selected_day, template_id, widget_key):
    checked = bool(st.session_state.get(widget_key, False))
    try:
        repositories.set_task_checked(selected_day, template_id, checked)
    except ApiError as exc:
        logger.warning("Toggle failed for %s on %s: %s", template_id, selected_day, exc)
        st.session_state["today.toggle_error"] = str(exc)


def _item_caption(item):
    priority = PRIORITY_META.get(item.get("priority") or "none", PRIORITY_META["none"])
    parts = [
        item.get("category") or "Uncategorized",
        TASK_TYPE_LABELS.get(item.get("task_type"), "Recurring"),
        f"Difficulty {item.get('difficulty', 3)} · {DIFFICULTY_LABELS.get(int(item.get('difficulty', 3) or 3), '')}",
    ]
    if item.get("priority") and item["priority"] != "none":
        parts.append(f"<span style='color:{priority['color']}'>{priority['label']} priority</span>")
    if item.get("due_time"):
        parts.append(str(item["due_time"])[:5])
    return " • ".join(parts)


def _render_item(selected_day, item, checked):
    widget_key = f"today.check.{selected_day.isoformat()}.{item['id']}"
    st.session_state[widget_key] = checked
    cols = st.columns([0.08, 0.92])
    with cols[0]:
        st.checkbox(
            "Done",
            key=widget_key,
            label_visibility="collapsed",
            on_change=_save_toggle,
            args=(selected_day, item["id"], widget_key),
        )
    with cols[1]:
        title = item.get("title") or "Untitled"
        st.markdown(f"**{title}**" if not checked else f"~~{title}~~")
        st.markdown(f"<div class='small-label'>{_item_caption(item)}</div>", unsafe_allow_html=True)
        if item.get("notes"):
            st.caption(item["notes"])


def _render_upcoming(ctx):
    st.markdown("<div class='section-title' style='margin-top:18px;'>Coming up</div>", unsafe_allow_html=True)
    try:
        upcoming = load_upcoming_cached(ctx.user_email, UPCOMING_DAYS)
    except ApiError as exc:
        logger.warning("Upcoming tasks unavailable: %s", exc)
        st.caption("Could not load upcoming tasks.")
        return
    items = upcoming.get("items", [])
    if not items:
        st.caption(f"Nothing scheduled in the next {UPCOMING_DAYS} days.")
        return
    for item in items:
        when = item["due_date"]
        if item.get("due_time"):
            when = f"{when} {str(item['due_time'])[:5]}"
        st.markdown(f"- **{item.get('title') or 'Untitled'}** · {item.get('category') or 'General'} · {when}")


def render_today_tab(ctx):
    st.markdown("<div class='section-title'>Today's Checklist</div>", unsafe_allow_html=True)
    selected_day = st.date_input("Date", key="today.selected_date", value=_get_selected_date(ctx))

    error = st.session_state.pop("today.toggle_error", None)
    if error:
        st.error(error)

    try:
        checklist = repositories.get_checklist(selected_day)
    except ApiError as exc:
        st.error(f"Could not load the checklist: {exc}")
        return

    items = checklist.get("items", [])
    completed = checklist.get("completed", [])
    total = len(items) + len(completed)
    if total:
        st.progress(len(completed) / total, text=f"{len(completed)}/{total} done")

    st.markdown("<div class='small-label'>To do</div>", unsafe_allow_html=True)
    if not items:
        st.caption("Nothing left for this day.")
    for item in items:
        _render_item(selected_day, item, checked=False)

    if completed:
        st.markdown("<div class='small-label' style='margin-top:12px;'>Completed</div>", unsafe_allow_html=True)
        for item in completed:
            _render_item(selected_day, item, checked=True)

    _render_upcoming(ctx)
