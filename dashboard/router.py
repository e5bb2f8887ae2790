import streamlit as st

from dashboard.tabs.history_tab import render_history_tab
from dashboard.tabs.momentum_tab import render_momentum_tab
from dashboard.tabs.settings_tab import render_settings_tab
from dashboard.tabs.tasks_tab import render_tasks_tab
from dashboard.tabs.today_tab import render_today_tab


TAB_OPTIONS = [
    "Today",
    "Tasks",
    "Momentum",
    "History",
    "Settings",
]


def render_router(ctx):
    active = st.session_state.get("ui.active_tab", TAB_OPTIONS[0])
    active = st.segmented_control(
        "Workspace",
        TAB_OPTIONS,
        key="ui.active_tab",
        default=active,
    )

    if active == "Tasks":
        return _render_tasks(ctx)

    if active == "Momentum":
        return _render_momentum(ctx)

    if active == "History":
        return _render_history(ctx)

    if active == "Settings":
        return _render_settings(ctx)

    return _render_today(ctx)


@st.fragment
def _render_today(ctx):
    render_today_tab(ctx)


@st.fragment
def _render_tasks(ctx):
    render_tasks_tab(ctx)


@st.fragment
def _render_momentum(ctx):
    render_momentum_tab(ctx)


@st.fragment
def _render_history(ctx):
    render_history_tab(ctx)


@st.fragment
def _render_settings(ctx):
    render_settings_tab(ctx)
