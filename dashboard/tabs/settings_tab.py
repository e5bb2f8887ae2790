import logging

import streamlit as st

from dashboard.constants import COMMON_TIMEZONES
from dashboard.data import repositories
from dashboard.data.api_client import ApiError

logger = logging.getLogger(__name__)


def _render_threshold(ctx):
    st.markdown("<div class='small-label'>Momentum threshold</div>", unsafe_allow_html=True)
    value = st.number_input(
        "Completed tasks per day that count as momentum",
        min_value=1,
        max_value=20,
        step=1,
        value=int(ctx.momentum_threshold),
        key="settings.momentum_threshold",
    )
    if st.button("Save threshold", key="settings.save_threshold"):
        try:
            saved = repositories.set_momentum_threshold(int(value))
        except ApiError as exc:
            st.error(str(exc))
        else:
            st.success(f"Threshold set to {saved}.")


def _render_timezone():
    st.markdown("<div class='small-label'>Timezone</div>", unsafe_allow_html=True)
    try:
        current = repositories.get_timezone()
    except ApiError as exc:
        st.error(str(exc))
        return
    options = list(COMMON_TIMEZONES)
    if current and current not in options:
        options.insert(0, current)
    choice = st.selectbox(
        "Day boundaries follow this timezone",
        options,
        index=options.index(current) if current in options else 0,
        key="settings.timezone",
    )
    if st.button("Save timezone", key="settings.save_timezone"):
        try:
            saved = repositories.set_timezone(choice)
        except ApiError as exc:
            st.error(str(exc))
        else:
            st.success(f"Timezone set to {saved}.")


def _render_export():
    st.markdown("<div class='small-label'>Export</div>", unsafe_allow_html=True)
    if st.button("Prepare CSV export", key="settings.prepare_export"):
        try:
            st.session_state["settings.export"] = repositories.export_csv()
        except ApiError as exc:
            st.error(str(exc))
    export = st.session_state.get("settings.export")
    if export:
        text, filename = export
        st.download_button("Download CSV", data=text, file_name=filename, mime="text/csv")


def _render_reset():
    st.markdown("<div class='small-label'>Danger zone</div>", unsafe_allow_html=True)
    confirmed = st.checkbox("I understand every completion will be removed", key="settings.reset_confirm")
    if st.button("Reset all logs", key="settings.reset_logs", disabled=not confirmed):
        try:
            deleted = repositories.reset_logs()
        except ApiError as exc:
            st.error(str(exc))
            return
        logger.info("Reset %s logs", deleted)
        st.session_state.pop("settings.export", None)
        st.success(f"Removed {deleted} log entries.")


def render_settings_tab(ctx):
    st.markdown("<div class='section-title'>Settings</div>", unsafe_allow_html=True)
    _render_threshold(ctx)
    st.divider()
    _render_timezone()
    st.divider()
    _render_export()
    st.divider()
    _render_reset()
