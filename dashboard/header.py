import streamlit as st


def _health_label(percent):
    if percent is None:
        return "-"
    return f"{int(percent)}%"


@st.fragment
def render_global_header(ctx, snapshot):
    snapshot = snapshot or {}
    today_iso = snapshot.get("today") or ctx.today.isoformat()
    pending = int(snapshot.get("pending_tasks", 0) or 0)
    completed = int(snapshot.get("completed_today", 0) or 0)

    st.markdown("<div class='sticky-header-wrap'>", unsafe_allow_html=True)
    st.markdown(
        f"<div class='small-label'>Hi {ctx.display_name} • {today_iso}</div>",
        unsafe_allow_html=True,
    )
    cols = st.columns(3)
    cols[0].metric("Pending today", pending)
    cols[1].metric("Completed today", completed)
    cols[2].metric("System health", _health_label(snapshot.get("system_health")))
    if snapshot.get("system_health") is None:
        st.caption("Backend warming up… data may take a moment to appear.")
    st.markdown("</div>", unsafe_allow_html=True)
