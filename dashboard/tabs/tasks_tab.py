import streamlit as st

from dashboard.constants import (
    DIFFICULTY_LABELS,
    PRIORITY_META,
    TASK_CATEGORIES,
    TASK_PRIORITY_LEVELS,
    TASK_TYPE_LABELS,
    TASK_TYPES,
)
from dashboard.data import repositories
from dashboard.data.api_client import ApiError
from dashboard.data.loaders import load_templates_cached


def _difficulty_option(value):
    return f"{value} · {DIFFICULTY_LABELS[value]}"


def _create_form():
    with st.form("tasks.create_form", clear_on_submit=True):
        st.markdown("<div class='small-label'>New task</div>", unsafe_allow_html=True)
        title = st.text_input("Title", key="tasks.new.title")
        cols = st.columns(4)
        category = cols[0].selectbox("Category", TASK_CATEGORIES, index=TASK_CATEGORIES.index("General"))
        task_type = cols[1].selectbox("Type", TASK_TYPES, format_func=TASK_TYPE_LABELS.get)
        difficulty = cols[2].selectbox("Difficulty", [1, 2, 3, 4, 5], index=2, format_func=_difficulty_option)
        priority = cols[3].selectbox(
            "Priority",
            TASK_PRIORITY_LEVELS,
            format_func=lambda key: PRIORITY_META[key]["label"],
        )
        due_cols = st.columns(2)
        has_due_date = due_cols[0].checkbox("Has due date", value=False)
        due_date = due_cols[1].date_input("Due date", disabled=not has_due_date)
        notes = st.text_area("Notes", height=80)
        submitted = st.form_submit_button("Add task")

    if not submitted:
        return
    if not title.strip():
        st.warning("Title required.")
        return
    try:
        repositories.create_template(
            {
                "title": title.strip(),
                "category": category,
                "task_type": task_type,
                "difficulty": int(difficulty),
                "priority": priority,
                "due_date": due_date if has_due_date else None,
                "notes": notes.strip(),
            }
        )
    except ApiError as exc:
        st.error(str(exc))
        return
    st.success(f"Added {title.strip()}.")


def _status(template):
    if template.get("archived_at"):
        return "Archived"
    return "Active" if template.get("is_active") else "Paused"


def _edit_template(template):
    prefix = f"tasks.edit.{template['id']}"
    with st.form(f"{prefix}.form"):
        title = st.text_input("Title", value=template.get("title") or "")
        cols = st.columns(4)
        category_options = list(TASK_CATEGORIES)
        if template.get("category") and template["category"] not in category_options:
            category_options.append(template["category"])
        category = cols[0].selectbox(
            "Category",
            category_options,
            index=category_options.index(template.get("category") or "General"),
        )
        task_type = cols[1].selectbox(
            "Type",
            TASK_TYPES,
            index=TASK_TYPES.index(template.get("task_type") or "recurring"),
            format_func=TASK_TYPE_LABELS.get,
        )
        difficulty = cols[2].selectbox(
            "Difficulty",
            [1, 2, 3, 4, 5],
            index=int(template.get("difficulty") or 3) - 1,
            format_func=_difficulty_option,
        )
        priority = cols[3].selectbox(
            "Priority",
            TASK_PRIORITY_LEVELS,
            index=TASK_PRIORITY_LEVELS.index(template.get("priority") or "none"),
            format_func=lambda key: PRIORITY_META[key]["label"],
        )
        notes = st.text_area("Notes", value=template.get("notes") or "", height=80)
        saved = st.form_submit_button("Save")

    if saved:
        try:
            repositories.update_template(
                template["id"],
                {
                    "title": title.strip(),
                    "category": category,
                    "task_type": task_type,
                    "difficulty": int(difficulty),
                    "priority": priority,
                    "notes": notes.strip() or None,
                },
            )
        except ApiError as exc:
            st.error(str(exc))
        else:
            st.success("Saved.")

    action_cols = st.columns(2)
    is_active = bool(template.get("is_active")) and not template.get("archived_at")
    if action_cols[0].button("Pause" if is_active else "Activate", key=f"{prefix}.toggle"):
        try:
            repositories.set_template_active(template["id"], not is_active)
        except ApiError as exc:
            st.error(str(exc))
    if action_cols[1].button("Delete", key=f"{prefix}.delete"):
        try:
            repositories.delete_template(template["id"])
        except ApiError as exc:
            st.error(str(exc))


def render_tasks_tab(ctx):
    st.markdown("<div class='section-title'>Tasks</div>", unsafe_allow_html=True)
    _create_form()

    try:
        templates = load_templates_cached(ctx.user_email)
    except ApiError as exc:
        st.error(f"Could not load tasks: {exc}")
        return

    status_filter = st.segmented_control(
        "Show",
        ["Active", "Paused", "Archived"],
        key="tasks.status_filter",
        default="Active",
    )
    visible = [template for template in templates if _status(template) == (status_filter or "Active")]
    if not visible:
        st.caption("No tasks here yet.")
        return

    for template in visible:
        header = (
            f"{template.get('title')} · {TASK_TYPE_LABELS.get(template.get('task_type'), 'Recurring')}"
            f" · difficulty {template.get('difficulty', 3)}"
        )
        with st.expander(header):
            if template.get("due_date"):
                st.caption(f"Due {template['due_date']}")
            _edit_template(template)
