from datetime import date
from typing import Dict, List, Optional

import streamlit as st

from app.error_ui import clear_field_errors, field_error, set_field_errors, show_error_ui
from app.frontend import fmt_date, fmt_enum
from backend.auth_session import AuthContext
from backend.compliances import compliance_options
from backend.error_handler import FormValidationError
from backend.logic import local_state
from backend.logic.aggregation import ALL, filter_tasks
from backend.logic.forms import TaskForm
from backend.logic.records import Task, TaskPriority, TaskStatus
from backend.rbac import can_manage
from backend.tasks import (
    add_checklist_item,
    complete_task,
    create_task,
    delete_task,
    list_tasks_for_company,
    start_task,
    toggle_checklist_item,
    update_task,
)

CACHE_KEY = "tasks_rows"
FORM_KEY = "task_form"

PRIORITIES = [p.value for p in TaskPriority]
STATUSES = [s.value for s in TaskStatus]


def edit_form_key(task_id: str) -> str:
    return f"task_edit_{task_id}"


def _load(ctx: AuthContext, company_id: str) -> List[Task]:
    if CACHE_KEY not in st.session_state:
        st.session_state[CACHE_KEY] = list_tasks_for_company(ctx.client, company_id)
    return st.session_state[CACHE_KEY]


def _store_updated(items: List[Task], updated: Task) -> None:
    # keep the joined compliance name the update response does not carry
    previous = next((t for t in items if t.id == updated.id), None)
    if previous is not None and updated.compliance_name is None:
        updated.compliance_name = previous.compliance_name
    st.session_state[CACHE_KEY] = local_state.replace(items, updated)


def task_fields(prefix: str, form_key: str, names: Dict[str, str], current: Optional[Task] = None) -> dict:
    """Widgets for one task; returns the raw values for TaskForm.from_dict."""
    data = {"title": st.text_input("Title", value=current.title if current else "", key=f"{prefix}_title")}
    field_error(form_key, "title")
    data["description"] = st.text_area(
        "Description", value=(current.description or "") if current else "", key=f"{prefix}_description"
    )
    ids = list(names)
    linked = current.compliance_id if current and current.compliance_id in names else ids[0]
    data["compliance_id"] = st.selectbox(
        "Compliance", ids, index=ids.index(linked), format_func=lambda i: names[i], key=f"{prefix}_compliance"
    )
    c1, c2, c3 = st.columns(3)
    data["due_date"] = c1.date_input(
        "Due date", value=current.due_date if current else date.today(), key=f"{prefix}_due"
    )
    data["priority"] = c2.selectbox(
        "Priority", PRIORITIES,
        index=PRIORITIES.index(current.priority.value if current else TaskPriority.MEDIUM.value),
        key=f"{prefix}_priority",
    )
    data["status"] = c3.selectbox(
        "Status", STATUSES,
        index=STATUSES.index(current.status.value if current else TaskStatus.PENDING.value),
        key=f"{prefix}_status",
    )
    for f in ("due_date", "priority", "status"):
        field_error(form_key, f)
    data["notes"] = st.text_area("Notes", value=(current.notes or "") if current else "", key=f"{prefix}_notes")
    return data


def _render_create(ctx: AuthContext, items: List[Task], names: Dict[str, str]) -> None:
    with st.form("task_create_form", clear_on_submit=True):
        data = task_fields("task_new", FORM_KEY, names)
        assign_to_self = st.checkbox("Assign to me")
        submitted = st.form_submit_button("Create task", type="primary")

    if submitted:
        try:
            created = create_task(ctx.client, TaskForm.from_dict(data), ctx.user_id, assign_to_self)
            created.compliance_name = names.get(created.compliance_id)
            st.session_state[CACHE_KEY] = local_state.prepend(items, created)
            clear_field_errors(FORM_KEY)
        except FormValidationError as e:
            set_field_errors(FORM_KEY, e)
            show_error_ui(e, context="task_create")
        except Exception as e:
            show_error_ui(e, context="task_create")
        else:
            st.rerun()


def _render_edit(ctx: AuthContext, items: List[Task], t: Task, names: Dict[str, str]) -> None:
    form_key = edit_form_key(t.id)
    with st.form(form_key):
        data = task_fields(f"task_{t.id}", form_key, names, t)
        save = st.form_submit_button("Save")
    if save:
        try:
            updated = update_task(ctx.client, t.id, TaskForm.from_dict(data), ctx.user_id)
            updated.compliance_name = names.get(updated.compliance_id)
            _store_updated(items, updated)
            clear_field_errors(form_key)
        except FormValidationError as e:
            set_field_errors(form_key, e)
            show_error_ui(e, context="task_update")
        except Exception as e:
            show_error_ui(e, context="task_update")
        else:
            st.rerun()


def _render_task(ctx: AuthContext, items: List[Task], t: Task, manage: bool, names: Dict[str, str]) -> None:
    header = f"{t.title} · {fmt_enum(t.status)} · due {fmt_date(t.due_date)}"
    with st.expander(header):
        if t.compliance_name:
            st.caption(t.compliance_name)
        if t.description:
            st.write(t.description)
        if t.notes:
            st.caption(f"Notes: {t.notes}")
        if t.completed_at:
            st.caption(f"Completed {fmt_date(t.completed_at)}")

        for item in t.checklist:
            checked = st.checkbox(item.text, value=item.completed, key=f"chk_{t.id}_{item.id}", disabled=not manage)
            if manage and checked != item.completed:
                try:
                    _store_updated(items, toggle_checklist_item(ctx.client, t, item.id, ctx.user_id))
                except Exception as e:
                    show_error_ui(e, context="task_checklist")
                else:
                    st.rerun()

        if not manage:
            return

        new_item = st.text_input("New checklist item", key=f"new_item_{t.id}")
        if st.button("Add item", key=f"add_item_{t.id}") and new_item:
            try:
                _store_updated(items, add_checklist_item(ctx.client, t, new_item, ctx.user_id))
            except Exception as e:
                show_error_ui(e, context="task_checklist")
            else:
                st.rerun()

        c1, c2, c3 = st.columns(3)
        action = None
        if t.status == TaskStatus.PENDING and c1.button("Start", key=f"start_{t.id}"):
            action = start_task
        if t.status != TaskStatus.COMPLETED and c2.button("Complete", key=f"complete_{t.id}"):
            action = complete_task
        if action is not None:
            try:
                _store_updated(items, action(ctx.client, t.id, ctx.user_id))
            except Exception as e:
                show_error_ui(e, context="task_status")
            else:
                st.rerun()
        if c3.button("Delete", key=f"delete_task_{t.id}"):
            try:
                delete_task(ctx.client, t.id, ctx.user_id)
                st.session_state[CACHE_KEY] = local_state.remove(items, t.id)
            except Exception as e:
                show_error_ui(e, context="task_delete")
            else:
                st.rerun()

        if names:
            st.markdown("###### Edit task")
            _render_edit(ctx, items, t, names)


def render(ctx: AuthContext, company_id: str) -> None:
    st.title("Tasks")
    manage = can_manage(ctx.profile)

    if st.button("Refresh", key="tasks_refresh"):
        st.session_state.pop(CACHE_KEY, None)

    try:
        items = _load(ctx, company_id)
    except Exception as e:
        show_error_ui(e, context="tasks")
        return

    status = st.selectbox("Status", [ALL] + STATUSES, key="tasks_status")

    names: Dict[str, str] = {}
    if manage:
        try:
            names = dict(compliance_options(ctx.client, company_id))
        except Exception as e:
            show_error_ui(e, context="task_compliance_options")
        with st.expander("Add task"):
            if names:
                _render_create(ctx, items, names)
            else:
                st.info("Add a compliance before creating tasks.")

    shown = filter_tasks(items, status)
    if not shown:
        st.info("No tasks match.")
    for t in shown:
        _render_task(ctx, items, t, manage, names)
