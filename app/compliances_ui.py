from datetime import date
from typing import List, Optional

import pandas as pd
import streamlit as st

from app.documents_ui import CACHE_KEY as DOCUMENTS_CACHE_KEY, document_fields
from app.error_ui import clear_field_errors, field_error, set_field_errors, show_error_ui
from app.frontend import fmt_date, fmt_enum
from app.tasks_ui import CACHE_KEY as TASKS_CACHE_KEY, task_fields
from backend.auth_session import AuthContext
from backend.compliances import (
    create_compliance,
    delete_compliance,
    get_compliance_detail,
    list_compliances,
    update_compliance,
)
from backend.documents import create_document
from backend.error_handler import FormValidationError
from backend.logic import local_state
from backend.logic.aggregation import ALL, display_status, filter_compliances, size_in_kb
from backend.logic.forms import ComplianceForm, DocumentForm, TaskForm
from backend.logic.records import (
    Compliance,
    ComplianceStatus,
    ComplianceType,
    Frequency,
    Priority,
    RegulatoryBody,
    TaskStatus,
)
from backend.rbac import can_manage
from backend.tasks import complete_task, create_task

CACHE_KEY = "compliances_rows"
FORM_KEY = "compliance_form"
DETAIL_KEY = "compliance_detail_selection"
DETAIL_TASK_FORM_KEY = "detail_task_form"
DETAIL_DOCUMENT_FORM_KEY = "detail_document_form"


def _values(enum_cls) -> List[str]:
    return [m.value for m in enum_cls]


def _load(ctx: AuthContext, company_id: str) -> List[Compliance]:
    if CACHE_KEY not in st.session_state:
        st.session_state[CACHE_KEY] = list_compliances(ctx.client, company_id)
    return st.session_state[CACHE_KEY]


def edit_form_key(compliance_id: str) -> str:
    return f"compliance_edit_{compliance_id}"


def _form_fields(prefix: str, form_key: str, current: Optional[Compliance] = None) -> dict:
    def idx(enum_cls, value, default):
        values = _values(enum_cls)
        return values.index(value.value if value else default)

    data = {
        "name": st.text_input("Name", value=current.name if current else "", key=f"{prefix}_name"),
        "description": st.text_area(
            "Description", value=(current.description or "") if current else "", key=f"{prefix}_description"
        ),
    }
    field_error(form_key, "name")
    c1, c2, c3 = st.columns(3)
    data["regulatory_body"] = c1.selectbox(
        "Regulatory body", _values(RegulatoryBody),
        index=idx(RegulatoryBody, current.regulatory_body if current else None, RegulatoryBody.MCA.value),
        key=f"{prefix}_body",
    )
    data["type"] = c2.selectbox(
        "Type", _values(ComplianceType),
        index=idx(ComplianceType, current.type if current else None, ComplianceType.CORPORATE.value),
        key=f"{prefix}_type",
    )
    data["frequency"] = c3.selectbox(
        "Frequency", _values(Frequency),
        index=idx(Frequency, current.frequency if current else None, Frequency.MONTHLY.value),
        key=f"{prefix}_frequency",
    )
    c4, c5, c6 = st.columns(3)
    data["priority"] = c4.selectbox(
        "Priority", _values(Priority),
        index=idx(Priority, current.priority if current else None, Priority.MEDIUM.value),
        key=f"{prefix}_priority",
    )
    data["status"] = c5.selectbox(
        "Status", _values(ComplianceStatus),
        index=idx(ComplianceStatus, current.status if current else None, ComplianceStatus.PENDING.value),
        key=f"{prefix}_status",
    )
    data["next_due_date"] = c6.date_input(
        "Next due date", value=current.next_due_date if current else date.today(), key=f"{prefix}_due"
    )
    field_error(form_key, "next_due_date")
    return data


def _invalidate_related() -> None:
    # the Tasks and Documents screens reload on their next render
    st.session_state.pop(TASKS_CACHE_KEY, None)
    st.session_state.pop(DOCUMENTS_CACHE_KEY, None)


def _detail_actions(ctx: AuthContext, c: Compliance, open_tasks) -> None:
    names = {c.id: c.name}

    for t in open_tasks:
        if st.button(f"Complete: {t.title}", key=f"detail_complete_{t.id}"):
            try:
                complete_task(ctx.client, t.id, ctx.user_id)
            except Exception as e:
                show_error_ui(e, context="detail_task_complete")
            else:
                _invalidate_related()
                st.rerun()

    with st.expander("Add task"):
        with st.form(f"detail_task_{c.id}", clear_on_submit=True):
            data = task_fields(f"detail_task_{c.id}", DETAIL_TASK_FORM_KEY, names)
            add_task = st.form_submit_button("Create task", type="primary")
        if add_task:
            try:
                create_task(ctx.client, TaskForm.from_dict(data), ctx.user_id)
                clear_field_errors(DETAIL_TASK_FORM_KEY)
            except FormValidationError as e:
                set_field_errors(DETAIL_TASK_FORM_KEY, e)
                show_error_ui(e, context="detail_task_create")
            except Exception as e:
                show_error_ui(e, context="detail_task_create")
            else:
                _invalidate_related()
                st.rerun()

    with st.expander("Add document"):
        with st.form(f"detail_document_{c.id}", clear_on_submit=True):
            data = document_fields(f"detail_doc_{c.id}", DETAIL_DOCUMENT_FORM_KEY, names)
            add_doc = st.form_submit_button("Add document", type="primary")
        if add_doc:
            try:
                create_document(ctx.client, c.company_id, DocumentForm.from_dict(data), ctx.user_id)
                clear_field_errors(DETAIL_DOCUMENT_FORM_KEY)
            except FormValidationError as e:
                set_field_errors(DETAIL_DOCUMENT_FORM_KEY, e)
                show_error_ui(e, context="detail_document_create")
            except Exception as e:
                show_error_ui(e, context="detail_document_create")
            else:
                _invalidate_related()
                st.rerun()


def _render_detail(ctx: AuthContext, compliance_id: str, manage: bool) -> None:
    try:
        detail = get_compliance_detail(ctx.client, compliance_id)
    except Exception as e:
        show_error_ui(e, context="compliance_detail")
        return
    if detail is None:
        st.warning("Compliance not found.")
        return

    c = detail.compliance
    st.subheader(c.name)
    st.write(c.description or "")
    st.write(
        f"{c.regulatory_body.value} · {fmt_enum(c.type)} · {fmt_enum(c.frequency)} · "
        f"priority {fmt_enum(c.priority)} · due {fmt_date(c.next_due_date)} · "
        f"status {fmt_enum(display_status(c))}"
    )
    st.markdown("##### Tasks")
    if detail.tasks:
        st.dataframe(
            pd.DataFrame(
                [{"title": t.title, "status": t.status.value, "due": t.due_date} for t in detail.tasks]
            ),
            use_container_width=True,
            hide_index=True,
        )
    else:
        st.caption("No tasks yet.")
    st.markdown("##### Documents")
    if detail.documents:
        for d in detail.documents:
            st.write(f"{d.name} · {d.file_type} · {size_in_kb(d.file_size)}")
    else:
        st.caption("No documents yet.")

    if manage:
        st.markdown("##### Actions")
        _detail_actions(ctx, c, [t for t in detail.tasks if t.status != TaskStatus.COMPLETED])


def render(ctx: AuthContext, company_id: str) -> None:
    st.title("Compliances")
    manage = can_manage(ctx.profile)

    _, top_r = st.columns([4, 1])
    with top_r:
        if st.button("Refresh", key="compliances_refresh"):
            st.session_state.pop(CACHE_KEY, None)

    try:
        items = _load(ctx, company_id)
    except Exception as e:
        show_error_ui(e, context="compliances")
        return

    f1, f2, f3, f4 = st.columns(4)
    search = f1.text_input("Search", key="compliances_search")
    status = f2.selectbox("Status", [ALL] + _values(ComplianceStatus), key="compliances_status")
    ctype = f3.selectbox("Type", [ALL] + _values(ComplianceType), key="compliances_type")
    body = f4.selectbox("Regulatory body", [ALL] + _values(RegulatoryBody), key="compliances_body")

    shown = filter_compliances(items, search, status, ctype, body)
    st.caption(f"{len(shown)} of {len(items)} compliances")

    if manage:
        with st.expander("Add compliance"):
            with st.form("compliance_create_form", clear_on_submit=True):
                data = _form_fields("new", FORM_KEY)
                submitted = st.form_submit_button("Create", type="primary")
            if submitted:
                try:
                    created = create_compliance(ctx.client, company_id, ComplianceForm.from_dict(data), ctx.user_id)
                    st.session_state[CACHE_KEY] = local_state.prepend(items, created)
                    clear_field_errors(FORM_KEY)
                except FormValidationError as e:
                    set_field_errors(FORM_KEY, e)
                    show_error_ui(e, context="compliance_create")
                except Exception as e:
                    show_error_ui(e, context="compliance_create")
                else:
                    st.rerun()

    for c in shown:
        status_label = fmt_enum(display_status(c))
        with st.expander(f"{c.name} · due {fmt_date(c.next_due_date)} · {status_label}"):
            if st.button("View details", key=f"view_{c.id}"):
                st.session_state[DETAIL_KEY] = c.id
            if not manage:
                continue
            form_key = edit_form_key(c.id)
            with st.form(form_key):
                data = _form_fields(f"edit_{c.id}", form_key, c)
                save = st.form_submit_button("Save")
            if save:
                try:
                    updated = update_compliance(ctx.client, c.id, ComplianceForm.from_dict(data), ctx.user_id)
                    st.session_state[CACHE_KEY] = local_state.replace(items, updated)
                    clear_field_errors(form_key)
                except FormValidationError as e:
                    set_field_errors(form_key, e)
                    show_error_ui(e, context="compliance_update")
                except Exception as e:
                    show_error_ui(e, context="compliance_update")
                else:
                    st.rerun()
            if st.button("Delete", key=f"delete_{c.id}"):
                try:
                    delete_compliance(ctx.client, c.id, ctx.user_id)
                    st.session_state[CACHE_KEY] = local_state.remove(items, c.id)
                except Exception as e:
                    show_error_ui(e, context="compliance_delete")
                else:
                    st.rerun()

    detail_id = st.session_state.get(DETAIL_KEY)
    if detail_id:
        st.divider()
        _render_detail(ctx, detail_id, manage)
