from typing import Dict, List, Optional

import pandas as pd
import streamlit as st

from app.error_ui import clear_field_errors, field_error, set_field_errors, show_error_ui
from app.frontend import fmt_date
from backend.auth_session import AuthContext
from backend.compliances import compliance_options
from backend.documents import create_document, delete_document, list_documents, update_document
from backend.error_handler import FormValidationError
from backend.logic import local_state
from backend.logic.aggregation import search_documents, size_in_kb
from backend.logic.forms import DocumentForm
from backend.logic.records import Document, DocumentCategory
from backend.rbac import can_manage

CACHE_KEY = "documents_rows"
FORM_KEY = "document_form"
EDIT_FORM_KEY = "document_edit_form"

CATEGORIES = [c.value for c in DocumentCategory]


def _load(ctx: AuthContext, company_id: str) -> List[Document]:
    if CACHE_KEY not in st.session_state:
        st.session_state[CACHE_KEY] = list_documents(ctx.client, company_id)
    return st.session_state[CACHE_KEY]


def _compliance_names(ctx: AuthContext, company_id: str) -> Optional[Dict[str, str]]:
    try:
        return dict([("", "(none)")] + compliance_options(ctx.client, company_id))
    except Exception as e:
        show_error_ui(e, context="document_compliance_options")
        return None


def document_fields(prefix: str, form_key: str, names: Dict[str, str], current: Optional[Document] = None) -> dict:
    """Widgets for one document; returns the raw values for DocumentForm.from_dict."""
    data = {"name": st.text_input("Name", value=current.name if current else "", key=f"{prefix}_name")}
    field_error(form_key, "name")
    data["description"] = st.text_area(
        "Description", value=(current.description or "") if current else "", key=f"{prefix}_description"
    )
    data["file_path"] = st.text_input(
        "File reference (path or URL)", value=current.file_path if current else "", key=f"{prefix}_path"
    )
    field_error(form_key, "file_path")
    c1, c2, c3 = st.columns(3)
    data["file_type"] = c1.text_input(
        "MIME type", value=current.file_type if current else "", placeholder="application/pdf", key=f"{prefix}_type"
    )
    data["file_size"] = c2.text_input(
        "Size (bytes)", value=str(current.file_size) if current else "", key=f"{prefix}_size"
    )
    category = current.category.value if current else DocumentCategory.MISC.value
    data["category"] = c3.selectbox(
        "Category", CATEGORIES, index=CATEGORIES.index(category), key=f"{prefix}_category"
    )
    for f in ("file_type", "file_size", "category"):
        field_error(form_key, f)
    c4, c5 = st.columns(2)
    ids = list(names)
    linked = current.compliance_id if current and current.compliance_id in names else ids[0]
    data["compliance_id"] = c4.selectbox(
        "Compliance", ids, index=ids.index(linked), format_func=lambda i: names[i], key=f"{prefix}_compliance"
    )
    data["expiry_date"] = c5.date_input(
        "Expires on", value=current.expiry_date if current else None, key=f"{prefix}_expiry"
    )
    data["is_required"] = st.checkbox(
        "Required document", value=current.is_required if current else False, key=f"{prefix}_required"
    )
    return data


def _render_create(ctx: AuthContext, company_id: str, items: List[Document]) -> None:
    names = _compliance_names(ctx, company_id)
    if names is None:
        return

    with st.form("document_create_form", clear_on_submit=True):
        data = document_fields("doc_new", FORM_KEY, names)
        submitted = st.form_submit_button("Add document", type="primary")

    if submitted:
        try:
            created = create_document(ctx.client, company_id, DocumentForm.from_dict(data), ctx.user_id)
            st.session_state[CACHE_KEY] = local_state.prepend(items, created)
            clear_field_errors(FORM_KEY)
        except FormValidationError as e:
            set_field_errors(FORM_KEY, e)
            show_error_ui(e, context="document_create")
        except Exception as e:
            show_error_ui(e, context="document_create")
        else:
            st.rerun()


def _render_manage(ctx: AuthContext, company_id: str, items: List[Document], shown: List[Document]) -> None:
    by_id = {d.id: d for d in shown}
    target = st.selectbox(
        "Document", list(by_id), format_func=lambda i: by_id[i].name, key="documents_manage_target"
    )
    doc = by_id[target]

    with st.expander(f"Edit {doc.name}"):
        names = _compliance_names(ctx, company_id)
        if names is not None:
            with st.form(f"document_edit_{doc.id}"):
                data = document_fields(f"doc_{doc.id}", EDIT_FORM_KEY, names, doc)
                save = st.form_submit_button("Save", type="primary")
            if save:
                try:
                    updated = update_document(ctx.client, doc.id, DocumentForm.from_dict(data), ctx.user_id)
                    st.session_state[CACHE_KEY] = local_state.replace(items, updated)
                    clear_field_errors(EDIT_FORM_KEY)
                except FormValidationError as e:
                    set_field_errors(EDIT_FORM_KEY, e)
                    show_error_ui(e, context="document_update")
                except Exception as e:
                    show_error_ui(e, context="document_update")
                else:
                    st.rerun()

    if st.button("Delete document"):
        try:
            delete_document(ctx.client, doc.id, ctx.user_id)
            st.session_state[CACHE_KEY] = local_state.remove(items, doc.id)
        except Exception as e:
            show_error_ui(e, context="document_delete")
        else:
            st.rerun()


def render(ctx: AuthContext, company_id: str) -> None:
    st.title("Documents")
    manage = can_manage(ctx.profile)

    try:
        items = _load(ctx, company_id)
    except Exception as e:
        show_error_ui(e, context="documents")
        return

    search = st.text_input("Search documents", key="documents_search")

    if manage:
        with st.expander("Add document"):
            _render_create(ctx, company_id, items)

    shown = search_documents(items, search)
    if not shown:
        st.info("No documents yet.")
        return

    st.dataframe(
        pd.DataFrame(
            [
                {
                    "name": d.name,
                    "category": d.category.value,
                    "type": d.file_type,
                    "size": size_in_kb(d.file_size),
                    "required": d.is_required,
                    "expires": fmt_date(d.expiry_date),
                    "uploaded": fmt_date(d.uploaded_at),
                }
                for d in shown
            ]
        ),
        use_container_width=True,
        hide_index=True,
    )

    if manage:
        _render_manage(ctx, company_id, items, shown)
