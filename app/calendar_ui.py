import streamlit as st

from app.error_ui import show_error_ui
from app.frontend import fmt_date, fmt_enum
from backend.auth_session import AuthContext
from backend.compliances import list_compliances
from backend.logic.aggregation import display_status, group_by_date
from backend.logic.records import ComplianceStatus

_STATUS_ICON = {
    ComplianceStatus.PENDING: "⚪",
    ComplianceStatus.IN_PROGRESS: "🟡",
    ComplianceStatus.COMPLETED: "🟢",
    ComplianceStatus.OVERDUE: "🔴",
}


def render(ctx: AuthContext, company_id: str) -> None:
    st.title("Compliance calendar")
    try:
        compliances = list_compliances(ctx.client, company_id)
    except Exception as e:
        show_error_ui(e, context="calendar")
        return

    groups = group_by_date(compliances)
    if not groups:
        st.info("No deadlines scheduled.")
        return

    for due, items in groups:
        st.markdown(f"#### {fmt_date(due)}")
        for c in items:
            status = display_status(c)
            st.write(f"{_STATUS_ICON[status]} **{c.name}** · {c.regulatory_body.value} · {fmt_enum(status)}")
