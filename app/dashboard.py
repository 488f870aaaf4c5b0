import streamlit as st

from app.error_ui import show_error_ui
from app.frontend import fmt_date, fmt_enum
from backend.analytics_dashboard import DUE_SOON_DAYS, compute_dashboard_stats
from backend.auth_session import AuthContext
from backend.compliances import list_compliances
from backend.tasks import list_tasks_for_company


def render(ctx: AuthContext, company_id: str) -> None:
    st.title("Dashboard")

    try:
        compliances = list_compliances(ctx.client, company_id)
        tasks = list_tasks_for_company(ctx.client, company_id)
    except Exception as e:
        show_error_ui(e, context="dashboard")
        return

    stats = compute_dashboard_stats(compliances, tasks)

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Total compliances", stats.total)
    col2.metric(f"Due in {DUE_SOON_DAYS} days", stats.due_this_week)
    col3.metric("Overdue", stats.overdue)
    col4.metric("Completion rate", f"{stats.completion_rate}%")

    left, right = st.columns(2)
    with left:
        st.markdown("#### Upcoming deadlines")
        if not stats.upcoming:
            st.info("Nothing due. You are all caught up.")
        for c in stats.upcoming:
            st.write(f"**{c.name}** · {c.regulatory_body.value} · due {fmt_date(c.next_due_date)}")
    with right:
        st.markdown("#### Urgent tasks")
        if not stats.urgent_tasks:
            st.info("No open tasks.")
        for t in stats.urgent_tasks:
            st.write(f"**{t.title}** · {fmt_enum(t.priority)} · due {fmt_date(t.due_date)}")
            if t.compliance_name:
                st.caption(t.compliance_name)
