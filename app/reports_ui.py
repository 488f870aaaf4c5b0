import streamlit as st

from app.error_ui import show_error_ui
from backend.auth_session import AuthContext
from backend.compliances import list_compliances
from backend.reporting import ReportingEngine
from backend.tasks import list_tasks_for_company


def render(ctx: AuthContext, company_id: str) -> None:
    st.title("Reports")
    try:
        engine = ReportingEngine(
            list_compliances(ctx.client, company_id),
            list_tasks_for_company(ctx.client, company_id),
        )
    except Exception as e:
        show_error_ui(e, context="reports")
        return

    for title, frame in engine.all_reports().items():
        st.markdown(f"#### {title}")
        if frame.empty:
            st.caption("No data yet.")
            continue
        st.bar_chart(frame.set_index(frame.columns[0]))

    st.markdown("#### Deadline schedule")
    st.dataframe(engine.calendar_frame(), use_container_width=True, hide_index=True)
