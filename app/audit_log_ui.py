# app/audit_log_ui.py
import pandas as pd
import streamlit as st

from backend.audit_logger import get_audit_log
from backend.auth_session import AuthContext
from backend.rbac import can_manage


def render(ctx: AuthContext, company_id: str) -> None:
    st.title("Activity")

    # owners see every action recorded by this server, others only their own
    logs = get_audit_log(None if can_manage(ctx.profile) else ctx.user_id)

    if not logs:
        st.info("No activity recorded yet.")
    else:
        frame = pd.DataFrame(list(reversed(logs)), columns=["timestamp", "user_id", "action", "details"])
        st.dataframe(frame, use_container_width=True, hide_index=True)
        st.download_button("Export Log", frame.to_csv(index=False), file_name="activity_log.csv")
