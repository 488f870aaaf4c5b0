import pandas as pd
import streamlit as st

from app.error_ui import show_error_ui
from app.frontend import fmt_date, fmt_enum
from backend.auth_session import AuthContext
from backend.team import list_team


def render(ctx: AuthContext, company_id: str) -> None:
    st.title("Team")
    try:
        members = list_team(ctx.client, company_id)
    except Exception as e:
        show_error_ui(e, context="team")
        return

    if not members:
        st.info("No team members yet.")
        return

    st.dataframe(
        pd.DataFrame(
            [
                {
                    "name": m.name,
                    "email": m.email or "—",
                    "phone": m.phone or "—",
                    "role": fmt_enum(m.role),
                    "primary contact": m.is_primary,
                    "last login": fmt_date(m.last_login),
                }
                for m in members
            ]
        ),
        use_container_width=True,
        hide_index=True,
    )
