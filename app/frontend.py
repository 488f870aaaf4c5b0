# app/frontend.py
from typing import Any, Callable, Dict

import streamlit as st

from app.auth_supabase import get_auth_context, get_settings, require_company, require_login, supabase_logout
from backend.audit_logger import configure_logging
from backend.auth_session import AuthContext

__all__ = ["main", "fmt_date", "fmt_enum"]


# -----------------------------------------------------------------------------
# Formatting helpers
# -----------------------------------------------------------------------------

def fmt_date(v: Any) -> str:
    if not v:
        return "—"
    try:
        return v.strftime("%d %b %Y")
    except AttributeError:
        return str(v)[:10]


def fmt_enum(v: Any) -> str:
    value = getattr(v, "value", v)
    return str(value).replace("_", " ").title() if value else "—"


# -----------------------------------------------------------------------------
# Navigation
# -----------------------------------------------------------------------------

def _screens() -> Dict[str, Callable[[AuthContext, str], None]]:
    # lazy: screens import the fmt helpers from this module
    from app import (
        audit_log_ui,
        calendar_ui,
        company_ui,
        compliances_ui,
        dashboard,
        documents_ui,
        notifications_ui,
        reports_ui,
        tasks_ui,
        team_ui,
    )

    return {
        "Dashboard": dashboard.render,
        "Compliances": compliances_ui.render,
        "Tasks": tasks_ui.render,
        "Documents": documents_ui.render,
        "Calendar": calendar_ui.render,
        "Reports": reports_ui.render,
        "Team": team_ui.render,
        "Company": company_ui.render,
        "Notifications": notifications_ui.render,
        "Settings": notifications_ui.render_settings,
        "Activity": audit_log_ui.render,
    }


def main():
    st.set_page_config(page_title="ComplianceHub", page_icon="📋", layout="wide")
    configure_logging(get_settings().log_level)

    ctx = require_login(get_auth_context())
    company_id = require_company(ctx)

    screens = _screens()
    with st.sidebar:
        st.write(f"Signed in as *{ctx.profile.name or ctx.email}*")
        st.caption(fmt_enum(ctx.profile.role))
        if st.button("Sign out"):
            supabase_logout()
            st.rerun()
        st.divider()
        choice = st.radio("Go to", list(screens.keys()), key="nav_choice")

    screens[choice](ctx, company_id)
