import os
import sys

# Streamlit runs pages with pages/ as the script dir
REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

import streamlit as st

from app.preflight import run as preflight_run


def main():
    st.set_page_config(page_title="Register · ComplianceHub", page_icon="🏢")
    preflight_run()

    from app.auth_supabase import get_settings
    from app.onboarding_ui import render
    from backend.audit_logger import configure_logging

    configure_logging(get_settings().log_level)
    render()


main()
