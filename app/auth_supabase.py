# app/auth_supabase.py
from __future__ import annotations

import logging
from typing import MutableMapping, Optional

import streamlit as st
from supabase import Client, create_client

from app.error_ui import show_error_ui
from backend.auth_session import AuthContext
from backend.config import Settings
from backend.staging import PendingOnboardingStore

__all__ = [
    "get_settings",
    "get_store",
    "supabase_client",
    "get_auth_context",
    "require_login",
    "require_company",
    "supabase_logout",
    "clear_user_state",
]

logger = logging.getLogger(__name__)

CTX_KEY = "auth_ctx"
CLIENT_KEY = "supabase_client"
# per-user session keys: cached lists, field errors, drafts and selections
USER_STATE_SUFFIXES = ("_rows", "__errors", "_draft", "_selection")


# =============================================================================
# Shared resources
# =============================================================================

@st.cache_resource
def get_settings() -> Settings:
    return Settings.load()


@st.cache_resource
def get_store() -> PendingOnboardingStore:
    # one staging store per server process, shared by all browser sessions
    return PendingOnboardingStore()


def supabase_client() -> Client:
    """
    Supabase client for this browser session. The client holds the user's session,
    so PostgREST calls carry the user's JWT and row-level security applies.
    """
    sb = st.session_state.get(CLIENT_KEY)
    if sb is None:
        s = get_settings()
        sb = create_client(s.supabase_url, s.supabase_anon_key)
        st.session_state[CLIENT_KEY] = sb
    return sb


# =============================================================================
# Session context
# =============================================================================

def get_auth_context() -> AuthContext:
    """
    AuthContext for this browser session. Deferred session work runs once per
    script run, after the auth events of the previous interaction were recorded.
    """
    ctx = st.session_state.get(CTX_KEY)
    if ctx is None:
        ctx = AuthContext(supabase_client(), get_store()).initialize()
        st.session_state[CTX_KEY] = ctx
    ctx.run_deferred()
    for notice in ctx.pop_notices():
        st.warning(notice)
    if ctx.last_finalize is not None:
        st.success(
            f"Onboarding finished: {ctx.last_finalize.compliances_inserted} compliances added to your company."
        )
        ctx.last_finalize = None
    return ctx


def supabase_logout() -> None:
    ctx: Optional[AuthContext] = st.session_state.get(CTX_KEY)
    if ctx is not None:
        ctx.sign_out()
        ctx.dispose()
    clear_user_state(st.session_state)


def clear_user_state(state: MutableMapping) -> None:
    """
    Drops everything that belongs to the signed-out user so the next sign-in
    on this browser session starts clean.
    """
    for k in [CTX_KEY, CLIENT_KEY]:
        state.pop(k, None)
    for k in [k for k in state if str(k).endswith(USER_STATE_SUFFIXES)]:
        state.pop(k, None)


# =============================================================================
# Auth UI / Flows
# =============================================================================

def require_login(ctx: AuthContext) -> AuthContext:
    """
    Blocks the app until the user is authenticated.
    """
    if ctx.is_authenticated:
        return ctx

    st.title("ComplianceHub")
    st.subheader("Sign In")

    with st.form("auth_login_form"):
        email = st.text_input("Email", key="auth_login_email")
        password = st.text_input("Password", type="password", key="auth_login_password")
        submitted = st.form_submit_button("Sign In", type="primary")

    if submitted:
        if not email or not password:
            st.error("Email and password are required.")
            st.stop()
        try:
            ctx.sign_in(email.strip(), password)
        except Exception as e:
            show_error_ui(e, context="sign_in")
            st.caption("If you just registered, confirm your email address first.")
        else:
            st.rerun()

    st.markdown("---")
    st.write("New here? Register your company first.")
    st.page_link("pages/1_Onboarding.py", label="Register your company", icon="🏢")

    st.stop()
    return ctx


def require_company(ctx: AuthContext) -> str:
    if ctx.profile is None:
        try:
            ctx.fetch_profile()
        except Exception as e:
            show_error_ui(e, context="fetch_profile")
            st.stop()
    if ctx.company_id:
        return ctx.company_id

    st.title("No company linked")
    st.info(
        "Your account is not linked to a company yet. If you registered one, "
        "sign out and sign in again to finish onboarding."
    )
    if st.button("Sign out"):
        supabase_logout()
        st.rerun()
    st.stop()
    return ""
