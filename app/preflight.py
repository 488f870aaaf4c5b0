# app/preflight.py
import streamlit as st

from backend.config import APP_URL_KEY, DEFAULT_APP_URL, SUPABASE_ANON_KEY_KEY, SUPABASE_URL_KEY, get_setting

REQUIRED_AT_BOOT = [
    SUPABASE_URL_KEY,
    SUPABASE_ANON_KEY_KEY,
]

# Email confirmation links redirect here
RECOMMENDED_AT_BOOT = [
    APP_URL_KEY,
]


def _missing(keys):
    return [k for k in keys if not get_setting(k)]


def run():
    # --- Hard requirements ---
    missing_boot = _missing(REQUIRED_AT_BOOT)
    if missing_boot:
        st.error(
            "Missing required secrets: " + ", ".join(missing_boot) + "\n\n"
            "Set them as environment variables, in a local .env file, or in Streamlit secrets.\n\n"
            "Until these are set, sign-in and all company data are unavailable."
        )
        st.stop()

    # --- Recommended (do not stop) ---
    missing_recommended = _missing(RECOMMENDED_AT_BOOT)
    if missing_recommended:
        st.warning(
            f"Recommended secret not set: {APP_URL_KEY}\n\n"
            f"Confirmation emails will redirect to {DEFAULT_APP_URL}. "
            "Set it to the deployed app URL and add that URL to the Supabase redirect allow-list."
        )
