# backend/config.py
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from backend.error_handler import ConfigurationError

load_dotenv()

REPO_ROOT = Path(__file__).resolve().parent.parent

SUPABASE_URL_KEY = "SUPABASE_URL"
SUPABASE_ANON_KEY_KEY = "SUPABASE_ANON_KEY"
APP_URL_KEY = "APP_URL"
STAGING_DATABASE_URL_KEY = "STAGING_DATABASE_URL"
LOG_LEVEL_KEY = "LOG_LEVEL"

DEFAULT_APP_URL = "http://localhost:8501"
DEFAULT_STAGING_DATABASE_URL = "sqlite:///" + str(REPO_ROOT / "data" / "pending_onboarding.db")


def get_setting(name: str, default: Optional[str] = None) -> Optional[str]:
    """
    Safe setting fetch:
    - env var wins
    - then st.secrets if a Streamlit runtime is present
    - never throws if secrets.toml is missing locally
    """
    v = os.getenv(name)
    if v and v.strip():
        return v.strip()

    try:
        import streamlit as st  # lazy import

        v = st.secrets.get(name)  # type: ignore[attr-defined]
        if v:
            return str(v).strip()
    except Exception:
        # No secrets.toml / no Streamlit runtime: fall through to the default.
        pass

    return default


def require_setting(name: str) -> str:
    v = get_setting(name)
    if not v:
        raise ConfigurationError(f"Missing required setting: {name}")
    return v


def normalize_database_url(url: str) -> str:
    # Supabase sometimes hands out postgres:// which SQLAlchemy rejects
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql://", 1)
    return url


@dataclass(frozen=True)
class Settings:
    supabase_url: str
    supabase_anon_key: str
    app_url: str = DEFAULT_APP_URL
    staging_database_url: str = DEFAULT_STAGING_DATABASE_URL
    log_level: str = "INFO"

    @staticmethod
    def load() -> "Settings":
        return Settings(
            supabase_url=require_setting(SUPABASE_URL_KEY),
            supabase_anon_key=require_setting(SUPABASE_ANON_KEY_KEY),
            app_url=(get_setting(APP_URL_KEY) or DEFAULT_APP_URL).rstrip("/"),
            staging_database_url=staging_database_url(),
            log_level=(get_setting(LOG_LEVEL_KEY) or "INFO").upper(),
        )


def staging_database_url() -> str:
    """Staging store URL; usable without Supabase credentials (tests, init_db)."""
    return normalize_database_url(get_setting(STAGING_DATABASE_URL_KEY) or DEFAULT_STAGING_DATABASE_URL)
