# User-friendly error display for Streamlit
import logging
from typing import Dict, MutableMapping, Optional

import streamlit as st

from backend.error_handler import FormValidationError, OnboardingError, describe_error

logger = logging.getLogger(__name__)

ERRORS_SUFFIX = "__errors"


def show_error_ui(exc: BaseException, context: str = "") -> None:
    st.error(describe_error(exc))
    if isinstance(exc, OnboardingError) and exc.orphan_company_id:
        st.caption(f"Company record {exc.orphan_company_id} was created but is not linked to an account.")
    logger.info("Shown error in %s: %s", context or "-", exc)


# Field-level messages survive one rerun so they can render under their widgets.
# `state` defaults to st.session_state.

def _state(state: Optional[MutableMapping]) -> MutableMapping:
    return st.session_state if state is None else state


def set_field_errors(form_key: str, exc: FormValidationError, state: Optional[MutableMapping] = None) -> None:
    _state(state)[form_key + ERRORS_SUFFIX] = dict(exc.errors)


def clear_field_errors(form_key: str, state: Optional[MutableMapping] = None) -> None:
    _state(state).pop(form_key + ERRORS_SUFFIX, None)


def field_errors(form_key: str, state: Optional[MutableMapping] = None) -> Dict[str, str]:
    return _state(state).get(form_key + ERRORS_SUFFIX) or {}


def field_error(form_key: str, field: str) -> None:
    msg = field_errors(form_key).get(field)
    if msg:
        st.caption(f":red[{msg}]")
