# backend/auth_session.py
"""
Per-browser-session auth state.

Session changes are handled in two phases. Phase one runs inside the client's
auth-state callback and only records session/user. Phase two (profile fetch,
onboarding finalization) is queued and executed later by run_deferred(), outside
the callback, so that work never re-enters the auth client while it is still
dispatching the event.
"""
from __future__ import annotations

import logging
from collections import OrderedDict
from typing import Any, Callable, Dict, List, Mapping, Optional

from backend.audit_logger import log_action
from backend.error_handler import BackendOperationError, describe_error
from backend.finalizer import FinalizeResult, finalize_pending_onboarding
from backend.logic.records import Profile
from backend.repository import Repository
from backend.staging import PendingOnboardingStore

logger = logging.getLogger(__name__)


def request_account(
    client,
    email: str,
    password: str,
    metadata: Mapping[str, Any],
    redirect_to: Optional[str] = None,
):
    """Ask Supabase Auth to create the account; metadata rides along on the user."""
    options: Dict[str, Any] = {"data": dict(metadata)}
    if redirect_to:
        options["email_redirect_to"] = redirect_to
    try:
        return client.auth.sign_up({"email": email, "password": password, "options": options})
    except Exception as e:
        logger.warning("sign_up failed for %s: %s: %s", email, type(e).__name__, e)
        raise BackendOperationError("sign_up", None, str(e)) from e


class AuthContext:
    NEW = "new"
    ANONYMOUS = "anonymous"
    AUTHENTICATED = "authenticated"
    DISPOSED = "disposed"

    def __init__(self, client, store: PendingOnboardingStore):
        self.client = client
        self.store = store
        self.state = self.NEW
        self.session = None
        self.user = None
        self.profile: Optional[Profile] = None
        self.last_finalize: Optional[FinalizeResult] = None
        self.notices: List[str] = []
        self._deferred: "OrderedDict[str, Callable[[], Any]]" = OrderedDict()
        self._subscription = None

    # -------------------------
    # lifecycle
    # -------------------------

    def initialize(self) -> "AuthContext":
        if self.state == self.DISPOSED:
            raise RuntimeError("AuthContext has been disposed")
        if self._subscription is None:
            self._subscription = self.client.auth.on_auth_state_change(self._on_auth_state_change)
        try:
            session = self.client.auth.get_session()
        except Exception as e:
            logger.warning("Could not restore session: %s: %s", type(e).__name__, e)
            session = None
        self._apply_session(session)
        return self

    def dispose(self) -> None:
        if self._subscription is not None:
            try:
                self._subscription.unsubscribe()
            except Exception as e:
                logger.warning("Unsubscribing auth listener failed: %s", e)
            self._subscription = None
        self._deferred.clear()
        self.session = self.user = self.profile = None
        self.state = self.DISPOSED

    # -------------------------
    # phase one
    # -------------------------

    def _on_auth_state_change(self, event: Any, session: Any) -> None:
        logger.debug("auth event %s", event)
        self._apply_session(session)

    def _apply_session(self, session: Any) -> None:
        if self.state == self.DISPOSED:
            return
        self.session = session
        self.user = getattr(session, "user", None) if session else None
        if self.user is None:
            self.profile = None
            # queued work belonged to the previous user
            self._deferred.clear()
            self.state = self.ANONYMOUS
            return

        self.state = self.AUTHENTICATED
        user_id = str(self.user.id)
        email = getattr(self.user, "email", None)
        self._defer(f"profile:{user_id}", self.fetch_profile)
        self._defer(f"finalize:{user_id}", lambda: self._finalize(user_id, email))

    def _defer(self, key: str, work: Callable[[], Any]) -> None:
        if key not in self._deferred:
            self._deferred[key] = work

    # -------------------------
    # phase two
    # -------------------------

    @property
    def pending_work(self) -> List[str]:
        return list(self._deferred.keys())

    def run_deferred(self) -> int:
        """Execute queued work in order. Returns how many items ran."""
        ran = 0
        while self._deferred:
            key, work = self._deferred.popitem(last=False)
            ran += 1
            try:
                work()
            except Exception as e:
                logger.exception("Deferred auth work %s failed", key)
                self.notices.append(describe_error(e))
        return ran

    def _finalize(self, user_id: str, email: Optional[str]) -> None:
        result = finalize_pending_onboarding(self.client, self.store, user_id, email)
        if result is not None:
            self.last_finalize = result
            self.fetch_profile()

    def pop_notices(self) -> List[str]:
        out, self.notices = self.notices, []
        return out

    # -------------------------
    # operations
    # -------------------------

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def user_id(self) -> Optional[str]:
        return str(self.user.id) if self.user is not None else None

    @property
    def email(self) -> Optional[str]:
        return getattr(self.user, "email", None) if self.user is not None else None

    @property
    def company_id(self) -> Optional[str]:
        return self.profile.company_id if self.profile else None

    def sign_in(self, email: str, password: str):
        try:
            resp = self.client.auth.sign_in_with_password({"email": email, "password": password})
        except Exception as e:
            logger.warning("sign_in failed for %s: %s: %s", email, type(e).__name__, e)
            raise BackendOperationError("sign_in", None, str(e)) from e
        # the auth-state callback normally does this; repeated keys are de-duplicated
        self._apply_session(getattr(resp, "session", None))
        log_action(self.user_id, "signed_in", {"email": email})
        return resp

    def sign_up(self, email: str, password: str, metadata: Mapping[str, Any], redirect_to: Optional[str] = None):
        resp = request_account(self.client, email, password, metadata, redirect_to)
        # no session yet when email confirmation is required
        if getattr(resp, "session", None) is not None:
            self._apply_session(resp.session)
        return resp

    def sign_out(self) -> None:
        user_id = self.user_id
        try:
            self.client.auth.sign_out()
        except Exception as e:
            # local state is cleared regardless
            logger.warning("sign_out failed: %s: %s", type(e).__name__, e)
        self._apply_session(None)
        log_action(user_id, "signed_out")

    def fetch_profile(self) -> Optional[Profile]:
        if self.user is None:
            self.profile = None
            return None
        self.profile = Repository(self.client, "profiles", Profile).get(str(self.user.id))
        return self.profile

    def update_profile(self, payload: Mapping[str, Any]) -> Profile:
        if self.user is None:
            raise BackendOperationError("update", "profiles", "not signed in")
        self.profile = Repository(self.client, "profiles", Profile).update(str(self.user.id), payload)
        log_action(self.user_id, "profile_updated", {"fields": sorted(payload.keys())})
        return self.profile
