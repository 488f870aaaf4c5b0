# ------------------------------------------------------------------------------
# ComplianceHub
# Module: Onboarding wizard
# File: backend/onboarding.py
# ------------------------------------------------------------------------------
"""
Four screens, then an external wait:

    COMPANY_INFO -> BUSINESS_DETAILS -> USER_ACCOUNT -> REVIEW
        -> PENDING_EMAIL_VERIFICATION

Only complete() talks to the outside world. It creates the company, stages the
compliances for the finalizer, and requests the account, in that order. A failure
leaves the wizard on REVIEW so the user can try again. A company row created before
the failure is not removed; OnboardingError.orphan_company_id names it.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum
from functools import partial
from typing import Any, Callable, Dict, List, Mapping, Optional

from backend.audit_logger import log_action
from backend.auth_session import request_account
from backend.company import create_company
from backend.error_handler import OnboardingError, describe_error
from backend.logic.applicability import ComplianceDraft, derive_applicable_compliances, materialize
from backend.logic.forms import BusinessDetailsForm, CompanyInfoForm, UserAccountForm
from backend.staging import PendingOnboardingStore

logger = logging.getLogger(__name__)


class OnboardingStep(str, Enum):
    COMPANY_INFO = "company_info"
    BUSINESS_DETAILS = "business_details"
    USER_ACCOUNT = "user_account"
    REVIEW = "review"
    PENDING_EMAIL_VERIFICATION = "pending_email_verification"


_ORDER = list(OnboardingStep)


@dataclass(frozen=True)
class OnboardingResult:
    company_id: str
    email: str
    compliances_staged: int
    session_started: bool


def signup_metadata(
    info: CompanyInfoForm,
    details: BusinessDetailsForm,
    account: UserAccountForm,
    company_id: str,
) -> Dict[str, Any]:
    """Everything needed to rebuild the onboarding if the staged record is lost."""
    return {
        "name": account.name,
        "phone": account.phone,
        "existing_company_id": company_id,
        "company_name": info.name,
        "company_cin": info.cin,
        "company_pan": info.pan,
        "company_gstin": info.gstin or None,
        "company_state": details.state,
        "company_business_type": details.business_type,
        "company_annual_turnover": float(details.annual_turnover or 0),
        "company_employee_count": details.employee_count,
        "company_incorporation_date": details.incorporation_date.isoformat() if details.incorporation_date else None,
        "company_address": details.address(),
    }


class OnboardingWizard:
    def __init__(self, today: Optional[date] = None):
        self._today = today
        self.step = OnboardingStep.COMPANY_INFO
        self.company_info: Optional[CompanyInfoForm] = None
        self.business_details: Optional[BusinessDetailsForm] = None
        self.user_account: Optional[UserAccountForm] = None
        self.drafts: List[ComplianceDraft] = []
        self.planned: List[Dict[str, Any]] = []
        self.result: Optional[OnboardingResult] = None

    @property
    def today(self) -> date:
        return self._today or date.today()

    def _expect(self, step: OnboardingStep) -> None:
        if self.step != step:
            raise OnboardingError(step.value, f"Onboarding is at '{self.step.value}', not '{step.value}'")

    # -------------------------
    # form steps
    # -------------------------

    def submit_company_info(self, data: Mapping[str, Any]) -> OnboardingStep:
        self._expect(OnboardingStep.COMPANY_INFO)
        self.company_info = CompanyInfoForm.from_dict(data).validate()
        self.step = OnboardingStep.BUSINESS_DETAILS
        return self.step

    def submit_business_details(self, data: Mapping[str, Any]) -> OnboardingStep:
        self._expect(OnboardingStep.BUSINESS_DETAILS)
        details = BusinessDetailsForm.from_dict(data).validate()
        self.business_details = details
        self.drafts = derive_applicable_compliances(details.profile_snapshot())
        self.planned = materialize(self.drafts, self.today)
        self.step = OnboardingStep.USER_ACCOUNT
        return self.step

    def submit_user_account(self, data: Mapping[str, Any]) -> OnboardingStep:
        self._expect(OnboardingStep.USER_ACCOUNT)
        self.user_account = UserAccountForm.from_dict(data).validate()
        self.step = OnboardingStep.REVIEW
        return self.step

    def back(self) -> OnboardingStep:
        idx = _ORDER.index(self.step)
        if 0 < idx < _ORDER.index(OnboardingStep.PENDING_EMAIL_VERIFICATION):
            self.step = _ORDER[idx - 1]
        return self.step

    @property
    def step_number(self) -> int:
        """1-based, for the progress bar."""
        return min(_ORDER.index(self.step) + 1, 4)

    # -------------------------
    # completion
    # -------------------------

    def complete(
        self,
        client,
        store: PendingOnboardingStore,
        redirect_to: Optional[str] = None,
        sign_up: Optional[Callable[..., Any]] = None,
    ) -> OnboardingResult:
        """
        `sign_up(email, password, metadata, redirect_to)` requests the account;
        pass AuthContext.sign_up so a session returned right away is picked up.
        """
        self._expect(OnboardingStep.REVIEW)
        info, details, account = self.company_info, self.business_details, self.user_account

        try:
            company = create_company(client, info, details)
        except Exception as e:
            raise OnboardingError("create_company", describe_error(e)) from e

        payloads = materialize(self.drafts, self.today)

        try:
            store.stage(account.email, company.id, payloads, account.phone)
        except Exception as e:
            logger.error("Staging failed; company %s has no owner", company.id)
            raise OnboardingError("stage", describe_error(e), orphan_company_id=company.id) from e
        log_action(None, "onboarding_staged", {"company_id": company.id, "email": account.email})

        try:
            resp = (sign_up or partial(request_account, client))(
                account.email,
                account.password,
                signup_metadata(info, details, account, company.id),
                redirect_to,
            )
        except Exception as e:
            # a stale record must not attach this company to a later sign-in
            store.discard(account.email)
            logger.error("Account request failed; company %s has no owner", company.id)
            raise OnboardingError("sign_up", describe_error(e), orphan_company_id=company.id) from e
        log_action(None, "account_requested", {"company_id": company.id, "email": account.email})

        self.result = OnboardingResult(
            company_id=company.id,
            email=account.email,
            compliances_staged=len(payloads),
            session_started=getattr(resp, "session", None) is not None,
        )
        self.step = OnboardingStep.PENDING_EMAIL_VERIFICATION
        return self.result
