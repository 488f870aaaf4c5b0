# backend/finalizer.py
"""
Links a freshly authenticated account to the company it onboarded.

Runs on every session establishment. Without a staged record it does nothing,
so repeated runs are harmless; with one, the record is claimed first so only one
concurrent run ever writes.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from backend.audit_logger import log_action
from backend.logic.records import Profile
from backend.repository import Repository
from backend.staging import PendingOnboardingStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FinalizeResult:
    company_id: str
    compliances_inserted: int


def finalize_pending_onboarding(
    client,
    store: PendingOnboardingStore,
    user_id: str,
    email: Optional[str],
) -> Optional[FinalizeResult]:
    if not email:
        return None
    staged = store.claim(email)
    if staged is None:
        return None

    try:
        Repository(client, "profiles", Profile).update(
            user_id,
            {"company_id": staged.company_id, "phone": staged.phone, "is_primary": True},
        )
        inserted = []
        if staged.compliances:
            inserted = Repository(client, "compliances").create_many(
                {**c, "company_id": staged.company_id} for c in staged.compliances
            )
    except Exception:
        logger.exception("Finalizing onboarding %s failed; putting it back", staged.id)
        store.restore(staged)
        raise

    log_action(
        user_id,
        "onboarding_finalized",
        {"company_id": staged.company_id, "compliances": len(inserted)},
    )
    return FinalizeResult(company_id=staged.company_id, compliances_inserted=len(inserted))
