# backend/staging.py
"""
Durable staging for onboarding data that has to wait for the account's first sign-in.

One record per account email. `claim()` reads and deletes in a single transaction and
only hands the record to the caller whose DELETE removed the row, so two finalizers
racing on the same account cannot both insert the staged compliances.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, select
from sqlalchemy.engine import Engine

from backend.database.connection import get_engine, make_session_factory
from backend.database.models import Base, PendingOnboarding

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


@dataclass(frozen=True)
class StagedOnboarding:
    id: str
    email: str
    company_id: str
    compliances: List[Dict[str, Any]] = field(default_factory=list)
    phone: Optional[str] = None
    created_at: Optional[datetime] = None

    @staticmethod
    def from_model(row: PendingOnboarding) -> "StagedOnboarding":
        return StagedOnboarding(
            id=row.id,
            email=row.email,
            company_id=row.company_id,
            compliances=[dict(c) for c in (row.compliances or [])],
            phone=row.phone,
            created_at=row.created_at,
        )


class PendingOnboardingStore:
    def __init__(self, engine: Optional[Engine] = None):
        self.engine = engine or get_engine()
        Base.metadata.create_all(bind=self.engine)
        self._sessions = make_session_factory(self.engine)

    def stage(
        self,
        email: str,
        company_id: str,
        compliances: List[Dict[str, Any]],
        phone: Optional[str] = None,
    ) -> StagedOnboarding:
        key = normalize_email(email)
        if not key:
            raise ValueError("An email is required to stage onboarding data")
        with self._sessions.begin() as session:
            # a newer onboarding for the same account replaces the old one
            session.execute(delete(PendingOnboarding).where(PendingOnboarding.email == key))
            row = PendingOnboarding(
                email=key,
                company_id=company_id,
                compliances=list(compliances),
                phone=phone,
            )
            session.add(row)
            session.flush()
            staged = StagedOnboarding.from_model(row)
        logger.info("Staged onboarding %s for company %s (%d compliances)", staged.id, company_id, len(compliances))
        return staged

    def peek(self, email: str) -> Optional[StagedOnboarding]:
        with self._sessions() as session:
            row = session.execute(
                select(PendingOnboarding).where(PendingOnboarding.email == normalize_email(email))
            ).scalar_one_or_none()
            return StagedOnboarding.from_model(row) if row else None

    def claim(self, email: str) -> Optional[StagedOnboarding]:
        """Take ownership of the pending record, removing it from the store."""
        with self._sessions.begin() as session:
            row = session.execute(
                select(PendingOnboarding).where(PendingOnboarding.email == normalize_email(email))
            ).scalar_one_or_none()
            if row is None:
                return None
            staged = StagedOnboarding.from_model(row)
            result = session.execute(delete(PendingOnboarding).where(PendingOnboarding.id == staged.id))
            if result.rowcount != 1:
                logger.info("Pending onboarding %s was claimed by another session", staged.id)
                return None
        return staged

    def restore(self, staged: StagedOnboarding) -> bool:
        """Put a claimed record back. A record staged since the claim takes precedence."""
        with self._sessions.begin() as session:
            existing = session.execute(
                select(PendingOnboarding.id).where(PendingOnboarding.email == staged.email)
            ).first()
            if existing is not None:
                logger.warning("Not restoring onboarding %s: a newer record exists", staged.id)
                return False
            session.add(
                PendingOnboarding(
                    id=staged.id,
                    email=staged.email,
                    company_id=staged.company_id,
                    compliances=list(staged.compliances),
                    phone=staged.phone,
                    created_at=staged.created_at,
                )
            )
        logger.info("Restored pending onboarding %s", staged.id)
        return True

    def discard(self, email: str) -> bool:
        with self._sessions.begin() as session:
            result = session.execute(delete(PendingOnboarding).where(PendingOnboarding.email == normalize_email(email)))
            return result.rowcount > 0
