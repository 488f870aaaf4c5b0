# ------------------------------------------------------------------------------
# ComplianceHub
# Module: Database Models (ORM)
# File: backend/database/models.py
# ------------------------------------------------------------------------------

from sqlalchemy import Column, String, DateTime, JSON
from sqlalchemy.orm import declarative_base
import uuid
from datetime import datetime, timezone

Base = declarative_base()


class PendingOnboarding(Base):
    """
    Onboarding data waiting for the new account's first authenticated session.
    The compliances cannot be inserted into Supabase until a profile exists.
    """
    __tablename__ = 'pending_onboarding'

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    # lower-cased account email; one pending record per account
    email = Column(String, unique=True, nullable=False, index=True)
    company_id = Column(String, nullable=False)
    compliances = Column(JSON, nullable=False, default=list)  # insertable payloads, no company_id yet
    phone = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
