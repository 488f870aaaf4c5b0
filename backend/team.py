# backend/team.py
from typing import List

from backend.logic.records import Profile
from backend.repository import Repository


def list_team(client, company_id: str) -> List[Profile]:
    """Company members in the order they joined."""
    return Repository(client, "profiles", Profile).list({"company_id": company_id}, order_by="created_at")
