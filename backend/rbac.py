# backend/rbac.py
from typing import Dict, List, Optional

from backend.logic.records import Profile, Role

MANAGE_RECORDS = "manage_records"
VIEW_RECORDS = "view_records"
EDIT_COMPANY = "edit_company"

# Define roles and permissions
ROLES: Dict[Role, List[str]] = {
    Role.OWNER: [VIEW_RECORDS, MANAGE_RECORDS, EDIT_COMPANY],
    Role.FINANCE_MANAGER: [VIEW_RECORDS],
    Role.HR_MANAGER: [VIEW_RECORDS],
    Role.COMPLIANCE_OFFICER: [VIEW_RECORDS],
    Role.VIEW_ONLY: [VIEW_RECORDS],
}


def get_user_role(profile: Optional[Profile]) -> Role:
    return profile.role if profile else Role.VIEW_ONLY


def has_permission(profile: Optional[Profile], permission: str) -> bool:
    role = get_user_role(profile)
    return permission in ROLES.get(role, [])


def can_manage(profile: Optional[Profile]) -> bool:
    """Create/edit/delete buttons are shown only to owners."""
    return has_permission(profile, MANAGE_RECORDS)
