# ------------------------------------------------------------------------------
# ComplianceHub
# Module: Domain records (rows crossing the Supabase boundary)
# File: backend/logic/records.py
# ------------------------------------------------------------------------------

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Type, TypeVar

from backend.error_handler import UnknownEnumValueError

E = TypeVar("E", bound=Enum)


# =========================
# Enumerations
# =========================

class Role(str, Enum):
    OWNER = "owner"
    FINANCE_MANAGER = "finance_manager"
    HR_MANAGER = "hr_manager"
    COMPLIANCE_OFFICER = "compliance_officer"
    VIEW_ONLY = "view_only"


class BusinessType(str, Enum):
    MANUFACTURING = "manufacturing"
    SERVICES = "services"
    TRADING = "trading"


class RegulatoryBody(str, Enum):
    MCA = "MCA"
    CBDT = "CBDT"
    CBIC = "CBIC"
    EPFO = "EPFO"
    ESIC = "ESIC"
    STATE = "STATE"


class ComplianceType(str, Enum):
    TAX = "tax"
    CORPORATE = "corporate"
    LABOR = "labor"
    ENVIRONMENT = "environment"


class Frequency(str, Enum):
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    HALF_YEARLY = "half_yearly"
    ANNUAL = "annual"


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ComplianceStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    OVERDUE = "overdue"


class TaskStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class DocumentCategory(str, Enum):
    CERTIFICATE = "certificate"
    RETURN = "return"
    REGISTER = "register"
    CORRESPONDENCE = "correspondence"
    MISC = "misc"


class NotificationType(str, Enum):
    DEADLINE_REMINDER = "deadline_reminder"
    OVERDUE_ALERT = "overdue_alert"
    TASK_ASSIGNED = "task_assigned"
    COMPLETION_REMINDER = "completion_reminder"


STATES: Dict[str, str] = {
    "AP": "Andhra Pradesh",
    "AR": "Arunachal Pradesh",
    "AS": "Assam",
    "BR": "Bihar",
    "CT": "Chhattisgarh",
    "GA": "Goa",
    "GJ": "Gujarat",
    "HR": "Haryana",
    "HP": "Himachal Pradesh",
    "JH": "Jharkhand",
    "KA": "Karnataka",
    "KL": "Kerala",
    "MP": "Madhya Pradesh",
    "MH": "Maharashtra",
    "MN": "Manipur",
    "ML": "Meghalaya",
    "MZ": "Mizoram",
    "NL": "Nagaland",
    "OR": "Odisha",
    "PB": "Punjab",
    "RJ": "Rajasthan",
    "SK": "Sikkim",
    "TN": "Tamil Nadu",
    "TG": "Telangana",
    "TR": "Tripura",
    "UP": "Uttar Pradesh",
    "UT": "Uttarakhand",
    "WB": "West Bengal",
    "DL": "Delhi",
}


# =========================
# Boundary parsing helpers
# =========================

def parse_enum(enum_cls: Type[E], value: Any, field_name: str) -> E:
    """Strict enum parse: unknown values are rejected, never passed through."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        raise UnknownEnumValueError(field_name, value, [m.value for m in enum_cls]) from None


def parse_date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    # timestamps come back as "2024-01-20T00:00:00+00:00"; only the calendar date matters
    return date.fromisoformat(str(value)[:10])


def _required(row: Dict[str, Any], key: str, record: str) -> Any:
    v = row.get(key)
    if v is None or v == "":
        raise ValueError(f"{record} row is missing required field '{key}'")
    return v


# =========================
# Records
# =========================

@dataclass(frozen=True)
class Address:
    line1: str
    city: str
    state: str
    pincode: str
    line2: Optional[str] = None

    @staticmethod
    def from_row(row: Optional[Dict[str, Any]]) -> Optional["Address"]:
        if not row:
            return None
        return Address(
            line1=str(row.get("line1") or ""),
            line2=row.get("line2") or None,
            city=str(row.get("city") or ""),
            state=str(row.get("state") or ""),
            pincode=str(row.get("pincode") or ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "line1": self.line1,
            "line2": self.line2,
            "city": self.city,
            "state": self.state,
            "pincode": self.pincode,
        }


@dataclass
class Company:
    id: str
    name: str
    cin: str
    pan: str
    state: str
    business_type: BusinessType
    annual_turnover: float
    employee_count: int
    incorporation_date: Optional[date] = None
    gstin: Optional[str] = None
    registered_address: Optional[Address] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @staticmethod
    def from_row(row: Dict[str, Any]) -> "Company":
        return Company(
            id=str(_required(row, "id", "Company")),
            name=str(row.get("name") or ""),
            cin=str(row.get("cin") or ""),
            pan=str(row.get("pan") or ""),
            gstin=row.get("gstin") or None,
            state=str(row.get("state") or ""),
            business_type=parse_enum(BusinessType, row.get("business_type"), "business_type"),
            annual_turnover=float(row.get("annual_turnover") or 0),
            employee_count=int(row.get("employee_count") or 0),
            incorporation_date=parse_date(row.get("incorporation_date")),
            registered_address=Address.from_row(row.get("registered_address")),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )


@dataclass
class NotificationPrefs:
    email: bool = True
    sms: bool = False
    in_app: bool = True
    lead_days: List[int] = field(default_factory=lambda: [7, 3, 1])

    @staticmethod
    def from_row(row: Optional[Dict[str, Any]]) -> "NotificationPrefs":
        if not row:
            return NotificationPrefs()
        return NotificationPrefs(
            email=bool(row.get("email", True)),
            sms=bool(row.get("sms", False)),
            in_app=bool(row.get("in_app", True)),
            lead_days=[int(d) for d in (row.get("lead_days") or [])],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"email": self.email, "sms": self.sms, "in_app": self.in_app, "lead_days": list(self.lead_days)}


@dataclass
class Profile:
    id: str
    name: str
    role: Role = Role.VIEW_ONLY
    company_id: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    is_primary: bool = False
    notification_preferences: NotificationPrefs = field(default_factory=NotificationPrefs)
    last_login: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @staticmethod
    def from_row(row: Dict[str, Any]) -> "Profile":
        return Profile(
            id=str(_required(row, "id", "Profile")),
            name=str(row.get("name") or ""),
            role=parse_enum(Role, row.get("role") or Role.VIEW_ONLY.value, "role"),
            company_id=row.get("company_id") or None,
            phone=row.get("phone") or None,
            email=row.get("email") or None,
            is_primary=bool(row.get("is_primary", False)),
            notification_preferences=NotificationPrefs.from_row(row.get("notification_preferences")),
            last_login=row.get("last_login"),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )


@dataclass
class Compliance:
    """An obligation tracked for one company. `type` is the category tag."""
    id: str
    company_id: str
    name: str
    regulatory_body: RegulatoryBody
    type: ComplianceType
    frequency: Frequency
    priority: Priority
    next_due_date: date
    status: ComplianceStatus = ComplianceStatus.PENDING
    description: Optional[str] = None
    last_completed_date: Optional[date] = None
    is_active: bool = True
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @staticmethod
    def from_row(row: Dict[str, Any]) -> "Compliance":
        return Compliance(
            id=str(_required(row, "id", "Compliance")),
            company_id=str(row.get("company_id") or ""),
            name=str(row.get("name") or ""),
            description=row.get("description") or None,
            regulatory_body=parse_enum(RegulatoryBody, row.get("regulatory_body"), "regulatory_body"),
            type=parse_enum(ComplianceType, row.get("type"), "type"),
            frequency=parse_enum(Frequency, row.get("frequency"), "frequency"),
            priority=parse_enum(Priority, row.get("priority"), "priority"),
            next_due_date=parse_date(_required(row, "next_due_date", "Compliance")),
            last_completed_date=parse_date(row.get("last_completed_date")),
            status=parse_enum(ComplianceStatus, row.get("status"), "status"),
            is_active=bool(row.get("is_active", True)),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )


@dataclass
class ChecklistItem:
    id: str
    text: str
    completed: bool = False

    @staticmethod
    def from_row(row: Dict[str, Any]) -> "ChecklistItem":
        return ChecklistItem(id=str(row.get("id")), text=str(row.get("text") or ""), completed=bool(row.get("completed")))


@dataclass
class Task:
    id: str
    compliance_id: str
    title: str
    due_date: date
    status: TaskStatus = TaskStatus.PENDING
    priority: TaskPriority = TaskPriority.MEDIUM
    description: Optional[str] = None
    assigned_to: Optional[str] = None
    checklist: List[ChecklistItem] = field(default_factory=list)
    notes: Optional[str] = None
    completed_at: Optional[str] = None
    completed_by: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    # display-only: name of the parent compliance when the screen joined it in
    compliance_name: Optional[str] = None

    @staticmethod
    def from_row(row: Dict[str, Any]) -> "Task":
        return Task(
            id=str(_required(row, "id", "Task")),
            compliance_id=str(_required(row, "compliance_id", "Task")),
            title=str(row.get("title") or ""),
            description=row.get("description") or None,
            due_date=parse_date(_required(row, "due_date", "Task")),
            assigned_to=row.get("assigned_to") or None,
            status=parse_enum(TaskStatus, row.get("status"), "status"),
            priority=parse_enum(TaskPriority, row.get("priority"), "priority"),
            checklist=[ChecklistItem.from_row(c) for c in (row.get("checklist") or [])],
            notes=row.get("notes") or None,
            completed_at=row.get("completed_at") or None,
            completed_by=row.get("completed_by") or None,
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
            compliance_name=row.get("compliance_name"),
        )


@dataclass
class Document:
    """Metadata only: file_path is an opaque reference, no content is handled."""
    id: str
    company_id: str
    name: str
    file_path: str
    file_type: str
    file_size: int
    category: DocumentCategory = DocumentCategory.MISC
    compliance_id: Optional[str] = None
    description: Optional[str] = None
    is_required: bool = False
    expiry_date: Optional[date] = None
    uploaded_by: Optional[str] = None
    uploaded_at: Optional[str] = None

    @staticmethod
    def from_row(row: Dict[str, Any]) -> "Document":
        return Document(
            id=str(_required(row, "id", "Document")),
            company_id=str(row.get("company_id") or ""),
            compliance_id=row.get("compliance_id") or None,
            name=str(row.get("name") or ""),
            description=row.get("description") or None,
            file_path=str(row.get("file_path") or ""),
            file_type=str(row.get("file_type") or ""),
            file_size=int(row.get("file_size") or 0),
            category=parse_enum(DocumentCategory, row.get("category") or DocumentCategory.MISC.value, "category"),
            is_required=bool(row.get("is_required", False)),
            expiry_date=parse_date(row.get("expiry_date")),
            uploaded_by=row.get("uploaded_by") or None,
            uploaded_at=row.get("uploaded_at"),
        )


@dataclass
class Notification:
    id: str
    user_id: str
    type: NotificationType
    title: str
    message: str
    compliance_id: Optional[str] = None
    task_id: Optional[str] = None
    due_date: Optional[date] = None
    is_read: bool = False
    created_at: Optional[str] = None

    @staticmethod
    def from_row(row: Dict[str, Any]) -> "Notification":
        return Notification(
            id=str(_required(row, "id", "Notification")),
            user_id=str(row.get("user_id") or ""),
            type=parse_enum(NotificationType, row.get("type"), "type"),
            title=str(row.get("title") or ""),
            message=str(row.get("message") or ""),
            compliance_id=row.get("compliance_id") or None,
            task_id=row.get("task_id") or None,
            due_date=parse_date(row.get("due_date")),
            is_read=bool(row.get("is_read", False)),
            created_at=row.get("created_at"),
        )
