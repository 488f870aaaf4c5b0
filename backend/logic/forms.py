"""
Form payloads for the onboarding wizard and the record screens.

Each form is built from the raw widget values with `from_dict`, then `validate()`
collects every field error at once and raises FormValidationError. Screens show
`exc.errors[field]` next to the matching widget.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional

from backend.error_handler import FormValidationError
from backend.logic.records import (
    STATES,
    BusinessType,
    ComplianceStatus,
    ComplianceType,
    DocumentCategory,
    Frequency,
    Priority,
    RegulatoryBody,
    TaskPriority,
    TaskStatus,
    parse_date,
)
from backend.logic.validators import (
    is_valid_cin,
    is_valid_email,
    is_valid_gstin,
    is_valid_pan,
    is_valid_phone,
    is_valid_pincode,
)

MIN_PASSWORD_LENGTH = 8


def _text(data: Dict[str, Any], key: str) -> str:
    v = data.get(key)
    return "" if v is None else str(v).strip()


def _decimal(value: Any) -> Optional[Decimal]:
    if value is None or value == "":
        return None
    try:
        return Decimal(str(value).replace(",", "").strip())
    except InvalidOperation:
        return None


def _int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def _date(value: Any) -> Optional[date]:
    try:
        return parse_date(value)
    except ValueError:
        return None


def _raise_if(errors: Dict[str, str]) -> None:
    if errors:
        raise FormValidationError(errors)


def _enum_ok(enum_cls, value: str) -> bool:
    return value in {m.value for m in enum_cls}


# =========================
# Onboarding forms
# =========================

@dataclass
class CompanyInfoForm:
    name: str = ""
    cin: str = ""
    pan: str = ""
    gstin: str = ""

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "CompanyInfoForm":
        return CompanyInfoForm(
            name=_text(data, "name"),
            cin=_text(data, "cin").upper(),
            pan=_text(data, "pan").upper(),
            gstin=_text(data, "gstin").upper(),
        )

    def validate(self) -> "CompanyInfoForm":
        errors: Dict[str, str] = {}
        if not self.name:
            errors["name"] = "Company name is required"
        if not self.cin:
            errors["cin"] = "CIN is required"
        elif not is_valid_cin(self.cin):
            errors["cin"] = "Invalid CIN format"
        if not self.pan:
            errors["pan"] = "PAN is required"
        elif not is_valid_pan(self.pan):
            errors["pan"] = "Invalid PAN format"
        if not is_valid_gstin(self.gstin):
            errors["gstin"] = "Invalid GSTIN format"
        _raise_if(errors)
        return self


@dataclass
class BusinessDetailsForm:
    business_type: str = BusinessType.SERVICES.value
    state: str = ""
    annual_turnover: Optional[Decimal] = None
    employee_count: Optional[int] = None
    incorporation_date: Optional[date] = None
    address_line1: str = ""
    address_line2: str = ""
    city: str = ""
    pincode: str = ""

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "BusinessDetailsForm":
        return BusinessDetailsForm(
            business_type=_text(data, "business_type") or BusinessType.SERVICES.value,
            state=_text(data, "state").upper(),
            annual_turnover=_decimal(data.get("annual_turnover")),
            employee_count=_int(data.get("employee_count")),
            incorporation_date=_date(data.get("incorporation_date")),
            address_line1=_text(data, "address_line1"),
            address_line2=_text(data, "address_line2"),
            city=_text(data, "city"),
            pincode=_text(data, "pincode"),
        )

    def validate(self) -> "BusinessDetailsForm":
        errors: Dict[str, str] = {}
        if not _enum_ok(BusinessType, self.business_type):
            errors["business_type"] = "Select a business type"
        if self.state not in STATES:
            errors["state"] = "Select a state"
        if self.annual_turnover is None:
            errors["annual_turnover"] = "Annual turnover is required"
        elif self.annual_turnover < 0:
            errors["annual_turnover"] = "Annual turnover cannot be negative"
        if self.employee_count is None:
            errors["employee_count"] = "Employee count is required"
        elif self.employee_count < 1:
            errors["employee_count"] = "Employee count must be at least 1"
        if self.incorporation_date is None:
            errors["incorporation_date"] = "Incorporation date is required"
        if not self.address_line1:
            errors["address_line1"] = "Address is required"
        if not self.city:
            errors["city"] = "City is required"
        if not is_valid_pincode(self.pincode):
            errors["pincode"] = "Pincode must be 6 digits"
        _raise_if(errors)
        return self

    def profile_snapshot(self) -> Dict[str, Any]:
        """Input for the applicability rules."""
        return {
            "annual_turnover": self.annual_turnover,
            "employee_count": self.employee_count,
            "state": self.state,
        }

    def address(self) -> Dict[str, Any]:
        return {
            "line1": self.address_line1,
            "line2": self.address_line2 or None,
            "city": self.city,
            "state": self.state,
            "pincode": self.pincode,
        }


@dataclass
class UserAccountForm:
    name: str = ""
    email: str = ""
    phone: str = ""
    password: str = field(default="", repr=False)
    confirm_password: str = field(default="", repr=False)

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "UserAccountForm":
        return UserAccountForm(
            name=_text(data, "name"),
            email=_text(data, "email").lower(),
            phone=_text(data, "phone"),
            # passwords are compared exactly as typed
            password=str(data.get("password") or ""),
            confirm_password=str(data.get("confirm_password") or ""),
        )

    def validate(self) -> "UserAccountForm":
        errors: Dict[str, str] = {}
        if not self.name:
            errors["name"] = "Name is required"
        if not self.email:
            errors["email"] = "Email is required"
        elif not is_valid_email(self.email):
            errors["email"] = "Invalid email address"
        if not is_valid_phone(self.phone):
            errors["phone"] = "Phone must be 10 digits"
        if not self.password:
            errors["password"] = "Password is required"
        elif len(self.password) < MIN_PASSWORD_LENGTH:
            errors["password"] = f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
        if self.password != self.confirm_password:
            errors["confirm_password"] = "Passwords do not match"
        _raise_if(errors)
        return self


@dataclass
class ProfileForm:
    """Editable part of the signed-in user's profile. Phone is optional here."""

    name: str = ""
    phone: str = ""

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "ProfileForm":
        return ProfileForm(name=_text(data, "name"), phone=_text(data, "phone"))

    def validate(self) -> "ProfileForm":
        errors: Dict[str, str] = {}
        if not self.name:
            errors["name"] = "Name is required"
        if self.phone and not is_valid_phone(self.phone):
            errors["phone"] = "Phone must be 10 digits"
        _raise_if(errors)
        return self

    def to_payload(self) -> Dict[str, Any]:
        return {"name": self.name, "phone": self.phone or None}


# =========================
# Record forms
# =========================

@dataclass
class ComplianceForm:
    name: str = ""
    description: str = ""
    regulatory_body: str = RegulatoryBody.MCA.value
    type: str = ComplianceType.CORPORATE.value
    frequency: str = Frequency.MONTHLY.value
    priority: str = Priority.MEDIUM.value
    next_due_date: Optional[date] = None
    status: str = ComplianceStatus.PENDING.value

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "ComplianceForm":
        return ComplianceForm(
            name=_text(data, "name"),
            description=_text(data, "description"),
            regulatory_body=_text(data, "regulatory_body") or RegulatoryBody.MCA.value,
            type=_text(data, "type") or ComplianceType.CORPORATE.value,
            frequency=_text(data, "frequency") or Frequency.MONTHLY.value,
            priority=_text(data, "priority") or Priority.MEDIUM.value,
            next_due_date=_date(data.get("next_due_date")),
            status=_text(data, "status") or ComplianceStatus.PENDING.value,
        )

    def validate(self) -> "ComplianceForm":
        errors: Dict[str, str] = {}
        if not self.name:
            errors["name"] = "Name is required"
        if self.next_due_date is None:
            errors["next_due_date"] = "Next due date is required"
        for key, enum_cls in (
            ("regulatory_body", RegulatoryBody),
            ("type", ComplianceType),
            ("frequency", Frequency),
            ("priority", Priority),
            ("status", ComplianceStatus),
        ):
            if not _enum_ok(enum_cls, getattr(self, key)):
                errors[key] = f"Invalid {key.replace('_', ' ')}"
        _raise_if(errors)
        return self

    def to_payload(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description or None,
            "regulatory_body": self.regulatory_body,
            "type": self.type,
            "frequency": self.frequency,
            "priority": self.priority,
            "next_due_date": self.next_due_date.isoformat() if self.next_due_date else None,
            "status": self.status,
        }


@dataclass
class TaskForm:
    title: str = ""
    description: str = ""
    compliance_id: str = ""
    due_date: Optional[date] = None
    priority: str = TaskPriority.MEDIUM.value
    status: str = TaskStatus.PENDING.value
    notes: str = ""

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "TaskForm":
        return TaskForm(
            title=_text(data, "title"),
            description=_text(data, "description"),
            compliance_id=_text(data, "compliance_id"),
            due_date=_date(data.get("due_date")),
            priority=_text(data, "priority") or TaskPriority.MEDIUM.value,
            status=_text(data, "status") or TaskStatus.PENDING.value,
            notes=_text(data, "notes"),
        )

    def validate(self) -> "TaskForm":
        errors: Dict[str, str] = {}
        if not self.title:
            errors["title"] = "Title is required"
        if not self.compliance_id:
            errors["compliance_id"] = "Select a compliance"
        if self.due_date is None:
            errors["due_date"] = "Due date is required"
        if not _enum_ok(TaskPriority, self.priority):
            errors["priority"] = "Invalid priority"
        if not _enum_ok(TaskStatus, self.status):
            errors["status"] = "Invalid status"
        _raise_if(errors)
        return self

    def to_payload(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description or None,
            "compliance_id": self.compliance_id,
            "due_date": self.due_date.isoformat() if self.due_date else None,
            "priority": self.priority,
            "status": self.status,
            "notes": self.notes or None,
        }


@dataclass
class DocumentForm:
    name: str = ""
    description: str = ""
    file_path: str = ""
    file_type: str = ""
    file_size: Optional[int] = None
    category: str = DocumentCategory.MISC.value
    compliance_id: str = ""
    is_required: bool = False
    expiry_date: Optional[date] = None

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "DocumentForm":
        return DocumentForm(
            name=_text(data, "name"),
            description=_text(data, "description"),
            file_path=_text(data, "file_path"),
            file_type=_text(data, "file_type"),
            file_size=_int(data.get("file_size")),
            category=_text(data, "category") or DocumentCategory.MISC.value,
            compliance_id=_text(data, "compliance_id"),
            is_required=bool(data.get("is_required", False)),
            expiry_date=_date(data.get("expiry_date")),
        )

    def validate(self) -> "DocumentForm":
        errors: Dict[str, str] = {}
        if not self.name:
            errors["name"] = "Name is required"
        if not self.file_path:
            errors["file_path"] = "File reference is required"
        if not self.file_type:
            errors["file_type"] = "File type is required"
        if self.file_size is None or self.file_size < 0:
            errors["file_size"] = "File size must be a whole number of bytes"
        if not _enum_ok(DocumentCategory, self.category):
            errors["category"] = "Invalid category"
        _raise_if(errors)
        return self

    def to_payload(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description or None,
            "file_path": self.file_path,
            "file_type": self.file_type,
            "file_size": self.file_size,
            "category": self.category,
            "compliance_id": self.compliance_id or None,
            "is_required": self.is_required,
            "expiry_date": self.expiry_date.isoformat() if self.expiry_date else None,
        }
