# tests/test_forms.py
from datetime import date
from decimal import Decimal

import pytest

from backend.error_handler import FormValidationError
from backend.logic.forms import (
    BusinessDetailsForm,
    CompanyInfoForm,
    ComplianceForm,
    DocumentForm,
    ProfileForm,
    TaskForm,
    UserAccountForm,
)

BUSINESS = {
    "business_type": "trading",
    "state": "mh",
    "annual_turnover": "2,00,00,000",
    "employee_count": "15",
    "incorporation_date": "2020-04-01",
    "address_line1": "12 MG Road",
    "city": "Pune",
    "pincode": "411001",
}


def _errors(form):
    with pytest.raises(FormValidationError) as exc:
        form.validate()
    return exc.value.errors


def test_company_info_normalizes_case():
    form = CompanyInfoForm.from_dict(
        {"name": " Acme ", "cin": "l99999xx2023plc123456", "pan": "abcde1234f"}
    ).validate()
    assert form.name == "Acme"
    assert form.cin == "L99999XX2023PLC123456"
    assert form.gstin == ""


def test_company_info_collects_every_error():
    errors = _errors(CompanyInfoForm.from_dict({"cin": "bad", "gstin": "nope"}))
    assert set(errors) == {"name", "cin", "pan", "gstin"}
    assert errors["cin"] == "Invalid CIN format"
    assert errors["pan"] == "PAN is required"


def test_business_details_valid():
    form = BusinessDetailsForm.from_dict(BUSINESS).validate()
    assert form.state == "MH"
    assert form.annual_turnover == Decimal("20000000")
    assert form.employee_count == 15
    assert form.profile_snapshot() == {"annual_turnover": Decimal("20000000"), "employee_count": 15, "state": "MH"}
    assert form.address()["line2"] is None


def test_business_details_errors():
    data = dict(BUSINESS, state="ZZ", employee_count="0", annual_turnover="-1", pincode="4110",
                incorporation_date="not-a-date", business_type="retail")
    errors = _errors(BusinessDetailsForm.from_dict(data))
    assert set(errors) == {"state", "employee_count", "annual_turnover", "pincode", "incorporation_date", "business_type"}


def test_business_details_requires_numbers():
    errors = _errors(BusinessDetailsForm.from_dict(dict(BUSINESS, annual_turnover="", employee_count="ten")))
    assert errors["annual_turnover"] == "Annual turnover is required"
    assert errors["employee_count"] == "Employee count is required"


def test_user_account():
    form = UserAccountForm.from_dict(
        {"name": "Asha", "email": " Asha@Acme.IN ", "phone": "9876543210",
         "password": "s3cret-pw", "confirm_password": "s3cret-pw"}
    ).validate()
    assert form.email == "asha@acme.in"
    assert "s3cret" not in repr(form)


def test_user_account_password_rules():
    errors = _errors(UserAccountForm.from_dict(
        {"name": "Asha", "email": "asha@acme.in", "phone": "9876543210", "password": "short", "confirm_password": "other"}
    ))
    assert set(errors) == {"password", "confirm_password"}


def test_compliance_form_payload():
    form = ComplianceForm.from_dict({"name": "TDS Return", "type": "tax", "regulatory_body": "CBDT",
                                     "frequency": "quarterly", "next_due_date": date(2024, 7, 31)}).validate()
    assert form.to_payload() == {
        "name": "TDS Return",
        "description": None,
        "regulatory_body": "CBDT",
        "type": "tax",
        "frequency": "quarterly",
        "priority": "medium",
        "next_due_date": "2024-07-31",
        "status": "pending",
    }


def test_compliance_form_rejects_unknown_enum():
    errors = _errors(ComplianceForm.from_dict({"name": "X", "next_due_date": "2024-01-01", "frequency": "daily"}))
    assert list(errors) == ["frequency"]


def test_task_form():
    errors = _errors(TaskForm.from_dict({"priority": "critical"}))
    assert set(errors) == {"title", "compliance_id", "due_date", "priority"}
    payload = TaskForm.from_dict({"title": "File", "compliance_id": "c-1", "due_date": "2024-02-01"}).validate().to_payload()
    assert payload["status"] == "pending"
    assert payload["notes"] is None


def test_document_form():
    errors = _errors(DocumentForm.from_dict({"name": "Cert", "file_size": "-3"}))
    assert set(errors) == {"file_path", "file_type", "file_size"}
    payload = DocumentForm.from_dict(
        {"name": "Cert", "file_path": "docs/cert.pdf", "file_type": "application/pdf", "file_size": 100}
    ).validate().to_payload()
    assert payload["category"] == "misc"
    assert payload["compliance_id"] is None


def test_profile_form():
    errors = _errors(ProfileForm.from_dict({"name": " ", "phone": "12345"}))
    assert set(errors) == {"name", "phone"}
    payload = ProfileForm.from_dict({"name": " Asha ", "phone": ""}).validate().to_payload()
    assert payload == {"name": "Asha", "phone": None}
