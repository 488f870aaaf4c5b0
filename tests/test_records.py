# tests/test_records.py
from datetime import date

import pytest

from backend.error_handler import UnknownEnumValueError
from backend.logic.records import (
    STATES,
    Company,
    Compliance,
    ComplianceStatus,
    Notification,
    NotificationPrefs,
    Profile,
    Role,
    Task,
    TaskStatus,
    parse_enum,
)


def test_twenty_nine_states():
    assert len(STATES) == 29
    assert "MH" in STATES and "DL" in STATES


def test_compliance_from_row(make_compliance_row):
    c = Compliance.from_row(make_compliance_row(last_completed_date="2024-01-15"))
    assert c.status == ComplianceStatus.PENDING
    assert c.next_due_date == date(2024, 4, 15)
    assert c.last_completed_date == date(2024, 1, 15)


def test_unknown_enum_value_rejected(make_compliance_row):
    with pytest.raises(UnknownEnumValueError) as exc:
        Compliance.from_row(make_compliance_row(status="archived"))
    assert exc.value.field == "status"
    assert "overdue" in exc.value.allowed


def test_compliance_requires_next_due_date(make_compliance_row):
    with pytest.raises(ValueError, match="next_due_date"):
        Compliance.from_row(make_compliance_row(next_due_date=None))


def test_task_status_is_smaller_enumeration(make_task_row):
    with pytest.raises(UnknownEnumValueError):
        Task.from_row(make_task_row(status="overdue"))
    t = Task.from_row(make_task_row(checklist=[{"id": "x", "text": "Sign", "completed": True}]))
    assert t.status == TaskStatus.PENDING
    assert t.checklist[0].completed


def test_profile_defaults():
    p = Profile.from_row({"id": "u1", "name": "Asha"})
    assert p.role == Role.VIEW_ONLY
    assert p.company_id is None
    assert p.notification_preferences == NotificationPrefs(email=True, sms=False, in_app=True, lead_days=[7, 3, 1])


def test_profile_rejects_unknown_role():
    with pytest.raises(UnknownEnumValueError):
        Profile.from_row({"id": "u1", "name": "Asha", "role": "admin"})


def test_company_from_row_parses_address():
    c = Company.from_row(
        {
            "id": "co-1",
            "name": "Acme",
            "cin": "L99999XX2023PLC123456",
            "pan": "ABCDE1234F",
            "state": "MH",
            "business_type": "trading",
            "annual_turnover": "20000000",
            "employee_count": 15,
            "incorporation_date": "2020-04-01",
            "registered_address": {"line1": "1 Main Rd", "city": "Pune", "state": "MH", "pincode": "411001"},
        }
    )
    assert c.annual_turnover == 20_000_000.0
    assert c.registered_address.city == "Pune"
    assert c.registered_address.line2 is None


def test_notification_from_row():
    n = Notification.from_row({"id": "n1", "user_id": "u1", "type": "overdue_alert", "title": "t", "message": "m"})
    assert not n.is_read
    with pytest.raises(UnknownEnumValueError):
        Notification.from_row({"id": "n1", "user_id": "u1", "type": "digest", "title": "t", "message": "m"})


def test_parse_enum_passthrough():
    assert parse_enum(Role, Role.OWNER, "role") is Role.OWNER
    assert parse_enum(Role, "owner", "role") is Role.OWNER
