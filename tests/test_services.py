# tests/test_services.py
from datetime import date, datetime, timezone

import pytest

from backend.audit_logger import get_audit_log
from backend.company import company_payload, get_company, update_company
from backend.compliances import (
    compliance_options,
    create_compliance,
    delete_compliance,
    get_compliance_detail,
    list_compliances,
    update_compliance,
)
from backend.documents import create_document, delete_document, list_documents, update_document
from backend.error_handler import BackendOperationError, FormValidationError
from backend.logic.forms import BusinessDetailsForm, CompanyInfoForm, ComplianceForm, DocumentForm, TaskForm
from backend.logic.records import NotificationPrefs, Profile, Role, TaskStatus
from backend.notifications import (
    get_user_notifications,
    mark_all_read,
    mark_read,
    save_notification_preferences,
    toggle_lead_day,
    unread_count,
)
from backend.rbac import EDIT_COMPANY, MANAGE_RECORDS, VIEW_RECORDS, can_manage, get_user_role, has_permission
from backend.repository import Repository
from backend.tasks import (
    add_checklist_item,
    complete_task,
    completion_fields,
    create_task,
    list_tasks_for_company,
    list_tasks_for_compliance,
    set_task_status,
    start_task,
    toggle_checklist_item,
    update_task,
)
from backend.team import list_team


# -------------------------
# repository
# -------------------------

def test_repository_wraps_client_errors(fake_supabase):
    fake_supabase.fail("select", "compliances", RuntimeError("JWT expired"))
    with pytest.raises(BackendOperationError) as exc:
        Repository(fake_supabase, "compliances").list_rows()
    assert exc.value.operation == "select"
    assert exc.value.table == "compliances"
    assert isinstance(exc.value.__cause__, RuntimeError)


def test_repository_empty_in_filter_skips_query(fake_supabase):
    assert Repository(fake_supabase, "tasks").list_rows(in_filters={"compliance_id": []}) == []
    assert fake_supabase.calls == []


def test_repository_update_missing_row(fake_supabase):
    with pytest.raises(BackendOperationError):
        Repository(fake_supabase, "tasks").update("nope", {"title": "x"})


def test_repository_create_many_empty(fake_supabase):
    assert Repository(fake_supabase, "compliances").create_many([]) == []
    assert fake_supabase.calls == []


# -------------------------
# compliances
# -------------------------

def _form(**kw):
    data = {"name": "TDS Return", "type": "tax", "regulatory_body": "CBDT", "next_due_date": "2024-07-31"}
    data.update(kw)
    return ComplianceForm.from_dict(data)


def test_compliance_crud(fake_supabase):
    created = create_compliance(fake_supabase, "co-1", _form(), actor_id="u1")
    create_compliance(fake_supabase, "co-1", _form(name="Annual Return", next_due_date="2024-05-30"), actor_id="u1")
    create_compliance(fake_supabase, "co-2", _form(name="Other company"), actor_id="u2")

    listed = list_compliances(fake_supabase, "co-1")
    assert [c.name for c in listed] == ["Annual Return", "TDS Return"]
    assert created.is_active
    assert compliance_options(fake_supabase, "co-1") == [
        (listed[0].id, "Annual Return"),
        (created.id, "TDS Return"),
    ]

    updated = update_compliance(fake_supabase, created.id, _form(status="completed"), actor_id="u1")
    assert updated.status.value == "completed"

    delete_compliance(fake_supabase, created.id, actor_id="u1")
    assert [c.name for c in list_compliances(fake_supabase, "co-1")] == ["Annual Return"]
    assert [a["action"] for a in get_audit_log("u1")][-1] == "compliance_deleted"


def test_invalid_compliance_is_not_written(fake_supabase):
    with pytest.raises(FormValidationError):
        create_compliance(fake_supabase, "co-1", _form(name=""))
    assert fake_supabase.writes() == []


def test_compliance_detail(fake_supabase, make_compliance_row, make_task_row):
    fake_supabase.tables["compliances"] = [make_compliance_row(id="c-1")]
    fake_supabase.tables["tasks"] = [make_task_row(id="t-1"), make_task_row(id="t-2", compliance_id="c-2")]
    fake_supabase.tables["documents"] = [
        {"id": "d-1", "compliance_id": "c-1", "name": "Minutes", "file_path": "p", "file_type": "pdf", "file_size": 1}
    ]
    detail = get_compliance_detail(fake_supabase, "c-1")
    assert [t.id for t in detail.tasks] == ["t-1"]
    assert [d.id for d in detail.documents] == ["d-1"]
    assert get_compliance_detail(fake_supabase, "missing") is None


def test_compliance_detail_reflects_added_task_and_document(fake_supabase):
    compliance = create_compliance(fake_supabase, "co-1", _form(), actor_id="u1")
    task = create_task(
        fake_supabase,
        TaskForm.from_dict({"title": "Collect challans", "compliance_id": compliance.id, "due_date": "2024-07-20"}),
        actor_id="u1",
    )
    create_document(
        fake_supabase,
        "co-1",
        DocumentForm.from_dict({"name": "Form 26Q", "file_path": "docs/26q.pdf", "file_type": "application/pdf",
                                "file_size": 512, "compliance_id": compliance.id}),
        uploader_id="u1",
    )
    detail = get_compliance_detail(fake_supabase, compliance.id)
    assert [(t.title, t.status) for t in detail.tasks] == [("Collect challans", TaskStatus.PENDING)]
    assert [d.name for d in detail.documents] == ["Form 26Q"]

    complete_task(fake_supabase, task.id, "u1")
    (done,) = get_compliance_detail(fake_supabase, compliance.id).tasks
    assert done.status == TaskStatus.COMPLETED
    assert done.completed_by == "u1"


# -------------------------
# tasks
# -------------------------

def test_completion_fields_are_paired():
    now = datetime(2024, 3, 1, tzinfo=timezone.utc)
    assert completion_fields("completed", "u1", now) == {
        "status": "completed",
        "completed_at": "2024-03-01T00:00:00+00:00",
        "completed_by": "u1",
    }
    assert completion_fields(TaskStatus.PENDING, "u1") == {"status": "pending", "completed_at": None, "completed_by": None}


def test_task_lifecycle(fake_supabase):
    form = TaskForm.from_dict({"title": "Collect challans", "compliance_id": "c-1", "due_date": "2024-02-05"})
    task = create_task(fake_supabase, form, actor_id="u1", assign_to_self=True)
    assert task.assigned_to == "u1"
    assert task.completed_at is None

    assert start_task(fake_supabase, task.id, "u1").status == TaskStatus.IN_PROGRESS
    done = complete_task(fake_supabase, task.id, "u1")
    assert done.completed_by == "u1" and done.completed_at

    reopened = set_task_status(fake_supabase, task.id, "pending", "u1")
    assert reopened.completed_at is None and reopened.completed_by is None


def test_update_task_writes_notes_and_completion_pair(fake_supabase):
    base = {"title": "Collect challans", "compliance_id": "c-1", "due_date": "2024-02-05"}
    task = create_task(fake_supabase, TaskForm.from_dict(base), actor_id="u1")

    done = update_task(
        fake_supabase, task.id, TaskForm.from_dict(dict(base, status="completed", notes=" Paid via net banking ")), "u2"
    )
    assert done.notes == "Paid via net banking"
    assert done.completed_by == "u2" and done.completed_at

    reopened = update_task(fake_supabase, task.id, TaskForm.from_dict(dict(base, title="Recheck challans")), "u2")
    assert reopened.title == "Recheck challans"
    assert reopened.notes is None
    assert reopened.completed_at is None and reopened.completed_by is None

    with pytest.raises(FormValidationError):
        update_task(fake_supabase, task.id, TaskForm.from_dict(dict(base, title="")), "u2")
    assert fake_supabase.tables["tasks"][0]["title"] == "Recheck challans"


def test_create_task_completed_records_completion(fake_supabase):
    form = TaskForm.from_dict(
        {"title": "Filed", "compliance_id": "c-1", "due_date": "2024-02-05", "status": "completed"}
    )
    task = create_task(fake_supabase, form, actor_id="u1")
    assert task.assigned_to is None
    assert task.completed_by == "u1"


def test_checklist(fake_supabase):
    form = TaskForm.from_dict({"title": "Board pack", "compliance_id": "c-1", "due_date": "2024-02-05"})
    task = create_task(fake_supabase, form, actor_id="u1")
    task = add_checklist_item(fake_supabase, task, " Draft agenda ")
    task = add_checklist_item(fake_supabase, task, "Circulate notice")
    assert [i.text for i in task.checklist] == ["Draft agenda", "Circulate notice"]

    task = toggle_checklist_item(fake_supabase, task, task.checklist[0].id)
    assert [i.completed for i in task.checklist] == [True, False]

    with pytest.raises(ValueError):
        add_checklist_item(fake_supabase, task, "   ")


def test_tasks_for_company_go_through_compliance_ids(fake_supabase, make_compliance_row, make_task_row):
    fake_supabase.tables["compliances"] = [
        make_compliance_row(id="c-1", name="GST Return"),
        make_compliance_row(id="c-2", company_id="co-2"),
    ]
    fake_supabase.tables["tasks"] = [
        make_task_row(id="t-late", due_date="2024-05-01"),
        make_task_row(id="t-early", due_date="2024-01-01"),
        make_task_row(id="t-other", compliance_id="c-2"),
    ]
    tasks = list_tasks_for_company(fake_supabase, "co-1")
    assert [t.id for t in tasks] == ["t-early", "t-late"]
    assert {t.compliance_name for t in tasks} == {"GST Return"}
    assert [t.id for t in list_tasks_for_compliance(fake_supabase, "c-2")] == ["t-other"]


def test_tasks_for_company_without_compliances(fake_supabase):
    assert list_tasks_for_company(fake_supabase, "co-1") == []
    assert [c[1] for c in fake_supabase.calls] == ["compliances"]


# -------------------------
# documents
# -------------------------

def test_documents(fake_supabase):
    for name in ("Certificate", "GSTR-3B"):
        create_document(
            fake_supabase,
            "co-1",
            DocumentForm.from_dict({"name": name, "file_path": f"docs/{name}", "file_type": "application/pdf", "file_size": 10}),
            uploader_id="u1",
        )
    for row, ts in zip(fake_supabase.tables["documents"], ("2024-01-01", "2024-02-01")):
        row["uploaded_at"] = ts

    docs = list_documents(fake_supabase, "co-1")
    assert [d.name for d in docs] == ["GSTR-3B", "Certificate"]
    assert docs[0].uploaded_by == "u1"

    renamed = update_document(
        fake_supabase,
        docs[1].id,
        DocumentForm.from_dict({"name": "Incorporation certificate", "file_path": "docs/Certificate",
                                "file_type": "application/pdf", "file_size": "2048", "category": "certificate"}),
        "u1",
    )
    assert renamed.category.value == "certificate"
    assert renamed.file_size == 2048
    assert renamed.expiry_date is None

    renewed = update_document(
        fake_supabase,
        docs[1].id,
        DocumentForm.from_dict({"name": "Incorporation certificate", "file_path": "docs/Certificate",
                                "file_type": "application/pdf", "file_size": 2048, "category": "certificate",
                                "expiry_date": date(2029, 3, 31)}),
        "u1",
    )
    assert renewed.expiry_date == date(2029, 3, 31)
    assert fake_supabase.tables["documents"][0]["expiry_date"] == "2029-03-31"

    delete_document(fake_supabase, docs[0].id, "u1")
    assert [d.name for d in list_documents(fake_supabase, "co-1")] == ["Incorporation certificate"]


# -------------------------
# notifications
# -------------------------

def test_notifications(fake_supabase):
    fake_supabase.tables["notifications"] = [
        {"id": "n1", "user_id": "u1", "type": "deadline_reminder", "title": "a", "message": "m", "is_read": False, "created_at": "2024-01-01"},
        {"id": "n2", "user_id": "u1", "type": "overdue_alert", "title": "b", "message": "m", "is_read": False, "created_at": "2024-01-02"},
        {"id": "n3", "user_id": "u2", "type": "task_assigned", "title": "c", "message": "m", "is_read": False, "created_at": "2024-01-03"},
    ]
    items = get_user_notifications(fake_supabase, "u1")
    assert [n.id for n in items] == ["n2", "n1"]
    assert unread_count(items) == 2

    assert mark_read(fake_supabase, "n1", "u1").is_read
    assert mark_all_read(fake_supabase, "u1") == 1
    assert unread_count(get_user_notifications(fake_supabase, "u1")) == 0
    assert fake_supabase.tables["notifications"][2]["is_read"] is False


def test_toggle_lead_day():
    prefs = NotificationPrefs()
    assert toggle_lead_day(prefs, 3).lead_days == [7, 1]
    assert toggle_lead_day(prefs, 14).lead_days == [14, 7, 3, 1]
    assert prefs.lead_days == [7, 3, 1]


def test_save_notification_preferences(fake_supabase):
    fake_supabase.tables["profiles"] = [{"id": "u1", "name": "Asha", "role": "owner"}]
    prefs = NotificationPrefs(sms=True, lead_days=[14, 7])
    profile = save_notification_preferences(fake_supabase, "u1", prefs)
    assert profile.notification_preferences == prefs

    with pytest.raises(ValueError):
        save_notification_preferences(fake_supabase, "u1", NotificationPrefs(lead_days=[-1]))


# -------------------------
# team, company, rbac
# -------------------------

def test_list_team(fake_supabase):
    fake_supabase.tables["profiles"] = [
        {"id": "u2", "name": "Ravi", "role": "hr_manager", "company_id": "co-1", "created_at": "2024-02-01"},
        {"id": "u1", "name": "Asha", "role": "owner", "company_id": "co-1", "created_at": "2024-01-01"},
        {"id": "u3", "name": "Other", "role": "owner", "company_id": "co-2", "created_at": "2024-01-01"},
    ]
    assert [p.name for p in list_team(fake_supabase, "co-1")] == ["Asha", "Ravi"]


def test_company_update(fake_supabase):
    info = CompanyInfoForm.from_dict({"name": "Acme", "cin": "L99999XX2023PLC123456", "pan": "ABCDE1234F"})
    details = BusinessDetailsForm.from_dict({
        "business_type": "services", "state": "KA", "annual_turnover": "500000", "employee_count": "3",
        "incorporation_date": "2021-01-01", "address_line1": "1 Residency Rd", "city": "Bengaluru", "pincode": "560025",
    })
    payload = company_payload(info, details)
    assert payload["annual_turnover"] == 500000.0
    assert payload["gstin"] is None

    fake_supabase.tables["companies"] = [dict(payload, id="co-1")]
    renamed = CompanyInfoForm.from_dict(dict(name="Acme Services", cin=info.cin, pan=info.pan))
    assert update_company(fake_supabase, "co-1", renamed, details, "u1").name == "Acme Services"
    assert get_company(fake_supabase, "co-1").name == "Acme Services"
    assert get_company(fake_supabase, None) is None


def test_company_update_reports_errors_from_both_forms(fake_supabase):
    fake_supabase.tables["companies"] = [{"id": "co-1", "name": "Acme", "cin": "L99999XX2023PLC123456", "pan": "ABCDE1234F"}]
    info = CompanyInfoForm.from_dict({"name": "Acme", "cin": "BAD-CIN", "pan": "ABCDE1234F"})
    details = BusinessDetailsForm.from_dict({
        "business_type": "services", "state": "KA", "annual_turnover": "500000", "employee_count": "3",
        "incorporation_date": "2021-01-01", "address_line1": "1 Residency Rd", "city": "Bengaluru", "pincode": "5600",
    })
    with pytest.raises(FormValidationError) as exc:
        update_company(fake_supabase, "co-1", info, details, "u1")
    assert set(exc.value.errors) == {"cin", "pincode"}
    assert fake_supabase.writes() == []


def test_rbac():
    owner = Profile(id="u1", name="Asha", role=Role.OWNER)
    officer = Profile(id="u2", name="Ravi", role=Role.COMPLIANCE_OFFICER)
    assert can_manage(owner)
    assert has_permission(owner, EDIT_COMPANY)
    assert not can_manage(officer)
    assert has_permission(officer, VIEW_RECORDS)
    assert get_user_role(None) == Role.VIEW_ONLY
    assert not has_permission(None, MANAGE_RECORDS)
