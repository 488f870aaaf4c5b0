# backend/tasks.py
"""
Tasks belong to a compliance, so company-wide lists go through the company's
compliance ids. Completion metadata (completed_at, completed_by) is always written
as a pair: both set when a task becomes completed, both cleared otherwise.
"""
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from backend.audit_logger import log_action
from backend.logic.forms import TaskForm
from backend.logic.records import ChecklistItem, Task, TaskStatus, parse_enum
from backend.repository import Repository

TABLE = "tasks"


def _repo(client) -> Repository[Task]:
    return Repository(client, TABLE, Task)


def completion_fields(status: Any, profile_id: Optional[str], now: Optional[datetime] = None) -> Dict[str, Any]:
    status = parse_enum(TaskStatus, status, "status")
    if status == TaskStatus.COMPLETED:
        now = now or datetime.now(timezone.utc)
        return {"status": status.value, "completed_at": now.isoformat(), "completed_by": profile_id}
    return {"status": status.value, "completed_at": None, "completed_by": None}


# =========================
# Reads
# =========================

def list_tasks_for_company(client, company_id: str) -> List[Task]:
    compliance_rows = Repository(client, "compliances").list_rows("id, name", {"company_id": company_id})
    names = {str(r["id"]): r.get("name") for r in compliance_rows}
    if not names:
        return []
    tasks = _repo(client).list(in_filters={"compliance_id": list(names)}, order_by="due_date")
    for t in tasks:
        t.compliance_name = names.get(t.compliance_id)
    return tasks


def list_tasks_for_compliance(client, compliance_id: str) -> List[Task]:
    return _repo(client).list({"compliance_id": compliance_id}, order_by="due_date")


# =========================
# Writes
# =========================

def create_task(client, form: TaskForm, actor_id: Optional[str] = None, assign_to_self: bool = False) -> Task:
    payload = form.validate().to_payload()
    payload["checklist"] = []
    payload["assigned_to"] = actor_id if assign_to_self else None
    payload.update(completion_fields(payload["status"], actor_id))
    created = _repo(client).create(payload)
    log_action(actor_id, "task_created", {"task_id": created.id, "compliance_id": created.compliance_id})
    return created


def update_task(client, task_id: str, form: TaskForm, actor_id: Optional[str] = None) -> Task:
    payload = form.validate().to_payload()
    payload.update(completion_fields(payload["status"], actor_id))
    updated = _repo(client).update(task_id, payload)
    log_action(actor_id, "task_updated", {"task_id": task_id})
    return updated


def set_task_status(client, task_id: str, status: Any, actor_id: Optional[str] = None) -> Task:
    fields = completion_fields(status, actor_id)
    updated = _repo(client).update(task_id, fields)
    log_action(actor_id, "task_status_changed", {"task_id": task_id, "status": fields["status"]})
    return updated


def start_task(client, task_id: str, actor_id: Optional[str] = None) -> Task:
    return set_task_status(client, task_id, TaskStatus.IN_PROGRESS, actor_id)


def complete_task(client, task_id: str, actor_id: Optional[str] = None) -> Task:
    return set_task_status(client, task_id, TaskStatus.COMPLETED, actor_id)


def _checklist_payload(items: List[ChecklistItem]) -> List[Dict[str, Any]]:
    return [{"id": i.id, "text": i.text, "completed": i.completed} for i in items]


def add_checklist_item(client, task: Task, text: str, actor_id: Optional[str] = None) -> Task:
    text = (text or "").strip()
    if not text:
        raise ValueError("Checklist item text is required")
    items = list(task.checklist) + [ChecklistItem(id=str(uuid.uuid4()), text=text)]
    updated = _repo(client).update(task.id, {"checklist": _checklist_payload(items)})
    log_action(actor_id, "task_updated", {"task_id": task.id, "checklist_items": len(items)})
    return updated


def toggle_checklist_item(client, task: Task, item_id: str, actor_id: Optional[str] = None) -> Task:
    items = [
        ChecklistItem(id=i.id, text=i.text, completed=not i.completed) if i.id == item_id else i
        for i in task.checklist
    ]
    updated = _repo(client).update(task.id, {"checklist": _checklist_payload(items)})
    log_action(actor_id, "task_updated", {"task_id": task.id, "checklist_item": item_id})
    return updated


def delete_task(client, task_id: str, actor_id: Optional[str] = None) -> None:
    _repo(client).delete(task_id)
    log_action(actor_id, "task_deleted", {"task_id": task_id})
