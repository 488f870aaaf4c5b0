# backend/compliances.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from backend.audit_logger import log_action
from backend.documents import list_documents_for_compliance
from backend.logic.forms import ComplianceForm
from backend.logic.records import Compliance, ComplianceStatus, Document, Task
from backend.repository import Repository
from backend.tasks import list_tasks_for_compliance

TABLE = "compliances"


def _repo(client) -> Repository[Compliance]:
    return Repository(client, TABLE, Compliance)


def list_compliances(client, company_id: str) -> List[Compliance]:
    return _repo(client).list({"company_id": company_id}, order_by="next_due_date")


def compliance_options(client, company_id: str) -> List[Tuple[str, str]]:
    """(id, name) pairs for select boxes, by name."""
    rows = _repo(client).list_rows("id, name", {"company_id": company_id}, order_by="name")
    return [(str(r["id"]), str(r.get("name") or "")) for r in rows]


def get_compliance(client, compliance_id: str) -> Optional[Compliance]:
    return _repo(client).get(compliance_id)


def create_compliance(client, company_id: str, form: ComplianceForm, actor_id: Optional[str] = None) -> Compliance:
    payload = form.validate().to_payload()
    payload["company_id"] = company_id
    payload["status"] = payload.get("status") or ComplianceStatus.PENDING.value
    payload["is_active"] = True
    created = _repo(client).create(payload)
    log_action(actor_id, "compliance_created", {"compliance_id": created.id, "name": created.name})
    return created


def update_compliance(client, compliance_id: str, form: ComplianceForm, actor_id: Optional[str] = None) -> Compliance:
    updated = _repo(client).update(compliance_id, form.validate().to_payload())
    log_action(actor_id, "compliance_updated", {"compliance_id": compliance_id})
    return updated


def delete_compliance(client, compliance_id: str, actor_id: Optional[str] = None) -> None:
    _repo(client).delete(compliance_id)
    log_action(actor_id, "compliance_deleted", {"compliance_id": compliance_id})


@dataclass
class ComplianceDetail:
    compliance: Compliance
    tasks: List[Task] = field(default_factory=list)
    documents: List[Document] = field(default_factory=list)


def get_compliance_detail(client, compliance_id: str) -> Optional[ComplianceDetail]:
    compliance = get_compliance(client, compliance_id)
    if compliance is None:
        return None
    return ComplianceDetail(
        compliance=compliance,
        tasks=list_tasks_for_compliance(client, compliance_id),
        documents=list_documents_for_compliance(client, compliance_id),
    )
