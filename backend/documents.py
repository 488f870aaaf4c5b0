# backend/documents.py
from typing import List, Optional

from backend.audit_logger import log_action
from backend.logic.forms import DocumentForm
from backend.logic.records import Document
from backend.repository import Repository

TABLE = "documents"


def _repo(client) -> Repository:
    return Repository(client, TABLE, Document)


def list_documents(client, company_id: str) -> List[Document]:
    """Newest upload first."""
    return _repo(client).list({"company_id": company_id}, order_by="uploaded_at", descending=True)


def list_documents_for_compliance(client, compliance_id: str) -> List[Document]:
    return _repo(client).list({"compliance_id": compliance_id}, order_by="uploaded_at", descending=True)


def create_document(client, company_id: str, form: DocumentForm, uploader_id: Optional[str]) -> Document:
    payload = form.validate().to_payload()
    payload["company_id"] = company_id
    payload["uploaded_by"] = uploader_id
    created = _repo(client).create(payload)
    log_action(uploader_id, "document_created", {"document_id": created.id, "name": created.name})
    return created


def update_document(client, document_id: str, form: DocumentForm, actor_id: Optional[str] = None) -> Document:
    updated = _repo(client).update(document_id, form.validate().to_payload())
    log_action(actor_id, "document_updated", {"document_id": document_id})
    return updated


def delete_document(client, document_id: str, actor_id: Optional[str] = None) -> None:
    _repo(client).delete(document_id)
    log_action(actor_id, "document_deleted", {"document_id": document_id})
