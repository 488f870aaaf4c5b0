# backend/company.py
from typing import Any, Dict, Optional

from backend.audit_logger import log_action
from backend.error_handler import FormValidationError
from backend.logic.forms import BusinessDetailsForm, CompanyInfoForm
from backend.logic.records import Company
from backend.repository import Repository

TABLE = "companies"


def _repo(client) -> Repository:
    return Repository(client, TABLE, Company)


def company_payload(info: CompanyInfoForm, details: BusinessDetailsForm) -> Dict[str, Any]:
    return {
        "name": info.name,
        "cin": info.cin,
        "pan": info.pan,
        "gstin": info.gstin or None,
        "state": details.state,
        "business_type": details.business_type,
        # Decimal is not JSON serializable
        "annual_turnover": float(details.annual_turnover or 0),
        "employee_count": details.employee_count,
        "incorporation_date": details.incorporation_date.isoformat() if details.incorporation_date else None,
        "registered_address": details.address(),
    }


def create_company(client, info: CompanyInfoForm, details: BusinessDetailsForm) -> Company:
    """Insert the company row. Allowed before sign-up by the table's insert policy."""
    company = _repo(client).create(company_payload(info, details))
    log_action(None, "company_created", {"company_id": company.id, "name": company.name})
    return company


def get_company(client, company_id: Optional[str]) -> Optional[Company]:
    if not company_id:
        return None
    return _repo(client).get(company_id)


def update_company(
    client,
    company_id: str,
    info: CompanyInfoForm,
    details: BusinessDetailsForm,
    actor_id: Optional[str] = None,
) -> Company:
    errors: Dict[str, str] = {}
    for form in (info, details):
        try:
            form.validate()
        except FormValidationError as e:
            errors.update(e.errors)
    if errors:
        raise FormValidationError(errors)
    company = _repo(client).update(company_id, company_payload(info, details))
    log_action(actor_id, "company_updated", {"company_id": company_id})
    return company
