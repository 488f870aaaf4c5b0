# ------------------------------------------------------------------------------
# ComplianceHub
# Module: Compliance applicability rules
# File: backend/logic/applicability.py
# ------------------------------------------------------------------------------

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Mapping, Optional

from backend.logic.due_dates import next_due_date
from backend.logic.records import ComplianceStatus, ComplianceType, Frequency, Priority, RegulatoryBody
from backend.logic.rules_registry import ObligationTemplate, RulesRegistry, _to_decimal, default_registry


@dataclass(frozen=True)
class ComplianceDraft:
    name: str
    category: ComplianceType
    frequency: Frequency
    regulatory_body: RegulatoryBody
    justification: str


def _draft(template: ObligationTemplate, **fmt: str) -> ComplianceDraft:
    return ComplianceDraft(
        name=template.name,
        category=template.category,
        frequency=template.frequency,
        regulatory_body=template.regulatory_body,
        justification=template.justification.format(**fmt) if fmt else template.justification,
    )


def derive_applicable_compliances(
    profile: Mapping[str, Any],
    registry: Optional[RulesRegistry] = None,
) -> List[ComplianceDraft]:
    """
    Map a business profile {annual_turnover, employee_count, state} to the ordered
    list of obligations that apply to it.

    Order: GST (monthly above the turnover threshold, quarterly otherwise), PF + ESI
    when headcount reaches the threshold, state professional tax, then the four
    corporate filings every company owes. Inputs are not range-checked here.
    """
    reg = registry or default_registry()

    turnover = _to_decimal(profile.get("annual_turnover") or 0, field_path="annual_turnover")
    employees = int(profile.get("employee_count") or 0)
    state = str(profile.get("state") or "").upper()

    drafts: List[ComplianceDraft] = []

    # strict: exactly the threshold files quarterly
    if turnover > reg.gst_monthly_turnover:
        drafts.append(_draft(reg.template("gst_monthly")))
    else:
        drafts.append(_draft(reg.template("gst_quarterly")))

    if employees >= reg.labor_headcount:
        drafts.append(_draft(reg.template("pf_monthly")))
        drafts.append(_draft(reg.template("esi_monthly")))

    if state in reg.professional_tax_states:
        drafts.append(_draft(reg.template("professional_tax"), state=state))

    drafts.extend(_draft(t) for t in reg.baseline)
    return drafts


def priority_for(category: ComplianceType) -> Priority:
    return Priority.HIGH if category == ComplianceType.TAX else Priority.MEDIUM


def to_compliance_payload(draft: ComplianceDraft, today: Optional[date] = None) -> Dict[str, Any]:
    """Insertable compliance row (company_id is attached by the finalizer)."""
    return {
        "name": draft.name,
        "description": draft.justification,
        "regulatory_body": draft.regulatory_body.value,
        "type": draft.category.value,
        "frequency": draft.frequency.value,
        "priority": priority_for(draft.category).value,
        "next_due_date": next_due_date(draft.frequency, today).isoformat(),
        "status": ComplianceStatus.PENDING.value,
        "is_active": True,
    }


def materialize(drafts: List[ComplianceDraft], today: Optional[date] = None) -> List[Dict[str, Any]]:
    today = today or date.today()
    return [to_compliance_payload(d, today) for d in drafts]
