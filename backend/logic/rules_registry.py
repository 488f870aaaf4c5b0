from __future__ import annotations

import json
from dataclasses import dataclass
from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, FrozenSet, Optional, Tuple

from backend.logic.records import ComplianceType, Frequency, RegulatoryBody


class RulesRegistryError(ValueError):
    """Raised when the rules registry is invalid."""


_TEMPLATE_KEYS = ("gst_monthly", "gst_quarterly", "pf_monthly", "esi_monthly", "professional_tax")


def _to_decimal(value: Any, *, field_path: str) -> Decimal:
    """Convert registry numeric values to Decimal safely."""
    if isinstance(value, bool):
        raise RulesRegistryError(f"Invalid numeric value at {field_path}: {value!r}")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, (int, str, float)):
        return Decimal(str(value))
    raise RulesRegistryError(f"Invalid numeric value at {field_path}: {value!r}")


def default_registry_path() -> Path:
    """Default registry file path (JSON) co-located with this module."""
    here = Path(__file__).resolve().parent
    return here / "compliance_rules.json"


@dataclass(frozen=True)
class ObligationTemplate:
    name: str
    category: ComplianceType
    frequency: Frequency
    regulatory_body: RegulatoryBody
    justification: str

    @staticmethod
    def from_dict(data: Dict[str, Any], *, field_path: str) -> "ObligationTemplate":
        if not isinstance(data, dict):
            raise RulesRegistryError(f"Template at {field_path} must be an object.")
        try:
            return ObligationTemplate(
                name=str(data["name"]),
                category=ComplianceType(data["category"]),
                frequency=Frequency(data["frequency"]),
                regulatory_body=RegulatoryBody(data["regulatory_body"]),
                justification=str(data["justification"]),
            )
        except KeyError as e:
            raise RulesRegistryError(f"Template at {field_path} is missing {e.args[0]!r}") from None
        except ValueError as e:
            raise RulesRegistryError(f"Template at {field_path}: {e}") from None


@dataclass(frozen=True)
class RulesRegistry:
    schema_version: str
    jurisdiction: str
    gst_monthly_turnover: Decimal
    labor_headcount: int
    professional_tax_states: FrozenSet[str]
    templates: Dict[str, ObligationTemplate]
    baseline: Tuple[ObligationTemplate, ...]

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "RulesRegistry":
        if not isinstance(data, dict):
            raise RulesRegistryError("Registry must be a JSON object.")

        thresholds = data.get("thresholds") or {}
        if "gst_monthly_turnover" not in thresholds or "labor_headcount" not in thresholds:
            raise RulesRegistryError("Registry thresholds are incomplete.")

        templates_raw = data.get("templates") or {}
        missing = [k for k in _TEMPLATE_KEYS if k not in templates_raw]
        if missing:
            raise RulesRegistryError(f"Registry is missing templates: {', '.join(missing)}")
        templates = {
            k: ObligationTemplate.from_dict(templates_raw[k], field_path=f"templates.{k}")
            for k in _TEMPLATE_KEYS
        }

        baseline = tuple(
            ObligationTemplate.from_dict(t, field_path=f"baseline[{i}]")
            for i, t in enumerate(data.get("baseline") or [])
        )

        return RulesRegistry(
            schema_version=str(data.get("schema_version", "")),
            jurisdiction=str(data.get("jurisdiction", "")),
            gst_monthly_turnover=_to_decimal(thresholds["gst_monthly_turnover"], field_path="thresholds.gst_monthly_turnover"),
            labor_headcount=int(_to_decimal(thresholds["labor_headcount"], field_path="thresholds.labor_headcount")),
            professional_tax_states=frozenset(str(s).upper() for s in data.get("professional_tax_states") or []),
            templates=templates,
            baseline=baseline,
        )

    def template(self, key: str) -> ObligationTemplate:
        try:
            return self.templates[key]
        except KeyError:
            raise RulesRegistryError(f"Unknown template: {key}") from None


def load_rules_registry(path: Optional[str] = None) -> RulesRegistry:
    """Load the registry from disk."""
    p = Path(path) if path else default_registry_path()
    if not p.exists():
        raise RulesRegistryError(f"Rules registry not found: {p}")

    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise RulesRegistryError(f"Rules registry is not valid JSON: {e}") from e

    return RulesRegistry.from_dict(data)


@lru_cache(maxsize=1)
def default_registry() -> RulesRegistry:
    return load_rules_registry()
