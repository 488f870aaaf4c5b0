# backend/error_handler.py
"""
Error taxonomy for ComplianceHub.

Validation errors are reported per form field, backend failures wrap whatever the
Supabase client raised, and onboarding failures remember how far the wizard got.
All of them are recovered at the UI boundary via describe_error().
"""
from __future__ import annotations

from typing import Dict, Optional


class ComplianceHubError(Exception):
    """Base class for every error raised by the backend package."""


class ConfigurationError(ComplianceHubError):
    """Raised when a required setting is missing or malformed."""


class FormValidationError(ValueError, ComplianceHubError):
    """Field-level validation failure. `errors` maps field name -> message."""

    def __init__(self, errors: Dict[str, str]):
        self.errors = dict(errors)
        super().__init__("; ".join(f"{k}: {v}" for k, v in self.errors.items()))


class UnknownEnumValueError(ValueError, ComplianceHubError):
    """A backend row carried a value outside its enumeration."""

    def __init__(self, field: str, value: object, allowed):
        self.field = field
        self.value = value
        self.allowed = tuple(allowed)
        super().__init__(f"Unrecognized {field}: {value!r} (expected one of {', '.join(self.allowed)})")


class BackendOperationError(ComplianceHubError):
    """A call against the hosted backend failed."""

    def __init__(self, operation: str, table: Optional[str], message: str):
        self.operation = operation
        self.table = table
        target = f" on {table}" if table else ""
        super().__init__(f"{operation}{target} failed: {message}")


class OnboardingError(ComplianceHubError):
    """
    An onboarding step failed. When the company row was already created,
    orphan_company_id names it: nothing rolls it back.
    """

    def __init__(self, step: str, message: str, orphan_company_id: Optional[str] = None):
        self.step = step
        self.orphan_company_id = orphan_company_id
        super().__init__(message)


def describe_error(exc: BaseException) -> str:
    """User-facing message for any exception that reaches a screen."""
    if isinstance(exc, FormValidationError):
        return "Please fix the highlighted fields: " + ", ".join(exc.errors.keys())
    if isinstance(exc, ComplianceHubError):
        return str(exc)
    return f"{type(exc).__name__}: {exc}"
