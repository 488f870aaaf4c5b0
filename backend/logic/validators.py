import re
from typing import Optional

_CIN_RE = re.compile(r"^[LUF]\d{5}[A-Z]{2}\d{4}[A-Z]{3}\d{6}$")
_PAN_RE = re.compile(r"^[A-Z]{5}[0-9]{4}[A-Z]$")
_GSTIN_RE = re.compile(r"^[0-9]{2}[A-Z]{5}[0-9]{4}[A-Z][1-9A-Z]Z[0-9A-Z]$")
_PINCODE_RE = re.compile(r"^\d{6}$")
_PHONE_RE = re.compile(r"^\d{10}$")
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def is_valid_cin(cin: Optional[str]) -> bool:
    """Company registration number, e.g. L99999XX2023PLC123456."""
    return bool(cin) and _CIN_RE.match(cin) is not None


def is_valid_pan(pan: Optional[str]) -> bool:
    return bool(pan) and _PAN_RE.match(pan) is not None


def is_valid_gstin(gstin: Optional[str]) -> bool:
    # optional field: empty passes
    if not gstin:
        return True
    return _GSTIN_RE.match(gstin) is not None


def is_valid_pincode(pincode: Optional[str]) -> bool:
    return bool(pincode) and _PINCODE_RE.match(pincode) is not None


def is_valid_phone(phone: Optional[str]) -> bool:
    return bool(phone) and _PHONE_RE.match(phone) is not None


def is_valid_email(email: Optional[str]) -> bool:
    return bool(email) and _EMAIL_RE.match(email.strip()) is not None
