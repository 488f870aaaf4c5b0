"""
Grouping and filtering over lists already fetched from Supabase.

Everything here is a single pass over small in-memory lists; none of it writes back.
"""
from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple, TypeVar, Union

from backend.logic.records import Compliance, ComplianceStatus, Document, Task, TaskStatus

T = TypeVar("T")

ALL = "all"

Selector = Union[str, Callable[[Any], Any]]


def _select(item: Any, selector: Selector) -> Any:
    if callable(selector):
        v = selector(item)
    elif isinstance(item, dict):
        v = item.get(selector)
    else:
        v = getattr(item, selector)
    return v.value if isinstance(v, Enum) else v


def _calendar_date(v: Any) -> date:
    if isinstance(v, datetime):
        return v.date()
    if isinstance(v, date):
        return v
    return date.fromisoformat(str(v)[:10])


def group_by_date(
    items: Iterable[T],
    key: Selector = "next_due_date",
) -> List[Tuple[date, List[T]]]:
    """(date, items) pairs sorted by date; items keep their input order."""
    groups: Dict[date, List[T]] = {}
    for item in items:
        groups.setdefault(_calendar_date(_select(item, key)), []).append(item)
    return sorted(groups.items(), key=lambda kv: kv[0])


def count_by(items: Iterable[Any], field: Selector) -> List[Tuple[Any, int]]:
    """(value, count) pairs in order of first occurrence."""
    counts: Dict[Any, int] = {}
    for item in items:
        v = _select(item, field)
        counts[v] = counts.get(v, 0) + 1
    return list(counts.items())


# =========================
# Display status
# =========================

def is_overdue(compliance: Compliance, today: Optional[date] = None) -> bool:
    today = today or date.today()
    return compliance.next_due_date < today and compliance.status != ComplianceStatus.COMPLETED


def display_status(compliance: Compliance, today: Optional[date] = None) -> ComplianceStatus:
    # computed for screens only; the stored status is left alone
    if is_overdue(compliance, today):
        return ComplianceStatus.OVERDUE
    return compliance.status


def is_due_within(compliance: Compliance, days: int, today: Optional[date] = None) -> bool:
    today = today or date.today()
    if compliance.status == ComplianceStatus.COMPLETED:
        return False
    return 0 <= (compliance.next_due_date - today).days <= days


# =========================
# Filters
# =========================

def filter_compliances(
    items: Iterable[Compliance],
    search: str = "",
    status: str = ALL,
    type: str = ALL,
    regulatory_body: str = ALL,
) -> List[Compliance]:
    needle = (search or "").strip().lower()
    out = []
    for c in items:
        if needle and needle not in c.name.lower() and needle not in (c.description or "").lower():
            continue
        if status != ALL and c.status.value != status:
            continue
        if type != ALL and c.type.value != type:
            continue
        if regulatory_body != ALL and c.regulatory_body.value != regulatory_body:
            continue
        out.append(c)
    return out


def filter_tasks(items: Iterable[Task], status: str = ALL) -> List[Task]:
    if status == ALL:
        return list(items)
    return [t for t in items if t.status.value == status]


def open_tasks(items: Iterable[Task]) -> List[Task]:
    return [t for t in items if t.status != TaskStatus.COMPLETED]


def search_documents(items: Iterable[Document], search: str = "") -> List[Document]:
    needle = (search or "").strip().lower()
    if not needle:
        return list(items)
    return [d for d in items if needle in d.name.lower() or needle in (d.description or "").lower()]


def size_in_kb(size_bytes: int) -> str:
    return f"{size_bytes / 1024:.1f} KB"
