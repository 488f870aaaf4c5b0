# backend/analytics_dashboard.py
"""
Dashboard figures for one company, computed from already-fetched lists.
"""
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

from backend.logic.aggregation import is_due_within, is_overdue, open_tasks
from backend.logic.records import Compliance, ComplianceStatus, Task

UPCOMING_LIMIT = 5
DUE_SOON_DAYS = 7


@dataclass
class DashboardStats:
    total: int = 0
    due_this_week: int = 0
    overdue: int = 0
    completed: int = 0
    completion_rate: int = 0
    upcoming: List[Compliance] = field(default_factory=list)
    urgent_tasks: List[Task] = field(default_factory=list)


def compute_dashboard_stats(
    compliances: List[Compliance],
    tasks: List[Task],
    today: Optional[date] = None,
) -> DashboardStats:
    today = today or date.today()
    completed = sum(1 for c in compliances if c.status == ComplianceStatus.COMPLETED)
    total = len(compliances)

    upcoming = sorted(
        (c for c in compliances if c.status != ComplianceStatus.COMPLETED and c.next_due_date >= today),
        key=lambda c: c.next_due_date,
    )[:UPCOMING_LIMIT]
    urgent = sorted(open_tasks(tasks), key=lambda t: t.due_date)[:UPCOMING_LIMIT]

    return DashboardStats(
        total=total,
        due_this_week=sum(1 for c in compliances if is_due_within(c, DUE_SOON_DAYS, today)),
        overdue=sum(1 for c in compliances if is_overdue(c, today)),
        completed=completed,
        completion_rate=round(completed / total * 100) if total else 0,
        upcoming=upcoming,
        urgent_tasks=urgent,
    )
