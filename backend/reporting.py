from datetime import date
from typing import Dict, List, Optional

import pandas as pd

from backend.logic.aggregation import count_by, display_status, group_by_date
from backend.logic.records import Compliance, Task


def counts_frame(pairs, label: str) -> pd.DataFrame:
    return pd.DataFrame(pairs, columns=[label, "count"])


class ReportingEngine:
    def __init__(self, compliances: List[Compliance], tasks: List[Task]):
        self.compliances = compliances
        self.tasks = tasks

    def compliances_by_type(self) -> pd.DataFrame:
        return counts_frame(count_by(self.compliances, "type"), "type")

    def compliances_by_status(self) -> pd.DataFrame:
        return counts_frame(count_by(self.compliances, "status"), "status")

    def tasks_by_status(self) -> pd.DataFrame:
        return counts_frame(count_by(self.tasks, "status"), "status")

    def all_reports(self) -> Dict[str, pd.DataFrame]:
        return {
            "Compliances by type": self.compliances_by_type(),
            "Compliances by status": self.compliances_by_status(),
            "Tasks by status": self.tasks_by_status(),
        }

    def calendar_frame(self, today: Optional[date] = None) -> pd.DataFrame:
        """One row per compliance, grouped and ordered by due date."""
        rows = []
        for due, items in group_by_date(self.compliances):
            for c in items:
                rows.append(
                    {
                        "date": due,
                        "name": c.name,
                        "regulatory_body": c.regulatory_body.value,
                        "status": display_status(c, today).value,
                    }
                )
        return pd.DataFrame(rows, columns=["date", "name", "regulatory_body", "status"])
