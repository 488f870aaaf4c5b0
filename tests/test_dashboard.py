# tests/test_dashboard.py
from datetime import date

from backend.analytics_dashboard import UPCOMING_LIMIT, compute_dashboard_stats
from backend.logic.records import Compliance, Task
from backend.reporting import ReportingEngine

TODAY = date(2024, 5, 1)


def _compliances(make_compliance_row):
    rows = [
        make_compliance_row(id="overdue", next_due_date="2024-04-20", type="tax"),
        make_compliance_row(id="soon", next_due_date="2024-05-03", type="tax"),
        make_compliance_row(id="later", next_due_date="2024-06-30"),
        make_compliance_row(id="done", next_due_date="2024-05-02", status="completed", type="labor"),
    ]
    return [Compliance.from_row(r) for r in rows]


def test_empty_dashboard():
    stats = compute_dashboard_stats([], [], TODAY)
    assert stats.total == 0
    assert stats.completion_rate == 0
    assert stats.upcoming == []


def test_dashboard_stats(make_compliance_row, make_task_row):
    tasks = [
        Task.from_row(make_task_row(id="t-done", status="completed", due_date="2024-01-01")),
        Task.from_row(make_task_row(id="t-b", due_date="2024-05-10")),
        Task.from_row(make_task_row(id="t-a", status="in_progress", due_date="2024-05-05")),
    ]
    stats = compute_dashboard_stats(_compliances(make_compliance_row), tasks, TODAY)

    assert stats.total == 4
    assert stats.completed == 1
    assert stats.completion_rate == 25
    assert stats.overdue == 1
    assert stats.due_this_week == 1
    assert [c.id for c in stats.upcoming] == ["soon", "later"]
    assert [t.id for t in stats.urgent_tasks] == ["t-a", "t-b"]


def test_upcoming_is_capped(make_compliance_row):
    items = [Compliance.from_row(make_compliance_row(id=str(d), next_due_date=f"2024-05-{d:02d}")) for d in range(2, 12)]
    stats = compute_dashboard_stats(items, [], TODAY)
    assert len(stats.upcoming) == UPCOMING_LIMIT
    assert stats.upcoming[0].id == "2"


def test_report_frames(make_compliance_row, make_task_row):
    tasks = [Task.from_row(make_task_row(id="1")), Task.from_row(make_task_row(id="2", status="completed"))]
    engine = ReportingEngine(_compliances(make_compliance_row), tasks)

    by_type = engine.compliances_by_type()
    assert list(by_type.columns) == ["type", "count"]
    assert by_type.values.tolist() == [["tax", 2], ["corporate", 1], ["labor", 1]]
    assert engine.tasks_by_status().values.tolist() == [["pending", 1], ["completed", 1]]
    assert set(engine.all_reports()) == {"Compliances by type", "Compliances by status", "Tasks by status"}


def test_calendar_frame_marks_overdue_for_display(make_compliance_row):
    compliances = _compliances(make_compliance_row)
    frame = ReportingEngine(compliances, []).calendar_frame(TODAY)
    assert frame["date"].tolist() == [date(2024, 4, 20), date(2024, 5, 2), date(2024, 5, 3), date(2024, 6, 30)]
    assert frame["status"].tolist() == ["overdue", "completed", "pending", "pending"]
    assert compliances[0].status.value == "pending"


def test_calendar_frame_empty():
    frame = ReportingEngine([], []).calendar_frame(TODAY)
    assert frame.empty
    assert list(frame.columns) == ["date", "name", "regulatory_body", "status"]
