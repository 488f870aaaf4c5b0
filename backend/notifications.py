# backend/notifications.py
from typing import Iterable, List, Optional

from backend.audit_logger import log_action
from backend.logic.records import Notification, NotificationPrefs, Profile
from backend.repository import Repository

TABLE = "notifications"


def _repo(client) -> Repository:
    return Repository(client, TABLE, Notification)


def get_user_notifications(client, user_id: str) -> List[Notification]:
    return _repo(client).list({"user_id": user_id}, order_by="created_at", descending=True)


def unread_count(notifications: Iterable[Notification]) -> int:
    return sum(1 for n in notifications if not n.is_read)


def mark_read(client, notification_id: str, user_id: Optional[str] = None) -> Notification:
    updated = _repo(client).update(notification_id, {"is_read": True})
    log_action(user_id, "notification_read", {"notification_id": notification_id})
    return updated


def mark_all_read(client, user_id: str) -> int:
    rows = _repo(client).update_where({"user_id": user_id, "is_read": False}, {"is_read": True})
    log_action(user_id, "notification_read", {"count": len(rows)})
    return len(rows)


def toggle_lead_day(prefs: NotificationPrefs, day: int) -> NotificationPrefs:
    """Add or remove a reminder lead day; days stay sorted, furthest first."""
    days = set(prefs.lead_days)
    if day in days:
        days.discard(day)
    else:
        days.add(day)
    return NotificationPrefs(
        email=prefs.email,
        sms=prefs.sms,
        in_app=prefs.in_app,
        lead_days=sorted(days, reverse=True),
    )


def save_notification_preferences(client, profile_id: str, prefs: NotificationPrefs) -> Profile:
    if any(d < 0 for d in prefs.lead_days):
        raise ValueError("Lead days cannot be negative")
    updated = Repository(client, "profiles", Profile).update(
        profile_id, {"notification_preferences": prefs.to_dict()}
    )
    log_action(profile_id, "profile_updated", {"notification_preferences": prefs.to_dict()})
    return updated
