# backend/audit_logger.py
import logging
from collections import deque
from datetime import datetime, timezone
from typing import Deque, Dict, List, Optional

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

logger = logging.getLogger("backend.audit")

# Recent audit entries for the running process (oldest dropped first)
AUDIT_LOG: Deque[Dict] = deque(maxlen=1000)

_configured = False


def configure_logging(level: str = "INFO") -> None:
    """Install one stream handler on the root logger. Safe to call on every Streamlit rerun."""
    global _configured
    if _configured:
        return
    logging.basicConfig(level=getattr(logging, str(level).upper(), logging.INFO), format=LOG_FORMAT)
    _configured = True


def log_action(user_id: Optional[str], action: str, details: Optional[dict] = None) -> Dict:
    entry = {
        "user_id": user_id,
        "action": action,
        "details": details or {},
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    AUDIT_LOG.append(entry)
    logger.info("%s user=%s %s", action, user_id or "-", entry["details"])
    return entry


def get_audit_log(user_id: Optional[str] = None) -> List[Dict]:
    if user_id:
        return [a for a in AUDIT_LOG if a["user_id"] == user_id]
    return list(AUDIT_LOG)
