# tests/conftest.py
import itertools
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest
from sqlalchemy import create_engine

from backend import audit_logger
from backend.staging import PendingOnboardingStore


# =============================================================================
# In-memory stand-in for the supabase-py client surface the app uses
# =============================================================================

class FakeResponse:
    def __init__(self, data):
        self.data = data


class FakeQuery:
    def __init__(self, db, table, op, payload=None, columns="*"):
        self.db = db
        self.table = table
        self.op = op
        self.payload = payload
        self.columns = columns
        self.filters = []
        self.ordering = None
        self.row_limit = None

    def eq(self, col, val):
        self.filters.append(lambda r: r.get(col) == val)
        return self

    def in_(self, col, vals):
        vals = list(vals)
        self.filters.append(lambda r: r.get(col) in vals)
        return self

    def order(self, col, desc=False):
        self.ordering = (col, desc)
        return self

    def limit(self, n):
        self.row_limit = n
        return self

    def _matches(self, row):
        return all(f(row) for f in self.filters)

    def _project(self, row):
        if self.columns.strip() == "*":
            return dict(row)
        cols = [c.strip() for c in self.columns.split(",")]
        return {c: row.get(c) for c in cols}

    def execute(self):
        self.db.calls.append((self.op, self.table, self.payload))
        failure = self.db.failures.get((self.op, self.table))
        if failure is not None:
            raise failure

        rows = self.db.tables.setdefault(self.table, [])

        if self.op == "select":
            out = [r for r in rows if self._matches(r)]
            if self.ordering:
                col, desc = self.ordering
                out.sort(key=lambda r: (r.get(col) is None, r.get(col) or ""), reverse=desc)
            if self.row_limit:
                out = out[: self.row_limit]
            return FakeResponse([self._project(r) for r in out])

        if self.op == "insert":
            batch = self.payload if isinstance(self.payload, list) else [self.payload]
            created = []
            for p in batch:
                row = dict(p)
                row.setdefault("id", f"{self.table}-{next(self.db.ids)}")
                row.setdefault("created_at", self.db.tick())
                rows.append(row)
                created.append(dict(row))
            return FakeResponse(created)

        if self.op == "update":
            changed = []
            for r in rows:
                if self._matches(r):
                    r.update(self.payload)
                    changed.append(dict(r))
            return FakeResponse(changed)

        if self.op == "delete":
            kept = [r for r in rows if not self._matches(r)]
            gone = [dict(r) for r in rows if self._matches(r)]
            self.db.tables[self.table] = kept
            return FakeResponse(gone)

        raise AssertionError(f"unexpected op {self.op}")


class FakeTable:
    def __init__(self, db, name):
        self.db = db
        self.name = name

    def select(self, columns="*"):
        return FakeQuery(self.db, self.name, "select", columns=columns)

    def insert(self, payload):
        return FakeQuery(self.db, self.name, "insert", payload=payload)

    def update(self, payload):
        return FakeQuery(self.db, self.name, "update", payload=payload)

    def delete(self):
        return FakeQuery(self.db, self.name, "delete")


class FakeSubscription:
    def __init__(self, listeners, cb):
        self._listeners = listeners
        self._cb = cb

    def unsubscribe(self):
        if self._cb in self._listeners:
            self._listeners.remove(self._cb)


class FakeAuth:
    def __init__(self, db):
        self.db = db
        self.users = {}
        self.listeners = []
        self.current = None
        self.require_confirmation = True
        self.sign_up_error = None
        self.sign_up_calls = []

    def _emit(self, event, session):
        for cb in list(self.listeners):
            cb(event, session)

    def on_auth_state_change(self, cb):
        self.listeners.append(cb)
        return FakeSubscription(self.listeners, cb)

    def get_session(self):
        return self.current

    def _session_for(self, user):
        return SimpleNamespace(user=user, access_token=f"token-{user.id}", refresh_token="refresh")

    def sign_up(self, credentials):
        self.sign_up_calls.append(credentials)
        if self.sign_up_error is not None:
            raise self.sign_up_error
        email = credentials["email"]
        if email in self.users:
            raise Exception("User already registered")
        meta = credentials.get("options", {}).get("data", {})
        user = SimpleNamespace(id=f"user-{next(self.db.ids)}", email=email, user_metadata=meta)
        self.users[email] = (credentials["password"], user)
        # what the on-signup database trigger does
        self.db.tables.setdefault("profiles", []).append(
            {
                "id": user.id,
                "name": meta.get("name", ""),
                "email": email,
                "role": "owner",
                "company_id": None,
                "is_primary": False,
                "created_at": self.db.tick(),
            }
        )
        session = None
        if not self.require_confirmation:
            session = self._session_for(user)
            self.current = session
            self._emit("SIGNED_IN", session)
        return SimpleNamespace(user=user, session=session)

    def sign_in_with_password(self, credentials):
        entry = self.users.get(credentials["email"])
        if entry is None or entry[0] != credentials["password"]:
            raise Exception("Invalid login credentials")
        session = self._session_for(entry[1])
        self.current = session
        self._emit("SIGNED_IN", session)
        return SimpleNamespace(user=entry[1], session=session)

    def sign_out(self):
        self.current = None
        self._emit("SIGNED_OUT", None)


class FakeSupabase:
    def __init__(self):
        self.tables = {}
        self.calls = []
        self.failures = {}
        self.ids = itertools.count(1)
        self._clock = datetime(2024, 1, 1, tzinfo=timezone.utc)
        self.auth = FakeAuth(self)

    def tick(self):
        self._clock += timedelta(seconds=1)
        return self._clock.isoformat()

    def table(self, name):
        return FakeTable(self, name)

    def fail(self, op, table, exc=None):
        self.failures[(op, table)] = exc or Exception(f"{op} on {table} refused")

    def writes(self):
        return [c for c in self.calls if c[0] != "select"]


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def fake_supabase():
    return FakeSupabase()


@pytest.fixture
def store(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'staging.db'}")
    yield PendingOnboardingStore(engine)
    engine.dispose()


@pytest.fixture(autouse=True)
def clear_audit_log():
    audit_logger.AUDIT_LOG.clear()
    yield
    audit_logger.AUDIT_LOG.clear()


def compliance_row(**overrides):
    row = {
        "id": "c-1",
        "company_id": "co-1",
        "name": "Board Meetings",
        "description": "Minimum 4 meetings per year required",
        "regulatory_body": "MCA",
        "type": "corporate",
        "frequency": "quarterly",
        "priority": "medium",
        "next_due_date": "2024-04-15",
        "status": "pending",
        "is_active": True,
    }
    row.update(overrides)
    return row


def task_row(**overrides):
    row = {
        "id": "t-1",
        "compliance_id": "c-1",
        "title": "Prepare minutes",
        "due_date": "2024-04-10",
        "status": "pending",
        "priority": "medium",
        "checklist": [],
    }
    row.update(overrides)
    return row


@pytest.fixture
def make_compliance_row():
    return compliance_row


@pytest.fixture
def make_task_row():
    return task_row
