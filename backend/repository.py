# backend/repository.py
"""
Thin wrapper over one Supabase (PostgREST) table.

Row-level security decides what the signed-in user may see or change; this class
only shapes the queries and turns client failures into BackendOperationError.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Generic, Iterable, List, Mapping, Optional, Sequence, TypeVar, Union

from backend.error_handler import BackendOperationError

logger = logging.getLogger(__name__)

R = TypeVar("R")
Row = Dict[str, Any]


class Repository(Generic[R]):
    def __init__(self, client: Any, table: str, record_type: Optional[Any] = None):
        self.client = client
        self.table = table
        self.record_type = record_type

    # -------------------------
    # internals
    # -------------------------

    def _execute(self, operation: str, build: Callable[[], Any]) -> List[Row]:
        try:
            resp = build().execute()
        except Exception as e:
            logger.warning("%s on %s failed: %s: %s", operation, self.table, type(e).__name__, e)
            raise BackendOperationError(operation, self.table, str(e)) from e
        return list(resp.data or [])

    def _to_record(self, row: Row) -> Union[R, Row]:
        return self.record_type.from_row(row) if self.record_type else row

    def _select(
        self,
        columns: str,
        filters: Optional[Mapping[str, Any]],
        in_filters: Optional[Mapping[str, Sequence[Any]]],
        order_by: Optional[str],
        descending: bool,
        limit: Optional[int],
    ):
        q = self.client.table(self.table).select(columns)
        for col, val in (filters or {}).items():
            q = q.eq(col, val)
        for col, vals in (in_filters or {}).items():
            q = q.in_(col, list(vals))
        if order_by:
            q = q.order(order_by, desc=descending)
        if limit:
            q = q.limit(limit)
        return q

    # -------------------------
    # reads
    # -------------------------

    def list_rows(
        self,
        columns: str = "*",
        filters: Optional[Mapping[str, Any]] = None,
        in_filters: Optional[Mapping[str, Sequence[Any]]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[Row]:
        # PostgREST rejects an empty in.() list; nothing can match anyway
        if in_filters and any(len(list(v)) == 0 for v in in_filters.values()):
            return []
        return self._execute(
            "select",
            lambda: self._select(columns, filters, in_filters, order_by, descending, limit),
        )

    def list(
        self,
        filters: Optional[Mapping[str, Any]] = None,
        in_filters: Optional[Mapping[str, Sequence[Any]]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[R]:
        rows = self.list_rows("*", filters, in_filters, order_by, descending, limit)
        return [self._to_record(r) for r in rows]

    def get(self, record_id: str) -> Optional[R]:
        rows = self.list_rows("*", {"id": record_id}, limit=1)
        return self._to_record(rows[0]) if rows else None

    # -------------------------
    # writes
    # -------------------------

    def create(self, payload: Mapping[str, Any]) -> R:
        rows = self._execute("insert", lambda: self.client.table(self.table).insert(dict(payload)))
        if not rows:
            raise BackendOperationError("insert", self.table, "insert returned no rows")
        return self._to_record(rows[0])

    def create_many(self, payloads: Iterable[Mapping[str, Any]]) -> List[R]:
        batch = [dict(p) for p in payloads]
        if not batch:
            return []
        rows = self._execute("insert", lambda: self.client.table(self.table).insert(batch))
        return [self._to_record(r) for r in rows]

    def update(self, record_id: str, payload: Mapping[str, Any]) -> R:
        rows = self._execute(
            "update",
            lambda: self.client.table(self.table).update(dict(payload)).eq("id", record_id),
        )
        if not rows:
            # RLS hides rows the user may not touch, so this also covers "not allowed"
            raise BackendOperationError("update", self.table, f"no row with id {record_id} was updated")
        return self._to_record(rows[0])

    def delete(self, record_id: str) -> None:
        self._execute("delete", lambda: self.client.table(self.table).delete().eq("id", record_id))

    def update_where(self, filters: Mapping[str, Any], payload: Mapping[str, Any]) -> List[R]:
        def build():
            q = self.client.table(self.table).update(dict(payload))
            for col, val in filters.items():
                q = q.eq(col, val)
            return q

        return [self._to_record(r) for r in self._execute("update", build)]
