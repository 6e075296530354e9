"""
Shared pytest fixtures: an in-memory record store, a dispatch function
stand-in and ready-made sessions.
"""

import copy
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple
from uuid import uuid4

import pytest

from innsyn.database.record_store import (
    REQUESTS_TABLE,
    QueryResult,
    RecordStore,
    StoreQuery,
)
from innsyn.exceptions import StoreError
from innsyn.services.request_dispatcher import DispatchResult, RequestDispatcher
from innsyn.services.session_context import SessionContext


class FakeRecordStore(RecordStore):
    """In-memory record store following PostgREST filter semantics"""

    def __init__(self, tables: Optional[Dict[str, List[Dict[str, Any]]]] = None):
        self.tables: Dict[str, List[Dict[str, Any]]] = {
            name: [dict(row) for row in rows] for name, rows in (tables or {}).items()
        }
        self.selects: List[StoreQuery] = []
        self.inserts: List[Tuple[str, Dict[str, Any]]] = []
        self.updates: List[Tuple[str, Dict[str, Any], Dict[str, Any]]] = []
        self._failures: Dict[Tuple[str, str], str] = {}
        self._next_id = 1000
        self._clock = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)

    def fail(self, operation: str, table: str, message: str = "connection refused") -> None:
        self._failures[(operation, table)] = message

    def recover(self, operation: str, table: str) -> None:
        self._failures.pop((operation, table), None)

    def _check(self, operation: str, table: str) -> None:
        message = self._failures.get((operation, table))
        if message is not None:
            raise StoreError(message, detail=table)

    def _tick(self) -> datetime:
        self._clock += timedelta(seconds=1)
        return self._clock

    @staticmethod
    def _matches(row: Dict[str, Any], query: StoreQuery) -> bool:
        for column, value in query.eq.items():
            if row.get(column) != value:
                return False
        for column, value in query.neq.items():
            # NULL <> value is not true in SQL
            if row.get(column) is None or row.get(column) == value:
                return False
        if query.search and query.search.term.strip():
            term = query.search.term.strip().lower()
            if not any(term in str(row.get(column) or "").lower() for column in query.search.columns):
                return False
        return True

    @staticmethod
    def _ordered(rows: List[Dict[str, Any]], query: StoreQuery) -> List[Dict[str, Any]]:
        for term in reversed(query.order):
            present = [row for row in rows if row.get(term.column) is not None]
            missing = [row for row in rows if row.get(term.column) is None]
            present = sorted(present, key=lambda row: row[term.column], reverse=not term.ascending)
            rows = missing + present if term.nulls_first else present + missing
        return rows

    @staticmethod
    def _project(row: Dict[str, Any], columns: str) -> Dict[str, Any]:
        if columns.strip() == "*":
            return copy.deepcopy(row)
        names = [name.strip() for name in columns.split(",") if name.strip()]
        return {name: copy.deepcopy(row.get(name)) for name in names}

    async def select(self, query: StoreQuery) -> QueryResult:
        self.selects.append(query)
        self._check("select", query.table)

        rows = [row for row in self.tables.get(query.table, []) if self._matches(row, query)]
        rows = self._ordered(rows, query)
        count = len(rows) if query.count else None

        start = query.offset or 0
        end = start + query.limit if query.limit is not None else None
        return QueryResult(rows=[self._project(row, query.columns) for row in rows[start:end]], count=count)

    async def insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        self.inserts.append((table, dict(row)))
        self._check("insert", table)

        stored = dict(row)
        if "id" not in stored:
            if table == REQUESTS_TABLE:
                stored["id"] = str(uuid4())
            else:
                self._next_id += 1
                stored["id"] = self._next_id
        if table == REQUESTS_TABLE:
            now = self._tick().isoformat()
            stored.setdefault("created_at", now)
            stored.setdefault("updated_at", now)
        self.tables.setdefault(table, []).append(stored)
        return copy.deepcopy(stored)

    async def update(self, table: str, values: Dict[str, Any], match: Dict[str, Any]) -> List[Dict[str, Any]]:
        self.updates.append((table, dict(values), dict(match)))
        self._check("update", table)

        updated = []
        for row in self.tables.get(table, []):
            if all(row.get(column) == value for column, value in match.items()):
                row.update(values)
                updated.append(copy.deepcopy(row))
        return updated

    def rows(self, table: str) -> List[Dict[str, Any]]:
        return self.tables.get(table, [])


class FakeDispatcher(RequestDispatcher):
    """Marks requests sent in the fake store, like the edge function does"""

    def __init__(self, store: FakeRecordStore):
        self.store = store
        self.result = DispatchResult(ok=True)
        self.calls: List[str] = []

    async def dispatch(self, request_id: str) -> DispatchResult:
        self.calls.append(request_id)
        if self.result.ok:
            for row in self.store.rows(REQUESTS_TABLE):
                if row["id"] == request_id:
                    row["status"] = "sent"
                    row["sent_at"] = "2024-03-02T09:30:00+00:00"
        return self.result


@pytest.fixture
def fake_store():
    """Empty in-memory record store"""
    return FakeRecordStore()


@pytest.fixture
def fake_dispatcher(fake_store):
    """Dispatch function stand-in writing to ``fake_store``"""
    return FakeDispatcher(fake_store)


@pytest.fixture
def session():
    """Approved, signed-in user"""
    return SessionContext(
        session_id="session-1",
        user_id="user-1",
        email="journalist@example.no",
        approved=True,
    )


@pytest.fixture
def anonymous_session():
    """No signed-in user"""
    return SessionContext(session_id="session-anon")
