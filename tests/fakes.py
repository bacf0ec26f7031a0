"""In-memory stand-in for the parts of the Supabase client the services use."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

from postgrest import APIError

_EPOCH = datetime(2026, 1, 1, tzinfo=UTC)


@dataclass
class FakeResponse:
    data: Any
    count: int | None = None


class FakeQuery:
    """Chainable query builder over one table of ``FakeSupabase``."""

    def __init__(self, db: FakeSupabase, table: str) -> None:
        self.db = db
        self.table = table
        self.operation = "select"
        self.payload: Any = None
        self.filters: list[tuple[str, str, Any]] = []
        self.order_by: tuple[str, bool] | None = None
        self.limit_value: int | None = None
        self.offset_value = 0

    def select(self, columns: str = "*", count: str | None = None, head: bool = False) -> FakeQuery:
        self.operation = "select"
        return self

    def insert(self, payload: dict[str, Any] | list[dict[str, Any]]) -> FakeQuery:
        self.operation = "insert"
        self.payload = payload
        return self

    def update(self, payload: dict[str, Any]) -> FakeQuery:
        self.operation = "update"
        self.payload = payload
        return self

    def delete(self) -> FakeQuery:
        self.operation = "delete"
        return self

    def eq(self, column: str, value: Any) -> FakeQuery:
        self.filters.append(("eq", column, value))
        return self

    def in_(self, column: str, values: list[Any]) -> FakeQuery:
        self.filters.append(("in", column, [str(value) for value in values]))
        return self

    def order(self, column: str, desc: bool = False) -> FakeQuery:
        self.order_by = (column, desc)
        return self

    def limit(self, size: int) -> FakeQuery:
        self.limit_value = size
        return self

    def offset(self, size: int) -> FakeQuery:
        self.offset_value = size
        return self

    def _matches(self, row: dict[str, Any]) -> bool:
        for kind, column, value in self.filters:
            if kind == "eq" and str(row.get(column)) != str(value):
                return False
            if kind == "in" and str(row.get(column)) not in value:
                return False
        return True

    def execute(self) -> FakeResponse:
        self.db.calls.append((self.table, self.operation))
        if self.table in self.db.failing_tables:
            raise APIError({"message": "connection reset", "code": "08006"})

        rows = self.db.tables.setdefault(self.table, [])
        if self.operation == "insert":
            payloads = self.payload if isinstance(self.payload, list) else [self.payload]
            created = [self.db.new_row(self.table, payload) for payload in payloads]
            rows.extend(created)
            return FakeResponse(data=[dict(row) for row in created])

        matched = [row for row in rows if self._matches(row)]
        if self.operation == "update":
            for row in matched:
                row.update(self.payload)
            return FakeResponse(data=[dict(row) for row in matched])
        if self.operation == "delete":
            self.db.tables[self.table] = [row for row in rows if row not in matched]
            return FakeResponse(data=[dict(row) for row in matched])

        if self.order_by:
            column, desc = self.order_by
            matched = sorted(matched, key=lambda row: row.get(column) or "", reverse=desc)
        matched = matched[self.offset_value :]
        if self.limit_value is not None:
            matched = matched[: self.limit_value]
        return FakeResponse(data=[dict(row) for row in matched], count=len(matched))


class FakeRpc:
    def __init__(self, db: FakeSupabase, name: str, params: dict[str, Any]) -> None:
        self.db = db
        self.name = name
        self.params = params

    def execute(self) -> FakeResponse:
        self.db.rpc_calls.append((self.name, self.params))
        if self.name in self.db.failing_rpcs:
            raise APIError({"message": "deadlock detected", "code": "40P01"})
        handler = self.db.rpc_handlers.get(self.name)
        return FakeResponse(data=handler(self.params) if handler else [])


class FakeSupabase:
    """Tables are plain lists of dicts keyed by table name."""

    def __init__(self, tables: dict[str, list[dict[str, Any]]] | None = None) -> None:
        self.tables: dict[str, list[dict[str, Any]]] = {
            name: [dict(row) for row in rows] for name, rows in (tables or {}).items()
        }
        self.calls: list[tuple[str, str]] = []
        self.rpc_calls: list[tuple[str, dict[str, Any]]] = []
        self.rpc_handlers: dict[str, Any] = {}
        self.failing_tables: set[str] = set()
        self.failing_rpcs: set[str] = set()
        self._sequence = 0

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def rpc(self, name: str, params: dict[str, Any]) -> FakeRpc:
        return FakeRpc(self, name, params)

    def new_row(self, table: str, payload: dict[str, Any]) -> dict[str, Any]:
        """Fill in generated columns the way Postgres defaults would."""
        self._sequence += 1
        row = {"id": str(uuid.uuid4()), **payload}
        row.setdefault("created_at", (_EPOCH + timedelta(seconds=self._sequence)).isoformat())
        return row

    def rows(self, table: str) -> list[dict[str, Any]]:
        return self.tables.get(table, [])
