"""Shared fakes for unit tests."""

from collections.abc import Sequence
from typing import Any

import pytest

from tablemap.adapters.base import ConnectionConfig, DatabaseAdapter, QueryResult
from tablemap.errors import ConnectionFailedError, NotConnectedError


class FakeAdapter(DatabaseAdapter):
    """In-memory adapter that records statements and replays queued results."""

    def __init__(self, fail_connect: bool = False) -> None:
        self.fail_connect = fail_connect
        self.connected = False
        self.connect_calls: list[ConnectionConfig] = []
        self.calls: list[tuple[str, list[Any]]] = []
        self.results: list[QueryResult] = []
        self.tables: dict[str, dict[str, str]] = {}

    def queue(self, rows: list[dict[str, Any]] | None = None, row_count: int | None = None) -> None:
        rows = rows or []
        self.results.append(QueryResult(rows=rows, row_count=len(rows) if row_count is None else row_count))

    async def connect(self, config: ConnectionConfig) -> None:
        self.connect_calls.append(config)
        if self.fail_connect:
            self.connected = False
            raise ConnectionFailedError("Failed to connect to fake: refused")
        self.connected = True

    async def disconnect(self) -> None:
        self.connected = False

    def is_connected(self) -> bool:
        return self.connected

    async def query(self, sql: str, params: Sequence[Any] | None = None) -> QueryResult:
        if not self.connected:
            raise NotConnectedError("Not connected to database. Call connect() first.")
        self.calls.append((sql, list(params or [])))
        if self.results:
            return self.results.pop(0)
        return QueryResult(rows=[], row_count=0)

    async def create_table(self, table_name: str, columns: dict[str, str]) -> None:
        self.tables[table_name] = dict(columns)

    async def drop_table(self, table_name: str) -> None:
        self.tables.pop(table_name, None)

    async def table_exists(self, table_name: str) -> bool:
        return table_name in self.tables


@pytest.fixture
def connection_config() -> ConnectionConfig:
    return ConnectionConfig(
        host="localhost",
        port=5432,
        username="app",
        password="secret",
        database="app",
    )


@pytest.fixture
def fake_adapter() -> FakeAdapter:
    adapter = FakeAdapter()
    adapter.connected = True
    return adapter
