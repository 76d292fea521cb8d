"""Shared fixtures: an in-memory stand-in for the ClickHouse system tables."""

from typing import Any

import pytest

from chschema.schema.models import Column, DesiredTable


class FakeClickHouseClient:
    """In-memory ``DatabaseClient`` answering the introspector's queries.

    Tables are registered with ``add_table()``; executed statements and
    query counts are recorded for assertions.
    """

    def __init__(self) -> None:
        self.tables: dict[tuple[str, str], dict[str, Any]] = {}
        self.executed: list[str] = []
        self.queries: list[str] = []
        self.fail_with: Exception | None = None
        self.closed = False

    def add_table(
        self,
        database: str,
        name: str,
        engine: str,
        columns: list[tuple[str, str, str | None]],
        sorting_key: str | None = "",
    ) -> None:
        self.tables[(database, name)] = {
            "engine": engine,
            "columns": columns,
            "sorting_key": sorting_key,
        }

    def drop_table(self, database: str, name: str) -> None:
        self.tables.pop((database, name), None)

    async def execute(self, sql: str, params: dict[str, Any] | None = None) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.executed.append(sql)

    async def query(
        self, sql: str, params: dict[str, Any] | None = None
    ) -> list[dict[str, Any]]:
        if self.fail_with is not None:
            raise self.fail_with
        self.queries.append(sql)

        key = (params["database"], params["table"])
        table = self.tables.get(key)
        if table is None:
            return []

        if "system.columns" in sql:
            return [
                {"name": name, "type": col_type, "comment": comment}
                for name, col_type, comment in table["columns"]
            ]
        if "sorting_key" in sql:
            return [{"sorting_key": table["sorting_key"]}]
        return [{"engine": table["engine"]}]

    async def query_row(
        self, sql: str, params: dict[str, Any] | None = None
    ) -> dict[str, Any] | None:
        rows = await self.query(sql, params)
        return rows[0] if rows else None

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_client() -> FakeClickHouseClient:
    return FakeClickHouseClient()


@pytest.fixture
def events_table() -> DesiredTable:
    """The ``default.events`` MergeTree declaration used across tests."""
    return DesiredTable(
        name="events",
        database="default",
        engine="MergeTree",
        columns=[
            Column(name="id", type="UInt64", comment="pk"),
            Column(name="ts", type="DateTime"),
        ],
        order_by=["id"],
    )


def mirror(client: FakeClickHouseClient, table: DesiredTable) -> None:
    """Register a live table that exactly matches *table*."""
    client.add_table(
        table.database,
        table.name,
        table.engine,
        [(col.name, col.type, col.comment or "") for col in table.columns],
        sorting_key=", ".join(table.order_by),
    )


@pytest.fixture
def mirror_table(fake_client: FakeClickHouseClient):
    """Callable registering a live table that mirrors a declaration."""

    def _mirror(table: DesiredTable) -> None:
        mirror(fake_client, table)

    return _mirror
