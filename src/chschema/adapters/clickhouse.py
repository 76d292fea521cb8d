"""Async ClickHouse database adapter.

Provides ``AsyncClickHouseAdapter``, an async implementation of the
``DatabaseClient`` protocol using ``clickhouse-connect``'s async client
over the ClickHouse HTTP interface.

Usage:
    from chschema.adapters.clickhouse import AsyncClickHouseAdapter

    adapter = AsyncClickHouseAdapter(host="localhost", port=8123)

    rows = await adapter.query(
        "SELECT name FROM system.tables WHERE database = {database:String}",
        {"database": "default"},
    )
    await adapter.close()
"""

import logging
from typing import Any

import clickhouse_connect
from clickhouse_connect.driver.asyncclient import AsyncClient

logger = logging.getLogger(__name__)

# Server-side settings applied to every session unless overridden
DEFAULT_SETTINGS: dict[str, Any] = {
    "max_execution_time": 60,
}


class AsyncClickHouseAdapter:
    """Async ClickHouse implementation of the ``DatabaseClient`` protocol.

    The underlying client is created lazily on first use and reused for
    the lifetime of the adapter.  Query parameters use ClickHouse
    server-side binding (``{name:Type}`` placeholders).

    Args:
        host: Server hostname.
        port: HTTP(S) interface port.
        username: ClickHouse user.
        password: ClickHouse password.
        database: Session default database.
        secure: Use HTTPS.
        settings: Extra server settings merged over ``DEFAULT_SETTINGS``.
        **client_kwargs: Forwarded to ``clickhouse_connect.get_async_client``.

    Example:
        adapter = AsyncClickHouseAdapter(host="ch.internal", password="s3cret")
        await adapter.execute("DROP TABLE IF EXISTS default.events")
        await adapter.close()
    """

    def __init__(
        self,
        host: str = "localhost",
        port: int = 8123,
        username: str = "default",
        password: str = "",
        database: str = "default",
        secure: bool = False,
        settings: dict[str, Any] | None = None,
        **client_kwargs: Any,
    ) -> None:
        self._host = host
        self._port = port
        self._username = username
        self._password = password
        self._database = database
        self._secure = secure
        self._settings: dict[str, Any] = {**DEFAULT_SETTINGS, **(settings or {})}
        self._client_kwargs = client_kwargs
        self._client: AsyncClient | None = None

    async def _get_client(self) -> AsyncClient:
        if self._client is None:
            logger.debug(
                f"Opening ClickHouse client {self._username}@{self._host}:{self._port}"
                f"/{self._database}"
            )
            self._client = await clickhouse_connect.get_async_client(
                host=self._host,
                port=self._port,
                username=self._username,
                password=self._password,
                database=self._database,
                secure=self._secure,
                settings=self._settings,
                **self._client_kwargs,
            )
        return self._client

    # ------------------------------------------------------------------
    # DatabaseClient Methods
    # ------------------------------------------------------------------

    async def execute(self, sql: str, params: dict[str, Any] | None = None) -> None:
        """Execute a DDL statement."""
        client = await self._get_client()
        await client.command(sql, parameters=params)

    async def query(
        self, sql: str, params: dict[str, Any] | None = None
    ) -> list[dict[str, Any]]:
        """Run a query and return rows as dicts."""
        client = await self._get_client()
        result = await client.query(sql, parameters=params)
        col_names = list(result.column_names)
        return [dict(zip(col_names, row)) for row in result.result_rows]

    async def query_row(
        self, sql: str, params: dict[str, Any] | None = None
    ) -> dict[str, Any] | None:
        """Run a query and return the first row, or ``None``."""
        rows = await self.query(sql, params)
        return rows[0] if rows else None

    async def ping(self) -> bool:
        """Return True if the server answers a ping."""
        client = await self._get_client()
        return await client.ping()

    async def close(self) -> None:
        """Close the underlying client, if open."""
        if self._client is not None:
            await self._client.close()
            self._client = None
