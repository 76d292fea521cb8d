"""Database client protocol definition.

Defines the ``DatabaseClient`` Protocol that the reconciler depends on.
All methods are ``async def`` -- the library is async-first, and
cancelling the awaiting task cancels the in-flight round trip.

Usage:
    from chschema.adapters.base import DatabaseClient

    async def do_work(client: DatabaseClient) -> None:
        await client.execute("DROP TABLE IF EXISTS default.events")
        row = await client.query_row(
            "SELECT engine FROM system.tables WHERE database = {database:String}",
            {"database": "default"},
        )
        await client.close()
"""

from typing import Any, Protocol


class DatabaseClient(Protocol):
    """Database client interface that all adapters must implement.

    The reconciler treats the client as a stateless capability: pooling
    and connection lifetime belong to the adapter.

    All methods are async -- callers must ``await`` every operation.
    """

    async def execute(self, sql: str, params: dict[str, Any] | None = None) -> None:
        """Execute a statement that returns no rows (DDL).

        Args:
            sql: Raw SQL statement to execute.
            params: Optional dict of named parameters.

        Raises:
            Exception: Any driver error, propagated unchanged.

        Example:
            await client.execute("DROP TABLE IF EXISTS default.events")
        """
        ...

    async def query(
        self, sql: str, params: dict[str, Any] | None = None
    ) -> list[dict[str, Any]]:
        """Run a query and return all rows.

        Args:
            sql: SELECT statement.
            params: Optional dict of named parameters.

        Returns:
            List of dicts, one per row.  Empty list if no rows.
        """
        ...

    async def query_row(
        self, sql: str, params: dict[str, Any] | None = None
    ) -> dict[str, Any] | None:
        """Run a query expected to return at most one row.

        Returns:
            The first row as a dict, or ``None`` when there are no rows.
        """
        ...

    async def close(self) -> None:
        """Close the connection and clean up resources."""
        ...
