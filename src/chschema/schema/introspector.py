"""ClickHouse table introspection via the system tables.

This module queries the live database for a single table's metadata:
- Existence and engine (``system.tables``)
- Columns, types, comments in position order (``system.columns``)
- Sorting key (``system.tables.sorting_key``)

Every round trip goes through a ``DatabaseClient``.  Client failures are
wrapped in ``MetadataReadError`` naming the table and the operation,
with the original exception chained.
"""

import logging

from chschema.adapters.base import DatabaseClient
from chschema.errors import MetadataReadError
from chschema.schema.models import ActualColumn

logger = logging.getLogger(__name__)


def _is_enclosed(key: str) -> bool:
    """True if the first "(" of *key* is closed by its last ")"."""
    if not (key.startswith("(") and key.endswith(")")):
        return False

    depth = 0
    for i, char in enumerate(key):
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return i == len(key) - 1
    return False


def parse_sorting_key(sorting_key: str | None) -> list[str]:
    """Parse a serialized sorting key into column names.

    Strips one parenthesis pair when it encloses the whole key, splits on
    commas, and trims whitespace around each element.

    Examples:
        >>> parse_sorting_key("(id, ts)")
        ['id', 'ts']
        >>> parse_sorting_key("(a), (b)")
        ['(a)', '(b)']
        >>> parse_sorting_key("id")
        ['id']
        >>> parse_sorting_key("")
        []
        >>> parse_sorting_key(None)
        []
    """
    if not sorting_key:
        return []

    key = sorting_key.strip()
    if _is_enclosed(key):
        key = key[1:-1]

    if not key.strip():
        return []

    return [part.strip() for part in key.split(",")]


class TableIntrospector:
    """Reads live metadata for individual ClickHouse tables.

    Usage:
        introspector = TableIntrospector(client)
        engine = await introspector.get_engine("default", "events")
        if engine is not None:
            columns = await introspector.get_columns("default", "events")
    """

    ENGINE_QUERY = """
        SELECT engine
        FROM system.tables
        WHERE database = {database:String} AND name = {table:String}
    """

    COLUMNS_QUERY = """
        SELECT name, type, comment
        FROM system.columns
        WHERE database = {database:String} AND table = {table:String}
        ORDER BY position
    """

    SORTING_KEY_QUERY = """
        SELECT sorting_key
        FROM system.tables
        WHERE database = {database:String} AND name = {table:String}
    """

    def __init__(self, client: DatabaseClient):
        """Initialize with a database client.

        Args:
            client: Any ``DatabaseClient`` implementation.
        """
        self._client = client

    async def get_engine(self, database: str, table: str) -> str | None:
        """Return the table's engine, or ``None`` if the table does not exist."""
        try:
            row = await self._client.query_row(
                self.ENGINE_QUERY, {"database": database, "table": table}
            )
        except Exception as e:
            raise MetadataReadError(
                f"Could not check if table {database}.{table} exists: {e}",
                identity=f"{database}.{table}",
                operation="engine",
            ) from e

        if row is None:
            return None
        return row["engine"]

    async def get_columns(self, database: str, table: str) -> dict[str, ActualColumn]:
        """Return the table's columns keyed by name, in position order."""
        try:
            rows = await self._client.query(
                self.COLUMNS_QUERY, {"database": database, "table": table}
            )
        except Exception as e:
            raise MetadataReadError(
                f"Could not read schema for table {database}.{table}: {e}",
                identity=f"{database}.{table}",
                operation="columns",
            ) from e

        columns: dict[str, ActualColumn] = {}
        for row in rows:
            columns[row["name"]] = ActualColumn(
                name=row["name"],
                type=row["type"],
                comment=row.get("comment") or "",
            )
        return columns

    async def get_order_by(self, database: str, table: str) -> list[str]:
        """Return the table's sorting key as an ordered list of columns.

        A missing or empty sorting key yields an empty list.
        """
        try:
            row = await self._client.query_row(
                self.SORTING_KEY_QUERY, {"database": database, "table": table}
            )
        except Exception as e:
            raise MetadataReadError(
                f"Could not read ORDER BY for table {database}.{table}: {e}",
                identity=f"{database}.{table}",
                operation="order_by",
            ) from e

        if row is None:
            logger.debug(f"No sorting key row for {database}.{table}")
            return []
        return parse_sorting_key(row.get("sorting_key"))
