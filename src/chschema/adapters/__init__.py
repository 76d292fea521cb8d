"""Database adapters package.

Provides the ``DatabaseClient`` Protocol and the async ClickHouse
adapter implementation.

Usage:
    from chschema.adapters import DatabaseClient, AsyncClickHouseAdapter
"""

from chschema.adapters.base import DatabaseClient
from chschema.adapters.clickhouse import AsyncClickHouseAdapter

__all__ = [
    "DatabaseClient",
    "AsyncClickHouseAdapter",
]
