"""chschema: declarative ClickHouse table reconciliation.

Compares declared tables (name, database, engine, columns, ORDER BY key)
against live ClickHouse metadata, creates and drops them, and imports
existing tables back into declarations.  In-place ALTERs are never
issued.

Usage:
    from chschema import AsyncClickHouseAdapter, TableReconciler
    from chschema import Column, DesiredTable, load_tables
"""

__version__ = "0.1.0"

# Adapters
from chschema.adapters.base import DatabaseClient
from chschema.adapters.clickhouse import AsyncClickHouseAdapter

# Config
from chschema.config.loader import load_db_config
from chschema.config.models import DatabaseConfig, DatabaseProfile

# Errors
from chschema.errors import (
    ChSchemaError,
    ExecutionError,
    InvalidIdentityError,
    MetadataReadError,
    SchemaMismatchError,
    TableNotFoundError,
    UnsupportedOperationError,
)

# Factory
from chschema.factory import (
    ProfileNotFoundError,
    build_reconciler,
    connect,
    get_adapter,
)

# Schema
from chschema.schema.comparator import SchemaComparator, compare_table
from chschema.schema.ddl import synthesize_create, synthesize_drop
from chschema.schema.loader import dump_table_toml, load_tables
from chschema.schema.models import (
    Column,
    DesiredTable,
    ImportedTable,
    MismatchCategory,
    MismatchReport,
    VerifyResult,
    VerifyStatus,
)
from chschema.schema.reconciler import TableReconciler

__all__ = [
    # Adapters
    "DatabaseClient",
    "AsyncClickHouseAdapter",
    # Config
    "load_db_config",
    "DatabaseProfile",
    "DatabaseConfig",
    # Errors
    "ChSchemaError",
    "InvalidIdentityError",
    "TableNotFoundError",
    "SchemaMismatchError",
    "ExecutionError",
    "MetadataReadError",
    "UnsupportedOperationError",
    # Factory
    "get_adapter",
    "build_reconciler",
    "connect",
    "ProfileNotFoundError",
    # Schema
    "synthesize_create",
    "synthesize_drop",
    "SchemaComparator",
    "compare_table",
    "TableReconciler",
    "load_tables",
    "dump_table_toml",
    "Column",
    "DesiredTable",
    "ImportedTable",
    "MismatchCategory",
    "MismatchReport",
    "VerifyResult",
    "VerifyStatus",
]
