"""Table schema declaration, introspection, comparison, and reconciliation.

Provides DDL synthesis (``synthesize_create``, ``synthesize_drop``), live
introspection (``TableIntrospector``), comparison (``SchemaComparator``,
``compare_table``), lifecycle orchestration (``TableReconciler``), and
declaration files (``load_tables``, ``dump_table_toml``).

Usage:
    from chschema.schema import TableReconciler, load_tables
    from chschema.schema import SchemaComparator, synthesize_create
"""

from chschema.schema.comparator import (
    ORDERED_ENGINE_PREFIXES,
    SchemaComparator,
    compare_table,
)
from chschema.schema.ddl import synthesize_create, synthesize_drop
from chschema.schema.introspector import TableIntrospector, parse_sorting_key
from chschema.schema.loader import dump_table_toml, load_tables
from chschema.schema.models import (
    ActualColumn,
    ActualTable,
    Column,
    DesiredTable,
    ImportedTable,
    MismatchCategory,
    MismatchReport,
    TableIdentity,
    VerifyResult,
    VerifyStatus,
)
from chschema.schema.reconciler import TableReconciler

__all__ = [
    "synthesize_create",
    "synthesize_drop",
    "TableIntrospector",
    "parse_sorting_key",
    "SchemaComparator",
    "compare_table",
    "ORDERED_ENGINE_PREFIXES",
    "TableReconciler",
    "load_tables",
    "dump_table_toml",
    "Column",
    "DesiredTable",
    "ActualColumn",
    "ActualTable",
    "TableIdentity",
    "MismatchCategory",
    "MismatchReport",
    "VerifyStatus",
    "VerifyResult",
    "ImportedTable",
]
