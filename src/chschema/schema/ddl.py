"""CREATE/DROP statement synthesis for declared tables.

Pure logic -- no I/O.  Identifiers and comment text are emitted verbatim:
no quoting or escaping is performed, so names and comments must not
contain a single quote.

Usage:
    from chschema.schema.ddl import synthesize_create, synthesize_drop

    sql = synthesize_create(table.with_default_database("default"))
"""

from chschema.schema.models import Column, DesiredTable


def _column_sql(column: Column) -> str:
    sql = f"    {column.name} {column.type}"
    if column.comment:
        sql += f" COMMENT '{column.comment}'"
    return sql


def synthesize_create(table: DesiredTable) -> str:
    """Generate the CREATE TABLE statement for a declared table.

    Columns are emitted in declared order.  A ``COMMENT`` clause is
    appended only for columns with a non-empty comment.  The ``ORDER BY``
    clause is appended whenever ``order_by`` is non-empty, whatever the
    engine.

    Args:
        table: Declaration with its database already set.

    Returns:
        CREATE TABLE statement text.

    Example:
        >>> from chschema.schema.models import Column, DesiredTable
        >>> print(synthesize_create(DesiredTable(
        ...     name="events",
        ...     database="default",
        ...     engine="MergeTree",
        ...     columns=[
        ...         Column(name="id", type="UInt64", comment="pk"),
        ...         Column(name="ts", type="DateTime"),
        ...     ],
        ...     order_by=["id"],
        ... )))
        CREATE TABLE default.events (
            id UInt64 COMMENT 'pk',
            ts DateTime
        ) ENGINE = MergeTree
        ORDER BY (id)
    """
    columns = ",\n".join(_column_sql(col) for col in table.columns)
    sql = f"CREATE TABLE {table.database}.{table.name} (\n{columns}\n) ENGINE = {table.engine}"

    if table.order_by:
        sql += f"\nORDER BY ({', '.join(table.order_by)})"

    return sql


def synthesize_drop(table: DesiredTable) -> str:
    """Generate an idempotent DROP TABLE statement."""
    return f"DROP TABLE IF EXISTS {table.database}.{table.name}"
