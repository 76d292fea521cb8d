"""Table declaration files.

Declarations are TOML documents with one ``[[tables]]`` entry per table:

    [[tables]]
    name = "events"
    database = "default"      # optional, defaults to the profile default
    engine = "MergeTree"
    order_by = ["id"]         # optional

    [[tables.columns]]
    name = "id"
    type = "UInt64"
    comment = "pk"            # optional

    [[tables.columns]]
    name = "ts"
    type = "DateTime"

Usage:
    from chschema.schema.loader import load_tables, dump_table_toml

    tables = load_tables("tables.toml")
    print(dump_table_toml(tables[0]))
"""

import tomllib
from pathlib import Path

from pydantic import ValidationError

from chschema.schema.models import DesiredTable


def load_tables(path: str | Path) -> list[DesiredTable]:
    """Load table declarations from a TOML file.

    Args:
        path: Path to the declaration file.

    Returns:
        Declarations in file order.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file is not valid TOML, declares no tables, or
            a table entry is malformed.
    """
    tables_path = Path(path)
    if not tables_path.exists():
        raise FileNotFoundError(f"Table declarations not found: {tables_path}")

    try:
        with open(tables_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ValueError(f"Invalid TOML in {tables_path.name}: {e}") from e

    entries = data.get("tables", [])
    if not entries:
        raise ValueError(f"No [[tables]] declared in {tables_path.name}")
    if not isinstance(entries, list):
        raise ValueError(f"'tables' must be an array of tables in {tables_path.name}")

    tables: list[DesiredTable] = []
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise ValueError(
                f"Invalid table #{index + 1} in {tables_path.name}: expected a table, got {entry!r}"
            )
        label = entry.get("name", f"#{index + 1}")
        try:
            tables.append(DesiredTable(**entry))
        except ValidationError as e:
            raise ValueError(
                f"Invalid table '{label}' in {tables_path.name}: {e}"
            ) from e

    return tables


def _toml_string(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def dump_table_toml(table: DesiredTable) -> str:
    """Render a declaration in the ``load_tables()`` file format.

    Columns without a comment are written without a ``comment`` key, so
    the absence survives a reload.
    """
    lines = ["[[tables]]", f"name = {_toml_string(table.name)}"]
    if table.database is not None:
        lines.append(f"database = {_toml_string(table.database)}")
    lines.append(f"engine = {_toml_string(table.engine)}")
    if table.order_by:
        keys = ", ".join(_toml_string(key) for key in table.order_by)
        lines.append(f"order_by = [{keys}]")

    for col in table.columns:
        lines.append("")
        lines.append("[[tables.columns]]")
        lines.append(f"name = {_toml_string(col.name)}")
        lines.append(f"type = {_toml_string(col.type)}")
        if col.comment is not None:
            lines.append(f"comment = {_toml_string(col.comment)}")

    return "\n".join(lines) + "\n"
