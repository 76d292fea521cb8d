"""Tests for CREATE/DROP statement synthesis."""

import ast
import re
from pathlib import Path

from chschema.schema.ddl import synthesize_create, synthesize_drop
from chschema.schema.models import Column, DesiredTable

DDL_PATH = Path(__file__).parent.parent / "src" / "chschema" / "schema" / "ddl.py"


class TestPurity:
    """ddl.py is pure logic."""

    def test_no_adapter_imports(self) -> None:
        """ddl.py must not import adapters or the reconciler."""
        tree = ast.parse(DDL_PATH.read_text())
        for node in ast.walk(tree):
            if isinstance(node, ast.ImportFrom) and node.module:
                assert "adapters" not in node.module
                assert "reconciler" not in node.module


class TestSynthesizeCreate:
    """Test synthesize_create() output."""

    def test_events_example(self, events_table: DesiredTable) -> None:
        """Comment clause for commented columns, ORDER BY for non-empty key."""
        assert synthesize_create(events_table) == (
            "CREATE TABLE default.events (\n"
            "    id UInt64 COMMENT 'pk',\n"
            "    ts DateTime\n"
            ") ENGINE = MergeTree\n"
            "ORDER BY (id)"
        )

    def test_empty_comment_emits_no_clause(self) -> None:
        """An empty comment produces the same DDL as no comment."""
        table = DesiredTable(
            name="events",
            database="default",
            engine="MergeTree",
            columns=[
                Column(name="id", type="UInt64", comment="pk"),
                Column(name="ts", type="DateTime", comment=""),
            ],
            order_by=["id"],
        )
        assert "COMMENT ''" not in synthesize_create(table)
        assert synthesize_create(table).endswith("    ts DateTime\n) ENGINE = MergeTree\nORDER BY (id)")

    def test_no_order_by_clause_when_empty(self) -> None:
        """Empty order_by omits the ORDER BY clause."""
        table = DesiredTable(
            name="logs",
            database="ops",
            engine="Log",
            columns=[Column(name="msg", type="String")],
        )
        assert synthesize_create(table) == (
            "CREATE TABLE ops.logs (\n    msg String\n) ENGINE = Log"
        )

    def test_order_by_emitted_regardless_of_engine(self) -> None:
        """The synthesizer does not enforce the ordered-storage rule."""
        table = DesiredTable(
            name="logs",
            database="ops",
            engine="Log",
            columns=[Column(name="msg", type="String")],
            order_by=["msg"],
        )
        assert synthesize_create(table).endswith("ENGINE = Log\nORDER BY (msg)")

    def test_multi_column_order_by(self) -> None:
        """ORDER BY entries are comma-separated in declared order."""
        table = DesiredTable(
            name="events",
            database="default",
            engine="ReplacingMergeTree",
            columns=[Column(name="id", type="UInt64"), Column(name="ts", type="DateTime")],
            order_by=["ts", "id"],
        )
        assert synthesize_create(table).endswith("ORDER BY (ts, id)")

    def test_columns_parse_back_losslessly(self, events_table: DesiredTable) -> None:
        """Column names and types can be recovered from the statement body."""
        sql = synthesize_create(events_table)
        body = sql[sql.index("(\n") + 2 : sql.index("\n)")]
        parsed = [
            tuple(re.match(r"\s*(\S+) (\S+)", line).groups())
            for line in body.split(",\n")
        ]
        assert parsed == [(col.name, col.type) for col in events_table.columns]


class TestSynthesizeDrop:
    """Test synthesize_drop() output."""

    def test_drop_is_guarded(self, events_table: DesiredTable) -> None:
        """DROP uses IF EXISTS so a missing table is not an error."""
        assert synthesize_drop(events_table) == "DROP TABLE IF EXISTS default.events"
