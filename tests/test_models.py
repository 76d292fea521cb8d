"""Tests for schema-domain models."""

import pytest
from pydantic import ValidationError

from chschema.errors import InvalidIdentityError, SchemaMismatchError
from chschema.schema.models import (
    Column,
    DesiredTable,
    MismatchCategory,
    MismatchReport,
    TableIdentity,
    VerifyResult,
    VerifyStatus,
)


class TestDesiredTable:
    """Test DesiredTable construction and transformations."""

    def test_duplicate_column_names_rejected(self) -> None:
        with pytest.raises(ValidationError, match="Duplicate column name: id"):
            DesiredTable(
                name="t",
                engine="Log",
                columns=[Column(name="id", type="UInt64"), Column(name="id", type="String")],
            )

    def test_frozen(self, events_table: DesiredTable) -> None:
        with pytest.raises(ValidationError):
            events_table.name = "renamed"

    def test_with_default_database_returns_new_value(self) -> None:
        table = DesiredTable(name="t", engine="Log")

        resolved = table.with_default_database("default")

        assert resolved is not table
        assert resolved.database == "default"
        assert table.database is None

    def test_with_default_database_keeps_explicit(self, events_table: DesiredTable) -> None:
        assert events_table.with_default_database("other") is events_table

    def test_identity_requires_database(self) -> None:
        with pytest.raises(ValueError):
            DesiredTable(name="t", engine="Log").identity

    def test_comment_absence_distinct_from_empty(self) -> None:
        assert Column(name="a", type="String").comment is None
        assert Column(name="a", type="String", comment="").comment == ""


class TestTableIdentity:
    """Test TableIdentity.parse()."""

    def test_parse_and_render(self) -> None:
        ident = TableIdentity.parse("default.events")
        assert (ident.database, ident.name) == ("default", "events")
        assert str(ident) == "default.events"

    @pytest.mark.parametrize("raw", ["events", "a.b.c", ".events", "default.", "."])
    def test_invalid(self, raw: str) -> None:
        with pytest.raises(InvalidIdentityError) as exc_info:
            TableIdentity.parse(raw)
        assert exc_info.value.identity == raw


class TestMismatchReport:
    """Test MismatchReport.format_report() and its error wrapper."""

    def test_engine_message(self) -> None:
        report = MismatchReport(
            identity="default.events",
            category=MismatchCategory.ENGINE,
            expected="MergeTree",
            actual="Log",
        )
        assert report.format_report() == (
            "default.events: engine mismatch: expected 'MergeTree', found 'Log'"
        )

    def test_column_count_message(self) -> None:
        report = MismatchReport(
            identity="d.t", category=MismatchCategory.COLUMN_COUNT, expected=2, actual=3
        )
        assert "expected 2 columns, found 3 columns" in report.format_report()

    def test_column_type_message(self) -> None:
        report = MismatchReport(
            identity="d.t",
            category=MismatchCategory.COLUMN,
            column="ts",
            expected="DateTime",
            actual="Date",
            detail="type",
        )
        assert report.format_report() == (
            "d.t: column 'ts': expected type 'DateTime', found type 'Date'"
        )

    def test_error_carries_report(self) -> None:
        report = MismatchReport(
            identity="d.t",
            category=MismatchCategory.ORDER_BY,
            expected=["a"],
            actual=["b"],
            detail="column 1: expected 'a', found 'b'",
        )

        error = SchemaMismatchError(report)

        assert error.report is report
        assert error.category is MismatchCategory.ORDER_BY
        assert error.identity == "d.t"
        assert str(error) == "d.t: ORDER BY mismatch: column 1: expected 'a', found 'b'"


class TestVerifyResult:
    def test_gone_flag(self) -> None:
        assert VerifyResult(identity="d.t", status=VerifyStatus.GONE).gone
        assert not VerifyResult(identity="d.t", status=VerifyStatus.VERIFIED).gone
