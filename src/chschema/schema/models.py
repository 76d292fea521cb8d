"""Pydantic models for declared and live table schemas.

This module contains schema-domain models:
- Declaration models: Column, DesiredTable
- Live metadata models: ActualColumn, ActualTable
- Identity: TableIdentity
- Comparison and lifecycle results: MismatchCategory, MismatchReport,
  VerifyStatus, VerifyResult, ImportedTable

Configuration models (DatabaseProfile, DatabaseConfig) live in
chschema.config.models.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from chschema.errors import InvalidIdentityError


# ============================================================================
# Declaration Models
# ============================================================================


class Column(BaseModel):
    """A declared column.

    ``comment=None`` means no comment was declared, which is distinct
    from an empty string.

    Example:
        >>> col = Column(name="id", type="UInt64")
        >>> col.comment is None
        True
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str
    type: str
    comment: str | None = None


class DesiredTable(BaseModel):
    """The declared shape of a table.

    Values are immutable; transformations such as applying the default
    database return a new instance.

    Example:
        >>> table = DesiredTable(
        ...     name="events",
        ...     engine="MergeTree",
        ...     columns=[Column(name="id", type="UInt64")],
        ...     order_by=["id"],
        ... )
        >>> table.with_default_database("default").identity
        'default.events'
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str
    database: str | None = None
    engine: str
    columns: list[Column] = Field(default_factory=list)
    order_by: list[str] = Field(default_factory=list)

    @field_validator("columns")
    @classmethod
    def _unique_column_names(cls, columns: list[Column]) -> list[Column]:
        seen: set[str] = set()
        for col in columns:
            if col.name in seen:
                raise ValueError(f"Duplicate column name: {col.name}")
            seen.add(col.name)
        return columns

    @property
    def identity(self) -> str:
        """Identity key ``database.name``.

        Raises:
            ValueError: If no database has been set yet.
        """
        if self.database is None:
            raise ValueError(
                f"Table '{self.name}' has no database; apply a default first"
            )
        return f"{self.database}.{self.name}"

    def with_default_database(self, default: str) -> "DesiredTable":
        """Return this table with ``database`` set to *default* if absent."""
        if self.database is not None:
            return self
        return self.model_copy(update={"database": default})


# ============================================================================
# Live Metadata Models
# ============================================================================


class ActualColumn(BaseModel):
    """A column as reported by ``system.columns``.

    The metadata store has no notion of "no comment", so ``comment`` is
    always a string.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    type: str
    comment: str = ""


class ActualTable(BaseModel):
    """Live table metadata.

    ``columns`` preserves the database's column position order.
    """

    model_config = ConfigDict(frozen=True)

    engine: str
    columns: dict[str, ActualColumn] = Field(default_factory=dict)
    order_by: list[str] = Field(default_factory=list)


# ============================================================================
# Identity
# ============================================================================


class TableIdentity(BaseModel):
    """Parsed ``database.table`` identity key."""

    model_config = ConfigDict(frozen=True)

    database: str
    name: str

    @classmethod
    def parse(cls, identity: str) -> "TableIdentity":
        """Parse an identity string.

        Raises:
            InvalidIdentityError: Unless *identity* is exactly two
                non-empty dot-separated parts.

        Example:
            >>> TableIdentity.parse("default.events").name
            'events'
        """
        parts = identity.split(".")
        if len(parts) != 2:
            raise InvalidIdentityError(
                f"Expected format 'database.table', got: {identity}",
                identity=identity,
            )
        database, name = parts
        if not database or not name:
            raise InvalidIdentityError(
                "Database and table names cannot be empty",
                identity=identity,
            )
        return cls(database=database, name=name)

    def __str__(self) -> str:
        return f"{self.database}.{self.name}"


# ============================================================================
# Comparison Results
# ============================================================================


class MismatchCategory(str, Enum):
    """Kind of divergence found by the comparator."""

    ENGINE = "engine"
    COLUMN_COUNT = "column_count"
    COLUMN = "column"
    ORDER_BY = "order_by"


class MismatchReport(BaseModel):
    """A single category of divergence between declared and live schema.

    Example:
        >>> report = MismatchReport(
        ...     identity="default.events",
        ...     category=MismatchCategory.ENGINE,
        ...     expected="MergeTree",
        ...     actual="Log",
        ... )
        >>> report.format_report()
        "default.events: engine mismatch: expected 'MergeTree', found 'Log'"
    """

    model_config = ConfigDict(frozen=True)

    identity: str
    category: MismatchCategory
    expected: str | int | list[str] | None = None
    actual: str | int | list[str] | None = None
    column: str | None = None
    detail: str = ""

    def format_report(self) -> str:
        """Format the mismatch as a one-line human-readable message."""
        if self.category is MismatchCategory.ENGINE:
            body = f"engine mismatch: expected '{self.expected}', found '{self.actual}'"
        elif self.category is MismatchCategory.COLUMN_COUNT:
            body = (
                f"column count mismatch: expected {self.expected} columns, "
                f"found {self.actual} columns"
            )
        elif self.category is MismatchCategory.COLUMN:
            if self.actual is None:
                body = f"column '{self.column}' not found in table"
            else:
                body = (
                    f"column '{self.column}': expected {self.detail} "
                    f"'{self.expected}', found {self.detail} '{self.actual}'"
                )
        else:
            body = f"ORDER BY mismatch: {self.detail}"
        return f"{self.identity}: {body}"


# ============================================================================
# Lifecycle Results
# ============================================================================


class VerifyStatus(str, Enum):
    """Outcome of a successful verify pass."""

    VERIFIED = "verified"
    GONE = "gone"


class VerifyResult(BaseModel):
    """Result of ``TableReconciler.verify()``.

    ``GONE`` means the table no longer exists and the caller should stop
    tracking it; it is not an error.
    """

    identity: str
    status: VerifyStatus
    engine: str | None = None

    @property
    def gone(self) -> bool:
        return self.status is VerifyStatus.GONE


class ImportedTable(BaseModel):
    """A declaration reconstructed from a live table."""

    identity: str
    table: DesiredTable
