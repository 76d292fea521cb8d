"""Exception hierarchy for table reconciliation.

Every failure the reconciler can surface is a ``ChSchemaError`` subclass
carrying the table identity and enough structured context for a caller
to render a precise message.  A table that disappeared between runs is
*not* an error: ``TableReconciler.verify()`` reports it as
``VerifyStatus.GONE``.

Usage:
    from chschema.errors import ChSchemaError, SchemaMismatchError

    try:
        await reconciler.verify("default.events", desired)
    except SchemaMismatchError as e:
        print(e.report.category, e.report.format_report())
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from chschema.schema.models import MismatchReport


class ChSchemaError(Exception):
    """Base exception for all reconciliation errors."""

    def __init__(self, message: str, identity: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.identity = identity


class InvalidIdentityError(ChSchemaError):
    """Raised when an identity string is not exactly ``database.table``.

    Raised before any database round trip.
    """


class TableNotFoundError(ChSchemaError):
    """Raised when importing a table that does not exist."""


class SchemaMismatchError(ChSchemaError):
    """Raised when the live table diverges from its declaration.

    The structured divergence is available as ``report``.
    """

    def __init__(self, report: "MismatchReport") -> None:
        super().__init__(report.format_report(), identity=report.identity)
        self.report = report

    @property
    def category(self):
        return self.report.category


class ExecutionError(ChSchemaError):
    """Raised when a DDL statement fails to execute.

    The client exception is chained as ``__cause__``.
    """

    def __init__(self, message: str, identity: str, statement: str) -> None:
        super().__init__(message, identity=identity)
        self.statement = statement


class MetadataReadError(ChSchemaError):
    """Raised when reading live table metadata fails."""

    def __init__(self, message: str, identity: str, operation: str) -> None:
        super().__init__(message, identity=identity)
        self.operation = operation


class UnsupportedOperationError(ChSchemaError):
    """Raised for in-place updates, which are never performed."""
