"""Declared-vs-live table comparison.

Compares a ``DesiredTable`` against the ``ActualTable`` read from the
database.  Pure logic -- no I/O, no database connections.

Comparison is fail-fast: the first failing category is reported and the
remaining checks are skipped.  Categories are checked in this order:

1. Engine (exact string equality, no case folding or aliasing)
2. Column count
3. Each declared column, in declared order: presence, type, comment
4. ORDER BY key (positional), only for ordered-storage engines

Usage:
    from chschema.schema.comparator import SchemaComparator

    comparator = SchemaComparator()
    report = comparator.compare(desired, actual)
    if report is None:
        print("Schema matches")
    else:
        print(report.format_report())
"""

from collections.abc import Iterable

from chschema.schema.models import (
    ActualTable,
    DesiredTable,
    MismatchCategory,
    MismatchReport,
)

# Engines whose storage is physically sorted by the declared key
ORDERED_ENGINE_PREFIXES: tuple[str, ...] = (
    "MergeTree",
    "ReplacingMergeTree",
    "SummingMergeTree",
    "AggregatingMergeTree",
    "CollapsingMergeTree",
    "VersionedCollapsingMergeTree",
    "GraphiteMergeTree",
    "ReplicatedMergeTree",
    "ReplicatedReplacingMergeTree",
    "ReplicatedSummingMergeTree",
    "ReplicatedAggregatingMergeTree",
    "ReplicatedCollapsingMergeTree",
    "ReplicatedVersionedCollapsingMergeTree",
    "ReplicatedGraphiteMergeTree",
)


class SchemaComparator:
    """Compares declared tables against live metadata.

    Args:
        ordered_engine_prefixes: Engine name prefixes that make up the
            ordered-storage family.  ORDER BY is compared only for
            engines matching one of these prefixes.

    Example:
        >>> comparator = SchemaComparator(ordered_engine_prefixes=["MergeTree"])
        >>> comparator.is_ordered_storage("MergeTree")
        True
        >>> comparator.is_ordered_storage("Log")
        False
    """

    def __init__(
        self, ordered_engine_prefixes: Iterable[str] = ORDERED_ENGINE_PREFIXES
    ) -> None:
        self._ordered_engine_prefixes: tuple[str, ...] = tuple(ordered_engine_prefixes)

    @property
    def ordered_engine_prefixes(self) -> tuple[str, ...]:
        return self._ordered_engine_prefixes

    def is_ordered_storage(self, engine: str) -> bool:
        """True if *engine* belongs to the ordered-storage family."""
        return any(engine.startswith(prefix) for prefix in self._ordered_engine_prefixes)

    def compare(self, desired: DesiredTable, actual: ActualTable) -> MismatchReport | None:
        """Compare a declared table against live metadata.

        Args:
            desired: Declaration, with its database set.
            actual: Live metadata for the same table.

        Returns:
            ``None`` if the table matches, otherwise a ``MismatchReport``
            for the first failing category.
        """
        return (
            self.compare_engine(desired, actual.engine)
            or self.compare_columns(desired, actual)
            or self.compare_order_by(desired, actual)
        )

    def compare_engine(self, desired: DesiredTable, engine: str) -> MismatchReport | None:
        """Check engine equality."""
        if engine != desired.engine:
            return MismatchReport(
                identity=desired.identity,
                category=MismatchCategory.ENGINE,
                expected=desired.engine,
                actual=engine,
            )
        return None

    def compare_columns(
        self, desired: DesiredTable, actual: ActualTable
    ) -> MismatchReport | None:
        """Check column count, then each declared column in order.

        A declared column without a comment is compared against an empty
        string, since the live side never reports a missing comment.
        """
        identity = desired.identity

        if len(desired.columns) != len(actual.columns):
            return MismatchReport(
                identity=identity,
                category=MismatchCategory.COLUMN_COUNT,
                expected=len(desired.columns),
                actual=len(actual.columns),
            )

        for expected in desired.columns:
            found = actual.columns.get(expected.name)
            if found is None:
                return MismatchReport(
                    identity=identity,
                    category=MismatchCategory.COLUMN,
                    column=expected.name,
                    expected=expected.name,
                    detail="presence",
                )

            if found.type != expected.type:
                return MismatchReport(
                    identity=identity,
                    category=MismatchCategory.COLUMN,
                    column=expected.name,
                    expected=expected.type,
                    actual=found.type,
                    detail="type",
                )

            expected_comment = expected.comment if expected.comment is not None else ""
            if found.comment != expected_comment:
                return MismatchReport(
                    identity=identity,
                    category=MismatchCategory.COLUMN,
                    column=expected.name,
                    expected=expected_comment,
                    actual=found.comment,
                    detail="comment",
                )

        return None

    def compare_order_by(
        self, desired: DesiredTable, actual: ActualTable
    ) -> MismatchReport | None:
        """Check the ORDER BY key positionally; skipped for unordered engines."""
        if not self.is_ordered_storage(actual.engine):
            return None

        expected = list(desired.order_by)
        found = list(actual.order_by)

        if len(expected) != len(found):
            return MismatchReport(
                identity=desired.identity,
                category=MismatchCategory.ORDER_BY,
                expected=expected,
                actual=found,
                detail=f"expected {len(expected)} columns, found {len(found)} columns",
            )

        for position, (want, got) in enumerate(zip(expected, found), start=1):
            if want != got:
                return MismatchReport(
                    identity=desired.identity,
                    category=MismatchCategory.ORDER_BY,
                    expected=expected,
                    actual=found,
                    detail=f"column {position}: expected '{want}', found '{got}'",
                )

        return None


def compare_table(desired: DesiredTable, actual: ActualTable) -> MismatchReport | None:
    """Compare using the default ordered-storage engine prefixes.

    Examples:
        >>> from chschema.schema.models import ActualTable, Column, DesiredTable
        >>> desired = DesiredTable(
        ...     name="logs", database="default", engine="Log",
        ...     columns=[Column(name="msg", type="String")],
        ... )
        >>> actual = ActualTable(engine="Log", columns={})
        >>> compare_table(desired, actual).category.value
        'column_count'
    """
    return SchemaComparator().compare(desired, actual)
