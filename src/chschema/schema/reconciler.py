"""Table lifecycle reconciliation: create, verify, destroy, import.

``TableReconciler`` orchestrates DDL synthesis, live introspection, and
comparison for one table per call.  It holds no mutable state between
calls; each operation performs at most three sequential round trips
through the ``DatabaseClient`` it was constructed with, never retries,
and lets task cancellation propagate through every awaited call.

In-place updates are not supported: ``update()`` always raises
``UnsupportedOperationError``.  Changing a table means destroy + create.

Usage:
    from chschema.schema.reconciler import TableReconciler

    reconciler = TableReconciler(adapter, default_database="default")

    identity = await reconciler.create(table)
    result = await reconciler.verify(identity, table)
    if result.gone:
        ...  # stop tracking the table
    imported = await reconciler.import_table("default.events")
    await reconciler.destroy(table)
"""

import logging

from chschema.adapters.base import DatabaseClient
from chschema.errors import (
    ExecutionError,
    InvalidIdentityError,
    SchemaMismatchError,
    TableNotFoundError,
    UnsupportedOperationError,
)
from chschema.schema.comparator import SchemaComparator
from chschema.schema.ddl import synthesize_create, synthesize_drop
from chschema.schema.introspector import TableIntrospector
from chschema.schema.models import (
    ActualTable,
    Column,
    DesiredTable,
    ImportedTable,
    TableIdentity,
    VerifyResult,
    VerifyStatus,
)

logger = logging.getLogger(__name__)

DEFAULT_DATABASE = "default"


class TableReconciler:
    """Converges live ClickHouse tables toward their declarations.

    Args:
        client: Data-access capability used for every round trip.
        default_database: Database applied to declarations without one.
        comparator: Comparator to use (default: ``SchemaComparator()``).
        introspector: Metadata reader to use (default: a
            ``TableIntrospector`` over *client*).
    """

    def __init__(
        self,
        client: DatabaseClient,
        default_database: str = DEFAULT_DATABASE,
        comparator: SchemaComparator | None = None,
        introspector: TableIntrospector | None = None,
    ) -> None:
        self._client = client
        self._default_database = default_database
        self._comparator = comparator or SchemaComparator()
        self._introspector = introspector or TableIntrospector(client)

    @property
    def default_database(self) -> str:
        return self._default_database

    @property
    def comparator(self) -> SchemaComparator:
        return self._comparator

    def resolve(self, table: DesiredTable) -> DesiredTable:
        """Return *table* with the default database applied if absent."""
        return table.with_default_database(self._default_database)

    # ------------------------------------------------------------------
    # Lifecycle operations
    # ------------------------------------------------------------------

    async def create(self, table: DesiredTable) -> str:
        """Create the declared table.

        Returns:
            The identity key ``database.name``.

        Raises:
            ExecutionError: If the CREATE statement fails.
        """
        table = self.resolve(table)
        identity = table.identity
        create_sql = synthesize_create(table)

        logger.info(f"Creating ClickHouse table {identity}: {create_sql}")

        await self._execute(create_sql, identity, "create")

        logger.info(f"Successfully created ClickHouse table {identity}")
        return identity

    async def verify(self, identity: str, desired: DesiredTable) -> VerifyResult:
        """Re-read the live table and compare it with its declaration.

        Args:
            identity: Tracked identity key ``database.name``.
            desired: The declaration the table was created from.

        Returns:
            ``VerifyResult`` with status ``VERIFIED``, or ``GONE`` if the
            table no longer exists.

        Raises:
            InvalidIdentityError: If *identity* is malformed or names a
                different table than *desired*.
            SchemaMismatchError: On the first divergence found.
            MetadataReadError: If reading metadata fails.
        """
        ident = TableIdentity.parse(identity)
        desired = self.resolve(desired)
        if desired.identity != str(ident):
            raise InvalidIdentityError(
                f"Identity {ident} does not match declared table {desired.identity}",
                identity=identity,
            )

        engine = await self._introspector.get_engine(ident.database, ident.name)
        if engine is None:
            logger.warning(f"Table {identity} no longer exists, removing from state")
            return VerifyResult(identity=identity, status=VerifyStatus.GONE)

        report = self._comparator.compare_engine(desired, engine)
        if report is not None:
            raise SchemaMismatchError(report)

        columns = await self._introspector.get_columns(ident.database, ident.name)

        order_by: list[str] = []
        if self._comparator.is_ordered_storage(engine):
            order_by = await self._introspector.get_order_by(ident.database, ident.name)
        else:
            logger.debug(f"Engine {engine} is not ordered storage, skipping ORDER BY for {identity}")

        actual = ActualTable(engine=engine, columns=columns, order_by=order_by)
        report = self._comparator.compare(desired, actual)
        if report is not None:
            raise SchemaMismatchError(report)

        logger.info(f"Table schema validation successful for {identity} (engine={engine})")
        return VerifyResult(identity=identity, status=VerifyStatus.VERIFIED, engine=engine)

    async def destroy(self, table: DesiredTable) -> None:
        """Drop the declared table (no error if it is already gone).

        Raises:
            ExecutionError: If the DROP statement fails.
        """
        table = self.resolve(table)
        identity = table.identity
        drop_sql = synthesize_drop(table)

        logger.info(f"Dropping ClickHouse table {identity}: {drop_sql}")

        await self._execute(drop_sql, identity, "drop")

        logger.info(f"Successfully dropped ClickHouse table {identity}")

    async def import_table(self, identity: str) -> ImportedTable:
        """Reconstruct a declaration from an existing live table.

        Columns come back in the database's position order.  An empty
        live comment is imported as no comment.

        Raises:
            InvalidIdentityError: If *identity* is malformed.
            TableNotFoundError: If the table does not exist.
            MetadataReadError: If reading metadata fails.
        """
        ident = TableIdentity.parse(identity)

        logger.info(f"Importing ClickHouse table {identity}")

        engine = await self._introspector.get_engine(ident.database, ident.name)
        if engine is None:
            raise TableNotFoundError(
                f"Table {identity} does not exist in ClickHouse",
                identity=identity,
            )

        actual_columns = await self._introspector.get_columns(ident.database, ident.name)
        columns = [
            Column(name=col.name, type=col.type, comment=col.comment or None)
            for col in actual_columns.values()
        ]

        order_by: list[str] = []
        if self._comparator.is_ordered_storage(engine):
            order_by = await self._introspector.get_order_by(ident.database, ident.name)

        table = DesiredTable(
            name=ident.name,
            database=ident.database,
            engine=engine,
            columns=columns,
            order_by=order_by,
        )

        logger.info(
            f"Successfully imported ClickHouse table {identity} "
            f"(engine={engine}, columns={len(columns)})"
        )
        return ImportedTable(identity=identity, table=table)

    async def update(self, current: DesiredTable, desired: DesiredTable) -> None:
        """In-place updates are not supported.

        Raises:
            UnsupportedOperationError: Always.
        """
        identity = self.resolve(current).identity
        raise UnsupportedOperationError(
            f"Update is not implemented for {identity}: "
            "destroy and re-create the table to change it",
            identity=identity,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _execute(self, sql: str, identity: str, action: str) -> None:
        try:
            await self._client.execute(sql)
        except Exception as e:
            raise ExecutionError(
                f"Could not {action} table {identity}: {e}",
                identity=identity,
                statement=sql,
            ) from e
