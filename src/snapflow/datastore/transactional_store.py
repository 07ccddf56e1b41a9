"""Transactional batch writer with checkpoint support.

A checkpoint is a dedicated connection holding one open transaction. Batches
written while a checkpoint is active go through that connection, so
releasing the checkpoint commits them and rolling it back discards them.
Each batch is additionally wrapped in a savepoint, which makes an atomic
batch all-or-nothing even inside a longer transaction.
"""

from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from sqlalchemy import insert
from sqlalchemy.engine import Connection, RootTransaction
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from snapflow.catalog.sql import SqlEntityType, SqlSchemaCatalog
from snapflow.common.exceptions import (
    ErrorCode,
    PersistenceError,
    persistence_error,
    unknown_entity_error,
)
from snapflow.compute.engines.base import BaseSQLEngine
from snapflow.logging import get_logger
from snapflow.protocols import Record
from snapflow.types import BatchResult, RecordFailure
from snapflow.utils.decorators import traced

logger = get_logger(__name__)


class Checkpoint:
    """Handle on an open store transaction.

    Used as a context manager, the checkpoint is released when the block
    completes and rolled back when it raises, unless it was already closed
    inside the block.

    Example:
        >>> with store.checkpoint() as cp:
        ...     store.commit_batch(records)
        ...     if dry_run:
        ...         store.rollback(cp)
    """

    def __init__(self, store: 'SqlTransactionalStore', connection: Connection, transaction: RootTransaction):
        self._store = store
        self.connection = connection
        self.transaction = transaction
        self._closed = False

    @property
    def active(self) -> bool:
        return not self._closed and self.transaction.is_active

    def _close(self) -> None:
        self._closed = True
        self.connection.close()

    def __enter__(self) -> 'Checkpoint':
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if self._closed:
            return False
        if exc_type is None:
            self._store.release(self)
        else:
            self._store.rollback(self)
        return False


def _indexed_rows(records: Sequence[Record]) -> List[Tuple[int, Dict[str, Any]]]:
    return [(index, record.to_dict()) for index, record in enumerate(records)]


class SqlTransactionalStore:
    """Persist records into the tables their entity types map to.

    Args:
        sql_engine: Engine used to open connections
        catalog: Catalog resolving entity names to reflected tables
    """

    def __init__(self, sql_engine: BaseSQLEngine, catalog: SqlSchemaCatalog):
        self.sql_engine = sql_engine
        self.catalog = catalog
        self._active: Optional[Checkpoint] = None

    @property
    def active_checkpoint(self) -> Optional[Checkpoint]:
        if self._active is not None and not self._active.active:
            self._active = None
        return self._active

    def checkpoint(self) -> Checkpoint:
        """Open a checkpoint; later batches are written inside it.

        Raises:
            PersistenceError: If a checkpoint is already active or the
                transaction cannot be started
        """
        if self.active_checkpoint is not None:
            raise persistence_error(
                "A checkpoint is already active on this store",
                error_code=ErrorCode.CHECKPOINT_ERROR,
            )

        try:
            connection = self.sql_engine.connect()
        except SQLAlchemyError as exc:
            raise persistence_error(
                "Failed to open a checkpoint",
                cause=exc,
                error_code=ErrorCode.CHECKPOINT_ERROR,
            )
        try:
            transaction = connection.begin()
        except SQLAlchemyError as exc:
            connection.close()
            raise persistence_error(
                "Failed to open a checkpoint",
                cause=exc,
                error_code=ErrorCode.CHECKPOINT_ERROR,
            )

        self._active = Checkpoint(self, connection, transaction)
        logger.debug("store.checkpoint.opened")
        return self._active

    def _owned(self, checkpoint: Checkpoint) -> None:
        if not isinstance(checkpoint, Checkpoint) or checkpoint is not self._active or not checkpoint.active:
            raise persistence_error(
                "Checkpoint is not active on this store",
                error_code=ErrorCode.CHECKPOINT_ERROR,
            )

    def rollback(self, checkpoint: Checkpoint) -> None:
        """Discard every write since ``checkpoint`` and close it.

        Raises:
            PersistenceError: If the checkpoint is not active or the rollback fails
        """
        self._owned(checkpoint)
        try:
            checkpoint.transaction.rollback()
        except SQLAlchemyError as exc:
            raise persistence_error(
                "Failed to roll back to checkpoint",
                cause=exc,
                error_code=ErrorCode.CHECKPOINT_ERROR,
            )
        finally:
            checkpoint._close()
            self._active = None
        logger.debug("store.checkpoint.rolled_back")

    def release(self, checkpoint: Checkpoint) -> None:
        """Keep every write since ``checkpoint`` and close it.

        Raises:
            PersistenceError: If the checkpoint is not active or the commit fails
        """
        self._owned(checkpoint)
        try:
            checkpoint.transaction.commit()
        except SQLAlchemyError as exc:
            raise persistence_error(
                "Failed to commit checkpoint",
                cause=exc,
                error_code=ErrorCode.CHECKPOINT_ERROR,
            )
        finally:
            checkpoint._close()
            self._active = None
        logger.debug("store.checkpoint.released")

    def _resolve_table(self, records: Sequence[Record]) -> SqlEntityType:
        entity_name = records[0].entity_name
        mixed = {record.entity_name for record in records if record.entity_name != entity_name}
        if mixed:
            raise persistence_error(
                f"Batch mixes entity types: {sorted(mixed | {entity_name})}",
                entity_name=entity_name,
                record_count=len(records),
            )

        entity_type = self.catalog.resolve_entity_type(entity_name)
        if entity_type is None:
            raise unknown_entity_error(entity_name, role="target")
        return entity_type

    @contextmanager
    def _connection(self) -> Iterator[Connection]:
        checkpoint = self.active_checkpoint
        if checkpoint is not None:
            yield checkpoint.connection
        else:
            with self.sql_engine.engine.begin() as connection:
                yield connection

    @staticmethod
    def _insert_atomic(connection: Connection, entity_type: SqlEntityType, rows: List[Tuple[int, Dict[str, Any]]]) -> None:
        # executemany needs one key set per statement
        batches: Dict[Tuple[str, ...], List[Dict[str, Any]]] = {}
        for _, row in rows:
            batches.setdefault(tuple(row), []).append(row)

        with connection.begin_nested():
            for params in batches.values():
                connection.execute(insert(entity_type.table), params)

    @staticmethod
    def _insert_each(
        connection: Connection,
        entity_type: SqlEntityType,
        rows: List[Tuple[int, Dict[str, Any]]],
    ) -> List[RecordFailure]:
        failures: List[RecordFailure] = []
        for index, row in rows:
            try:
                with connection.begin_nested():
                    connection.execute(insert(entity_type.table), row)
            except SQLAlchemyError as exc:
                failures.append(RecordFailure(index=index, message=str(getattr(exc, "orig", None) or exc)))
        return failures

    @traced(
        span_name="snapflow.datastore.commit_batch",
        attribute_getter=lambda self, records, all_or_nothing=True: {
            "snapflow.batch.size": len(records),
            "snapflow.batch.all_or_nothing": all_or_nothing,
        },
    )
    def commit_batch(self, records: Sequence[Record], all_or_nothing: bool = True) -> BatchResult:
        """Insert ``records`` into their entity's table.

        Args:
            records: Records of a single entity type
            all_or_nothing: Write every record or none. When False, each
                record gets its own savepoint and rejected records are
                reported in the result

        Returns:
            BatchResult describing what was written

        Raises:
            PersistenceError: If an atomic batch is rejected by the database
            UnknownEntityError: If the records' entity type does not exist
        """
        if not records:
            return BatchResult(entity="", attempted=0, written=0)

        entity_type = self._resolve_table(records)
        rows = _indexed_rows(records)

        try:
            with self._connection() as connection:
                if all_or_nothing:
                    self._insert_atomic(connection, entity_type, rows)
                    failures: List[RecordFailure] = []
                else:
                    failures = self._insert_each(connection, entity_type, rows)
        except PersistenceError:
            raise
        except SQLAlchemyError as exc:
            code = ErrorCode.CONSTRAINT_VIOLATION if isinstance(exc, IntegrityError) else ErrorCode.PERSISTENCE_ERROR
            logger.error(
                "store.batch.failed",
                extra={"entity": entity_type.name, "record_count": len(records), "error": str(exc)},
            )
            raise persistence_error(
                f"Failed to write {len(records)} record(s) to '{entity_type.name}'",
                entity_name=entity_type.name,
                record_count=len(records),
                cause=exc,
                error_code=code,
            )

        result = BatchResult(
            entity=entity_type.name,
            attempted=len(records),
            written=len(records) - len(failures),
            failures=failures,
        )
        logger.info(
            "store.batch.written",
            extra={
                "entity": entity_type.name,
                "attempted": result.attempted,
                "written": result.written,
                "failed": len(failures),
            },
        )
        return result
