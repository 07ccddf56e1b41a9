"""Protocols for the datastore services consumed by the snapshot engine."""

from typing import Any, List, Protocol, Sequence, runtime_checkable

from snapflow.protocols.catalog import Record
from snapflow.types import BatchResult, FieldMapping, SnapshotRule


@runtime_checkable
class QueryService(Protocol):
    """Executes dynamically built selection queries."""

    def execute_query(self, query: str) -> List[Record]:
        """Run ``query`` and return every matching record.

        Raises:
            QueryError: On syntax errors, unknown fields or denied access
        """
        ...


@runtime_checkable
class CheckpointHandle(Protocol):
    """A point in the store's history that writes can be rolled back to."""

    @property
    def active(self) -> bool:
        """False once the checkpoint was released or rolled back."""
        ...


@runtime_checkable
class TransactionalStore(Protocol):
    """Batch writer with checkpoint/rollback support."""

    def checkpoint(self) -> Any:
        """Take a checkpoint; subsequent batches are written inside it."""
        ...

    def commit_batch(self, records: Sequence[Record], all_or_nothing: bool = True) -> BatchResult:
        """Persist ``records``.

        With ``all_or_nothing`` every record is written or none is.

        Raises:
            PersistenceError: If an atomic batch fails
        """
        ...

    def rollback(self, checkpoint: Any) -> None:
        """Discard every write made since ``checkpoint`` and release it."""
        ...

    def release(self, checkpoint: Any) -> None:
        """Keep every write made since ``checkpoint`` and release it."""
        ...


@runtime_checkable
class ConfigurationStore(Protocol):
    """Read access to snapshot rule configuration."""

    def get_rules(self, rule_id: str) -> List[SnapshotRule]:
        """Return every rule whose id equals ``rule_id``."""
        ...

    def get_field_mappings(self, rule_id: str) -> List[FieldMapping]:
        """Return the field mappings owned by ``rule_id`` in stored order."""
        ...
