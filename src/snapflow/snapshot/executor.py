"""Snapshot execution.

``SnapshotExecutor`` resolves a rule when it is constructed and performs one
snapshot per ``run()`` call:

1. Execute the rule's selection query. No matches ends the run.
2. Resolve the target entity type through the schema catalog.
3. Translate every source record into a new target record.
4. Write the target records as one all-or-nothing batch inside a checkpoint.
5. Release the checkpoint, or roll it back for a dry run.

Any failure aborts the run. The checkpoint is closed on every path, so a
failed or rehearsed run leaves the store as it found it.
"""

import time
import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING, List, Optional, Tuple

from snapflow.common.exceptions import unknown_entity_error
from snapflow.constants import RunStatus
from snapflow.logging import get_logger
from snapflow.logging.filters import rule_id_var, run_id_var
from snapflow.monitoring import MetricsCollector, SnapshotRunMetrics, get_metrics_collector
from snapflow.protocols import Record
from snapflow.query_builder import SnapshotQueryBuilder
from snapflow.snapshot.backend import SnapshotBackend, get_backend
from snapflow.snapshot.resolver import RuleResolver, identifier_field
from snapflow.snapshot.translator import RecordTranslator
from snapflow.types import FieldMap, SnapshotRule, SnapshotRunResult
from snapflow.utils.decorators import traced

if TYPE_CHECKING:
    from snapflow.settings import _Settings

logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SnapshotExecutor:
    """Run one snapshot rule.

    Args:
        rule_id: Identifier of the rule to run
        dry_run: Write and validate the batch, then roll it back
        backend: Services to use. Defaults to the process-wide SQL backend
        settings: Settings to use. Defaults to ``get_settings()``
        metrics: Metrics collector. Defaults to the process-wide collector

    Raises:
        NotFoundError: If the rule id matches zero or several rules
        ConfigurationError: If the rule's mappings are malformed
        QueryError: If the rule names an invalid entity or field identifier
        SchemaResolutionError: If a rule without mappings needs its source
            entity's key and the catalog cannot be read

    Example:
        >>> executor = SnapshotExecutor("daily-finance-accounts", dry_run=True)
        >>> result = executor.run()
        >>> result.status
        'ROLLED_BACK'
    """

    def __init__(
        self,
        rule_id: str,
        dry_run: bool = False,
        *,
        backend: Optional[SnapshotBackend] = None,
        settings: Optional['_Settings'] = None,
        metrics: Optional[MetricsCollector] = None,
    ):
        if settings is None:
            from snapflow.settings import get_settings
            settings = get_settings()

        self.settings = settings
        self.rule_id = str(rule_id)
        self.dry_run = dry_run
        self.backend = backend or get_backend()
        self.metrics = metrics or get_metrics_collector()
        self.builder = SnapshotQueryBuilder(id_field=settings.snapshot.id_field)

        self._rule, self._field_map = RuleResolver(self.backend.config_store).resolve(self.rule_id)
        source_fields = list(self._field_map) or [
            identifier_field(self.backend.catalog, self._rule.source_entity, settings.snapshot.id_field)
        ]
        self._query = self.builder.build_snapshot_query(
            source_fields,
            self._rule.source_entity,
            self._rule.entry_criteria,
        )

    @property
    def rule(self) -> SnapshotRule:
        return self._rule

    @property
    def field_map(self) -> FieldMap:
        return dict(self._field_map)

    @property
    def query(self) -> str:
        return self._query

    def _log_extra(self, run_id: str, **fields) -> dict:
        return {
            "rule_id": self.rule_id,
            "run_id": run_id,
            "source_entity": self._rule.source_entity,
            "target_entity": self._rule.target_entity,
            "dry_run": self.dry_run,
            **fields,
        }

    def _build_targets(self, sources: List[Record]) -> List[Record]:
        target_type = self.backend.catalog.resolve_entity_type(self._rule.target_entity)
        if target_type is None:
            raise unknown_entity_error(self._rule.target_entity, role="target")
        return RecordTranslator(self._field_map).translate_all(sources, target_type)

    def _persist(self, targets: List[Record]) -> Tuple[RunStatus, int]:
        store = self.backend.store
        checkpoint = store.checkpoint()
        keep = False
        try:
            batch = store.commit_batch(targets, all_or_nothing=True)
            keep = not self.dry_run
        finally:
            if keep:
                store.release(checkpoint)
            else:
                store.rollback(checkpoint)

        if self.dry_run:
            return RunStatus.ROLLED_BACK, 0
        return RunStatus.COMMITTED, batch.written

    def _record_metrics(self, records_read: int, records_written: int, duration: float,
                        error: Optional[Exception] = None) -> None:
        self.metrics.record_run(
            SnapshotRunMetrics(
                rule_id=self.rule_id,
                source_entity=self._rule.source_entity,
                target_entity=self._rule.target_entity,
                records_read=records_read,
                records_written=records_written,
                duration_seconds=duration,
                success=error is None,
                dry_run=self.dry_run,
                error_type=type(error).__name__ if error is not None else None,
            )
        )

    @traced(
        span_name="snapflow.snapshot.run",
        attribute_getter=lambda self: {
            "snapflow.rule_id": self.rule_id,
            "snapflow.source_entity": self._rule.source_entity,
            "snapflow.target_entity": self._rule.target_entity,
            "snapflow.dry_run": self.dry_run,
        },
    )
    def run(self) -> SnapshotRunResult:
        """Take one snapshot.

        Returns:
            SnapshotRunResult describing what happened

        Raises:
            QueryError: If the selection query is rejected
            UnknownEntityError: If the target entity type does not exist
            SchemaResolutionError: If a mapped field does not exist
            PersistenceError: If the batch cannot be written
        """
        run_id = uuid.uuid4().hex
        rule_token = rule_id_var.set(self.rule_id)
        run_token = run_id_var.set(run_id)
        started_at = _utcnow()
        start = time.perf_counter()
        source_count = 0
        written_count = 0

        logger.info("snapshot.run.start", extra=self._log_extra(run_id, query=self._query))
        try:
            sources = self.backend.query_service.execute_query(self._query)
            source_count = len(sources)

            if not sources:
                status = RunStatus.NO_MATCHES
                logger.info("snapshot.run.no_matches", extra=self._log_extra(run_id))
            else:
                targets = self._build_targets(sources)
                status, written_count = self._persist(targets)
        except Exception as exc:
            duration = time.perf_counter() - start
            self._record_metrics(source_count, 0, duration, error=exc)
            logger.error(
                "snapshot.run.failed",
                extra=self._log_extra(
                    run_id,
                    source_count=source_count,
                    duration_seconds=round(duration, 6),
                    error=str(exc),
                    error_type=type(exc).__name__,
                ),
            )
            raise
        finally:
            run_id_var.reset(run_token)
            rule_id_var.reset(rule_token)

        duration = time.perf_counter() - start
        self._record_metrics(source_count, written_count, duration)

        result = SnapshotRunResult(
            rule_id=self.rule_id,
            run_id=run_id,
            status=status,
            dry_run=self.dry_run,
            source_count=source_count,
            written_count=written_count,
            query=self._query,
            started_at=started_at,
            finished_at=_utcnow(),
        )
        logger.info(
            "snapshot.run.finish",
            extra=self._log_extra(
                run_id,
                status=result.status,
                source_count=source_count,
                written_count=written_count,
                duration_seconds=round(duration, 6),
            ),
        )
        return result
