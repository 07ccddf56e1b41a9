"""Result models returned by snapshot runs, batch writes and validation."""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from snapflow.constants import RunStatus
from snapflow.types.base import SnapflowBaseModel


class RecordFailure(SnapflowBaseModel):
    """A record rejected by the store in a non-atomic batch."""

    index: int
    message: str


class BatchResult(SnapflowBaseModel):
    """Outcome of ``commit_batch``."""

    entity: str
    attempted: int = 0
    written: int = 0
    failures: List[RecordFailure] = Field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.failures and self.written == self.attempted


class SnapshotRunResult(SnapflowBaseModel):
    """Outcome of one ``SnapshotExecutor.run()`` call.

    Attributes:
        rule_id: Rule that was executed
        run_id: Unique id of this run
        status: COMMITTED, ROLLED_BACK or NO_MATCHES
        dry_run: Whether the run was a rehearsal
        source_count: Number of source records selected
        written_count: Number of target records left in the store
        query: Query text sent to the query service
        started_at: Run start (UTC)
        finished_at: Run end (UTC)
    """

    rule_id: str
    run_id: str
    status: RunStatus
    dry_run: bool = False
    source_count: int = 0
    written_count: int = 0
    query: Optional[str] = None
    started_at: datetime
    finished_at: datetime

    @property
    def duration_seconds(self) -> float:
        return (self.finished_at - self.started_at).total_seconds()


class MappingCheck(SnapflowBaseModel):
    """Validation outcome for a single field mapping."""

    source_field: str
    target_field: str
    valid: bool


class RuleValidationReport(SnapflowBaseModel):
    """Aggregated outcome of all pre-flight checks for one rule."""

    rule_id: str
    entities_valid: bool
    criteria_valid: bool
    mappings: List[MappingCheck] = Field(default_factory=list)

    @property
    def fields_valid(self) -> bool:
        return all(check.valid for check in self.mappings)

    @property
    def is_valid(self) -> bool:
        return self.entities_valid and self.criteria_valid and self.fields_valid

    @property
    def invalid_mappings(self) -> List[MappingCheck]:
        return [check for check in self.mappings if not check.valid]
