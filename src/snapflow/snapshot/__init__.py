"""Snapshot engine: rule resolution, translation, execution and validation."""

from snapflow.snapshot.backend import SnapshotBackend, create_sql_backend, get_backend
from snapflow.snapshot.executor import SnapshotExecutor
from snapflow.snapshot.invocation import ScheduledSnapshot
from snapflow.snapshot.resolver import ResolvedRule, RuleResolver, identifier_field
from snapflow.snapshot.translator import RecordTranslator
from snapflow.snapshot.validators import SnapshotRuleValidator

__all__ = [
    "SnapshotBackend",
    "create_sql_backend",
    "get_backend",
    "SnapshotExecutor",
    "ScheduledSnapshot",
    "ResolvedRule",
    "RuleResolver",
    "identifier_field",
    "RecordTranslator",
    "SnapshotRuleValidator",
]
