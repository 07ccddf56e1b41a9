"""Data models shared across snapflow."""

from snapflow.types.base import SnapflowBaseModel
from snapflow.types.results import (
    BatchResult,
    MappingCheck,
    RecordFailure,
    RuleValidationReport,
    SnapshotRunResult,
)
from snapflow.types.rules import FieldMap, FieldMapping, SnapshotRule, build_field_map

__all__ = [
    "SnapflowBaseModel",
    "SnapshotRule",
    "FieldMapping",
    "FieldMap",
    "build_field_map",
    "BatchResult",
    "RecordFailure",
    "SnapshotRunResult",
    "MappingCheck",
    "RuleValidationReport",
]
