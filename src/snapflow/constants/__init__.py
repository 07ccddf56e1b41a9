"""Constants module for snapflow.

This module has no dependencies on other snapflow modules.

Organization:
    - snapshot: Snapshot rule and run enumerations, default names
    - sql: Query type and supported sqlglot dialects
"""

from snapflow.constants.snapshot import (
    DEFAULT_ID_FIELD,
    DEFAULT_MAPPING_TABLE,
    DEFAULT_RULE_TABLE,
    RunStatus,
    SnapshotFrequency,
)
from snapflow.constants.sql import SUPPORTED_DIALECTS, QueryType

__all__ = [
    "SnapshotFrequency",
    "RunStatus",
    "DEFAULT_ID_FIELD",
    "DEFAULT_RULE_TABLE",
    "DEFAULT_MAPPING_TABLE",
    "QueryType",
    "SUPPORTED_DIALECTS",
]
