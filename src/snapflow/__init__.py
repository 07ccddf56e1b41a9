from snapflow.__version__ import __version__

from snapflow.api import (
    run_snapshot,
    validate_snapshot_rule,
)
from snapflow.snapshot import (
    ScheduledSnapshot,
    SnapshotBackend,
    SnapshotExecutor,
    SnapshotRuleValidator,
    create_sql_backend,
)
from snapflow.types import (
    FieldMapping,
    RuleValidationReport,
    SnapshotRule,
    SnapshotRunResult,
)
from snapflow.constants import RunStatus, SnapshotFrequency

from snapflow.common.exceptions import (
    ConfigurationError,
    ErrorCode,
    NotFoundError,
    PersistenceError,
    QueryError,
    SchemaResolutionError,
    SnapflowError,
    UnknownEntityError,
)

from snapflow.utils import retry, catch_exception, traced


__all__ = [
    "__version__",

    # Engine
    "SnapshotExecutor",
    "ScheduledSnapshot",
    "SnapshotRuleValidator",
    "SnapshotBackend",
    "create_sql_backend",

    # Models
    "SnapshotRule",
    "FieldMapping",
    "SnapshotRunResult",
    "RuleValidationReport",
    "RunStatus",
    "SnapshotFrequency",

    # Exceptions (public API)
    "SnapflowError",
    "ErrorCode",
    "ConfigurationError",
    "NotFoundError",
    "SchemaResolutionError",
    "UnknownEntityError",
    "QueryError",
    "PersistenceError",

    # Utilities (public API)
    "retry",
    "catch_exception",
    "traced",

    # api
    "run_snapshot",
    "validate_snapshot_rule",
]
