"""Common error types shared by every snapflow layer."""

from snapflow.common.exceptions import (
    ConfigurationError,
    ErrorCode,
    NotFoundError,
    PersistenceError,
    QueryError,
    SchemaResolutionError,
    SnapflowError,
    UnknownEntityError,
    malformed_mapping_error,
    persistence_error,
    query_execution_error,
    rule_not_found_error,
    unknown_entity_error,
    unknown_field_error,
)

__all__ = [
    "ErrorCode",
    "SnapflowError",
    "ConfigurationError",
    "NotFoundError",
    "SchemaResolutionError",
    "UnknownEntityError",
    "QueryError",
    "PersistenceError",
    "rule_not_found_error",
    "malformed_mapping_error",
    "unknown_entity_error",
    "unknown_field_error",
    "query_execution_error",
    "persistence_error",
]
