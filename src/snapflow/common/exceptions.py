from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(Enum):
    """Standard error codes for snapflow operations.

    Error codes categorize failures without requiring a dedicated exception
    class for every situation. Each category has its own prefix so that log
    searches and alerts can match a whole family of failures.

    Attributes:
        CONFIG_*: Rule and mapping configuration errors
        RESOURCE_*: Entity or field resolution errors
        EXECUTION_*: Query execution errors
        DATA_*: Persistence and storage constraint errors
    """
    # Configuration errors
    CONFIG_ERROR = "CONFIG_001"
    RULE_NOT_FOUND = "CONFIG_002"
    DUPLICATE_RULE = "CONFIG_003"
    MALFORMED_MAPPING = "CONFIG_004"

    # Resolution errors
    RESOURCE_NOT_FOUND = "RESOURCE_001"
    UNKNOWN_ENTITY = "RESOURCE_002"
    UNKNOWN_FIELD = "RESOURCE_003"

    # Execution errors
    EXECUTION_ERROR = "EXECUTION_001"
    QUERY_EXECUTION_ERROR = "EXECUTION_002"

    # Persistence errors
    PERSISTENCE_ERROR = "DATA_001"
    CONSTRAINT_VIOLATION = "DATA_002"
    CHECKPOINT_ERROR = "DATA_003"


class SnapflowError(Exception):
    """Base exception for all snapflow errors.

    Attributes:
        message: Error message
        error_code: Error code from ErrorCode enum
        details: Additional error details
        cause: Optional underlying exception
    """

    default_code: ErrorCode = ErrorCode.EXECUTION_ERROR

    def __init__(
        self,
        message: str,
        error_code: Optional[ErrorCode] = None,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        """Initialize snapflow error.

        Args:
            message: Error message
            error_code: Error code, defaults to the class ``default_code``
            details: Additional error details
            cause: Optional underlying exception
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.default_code
        self.details = details or {}
        self.cause = cause

        # Lazy import to avoid circular dependency
        from snapflow.logging import get_logger
        get_logger(__name__).debug(
            message,
            extra={
                "error_code": self.error_code.value,
                "error_type": type(self).__name__,
                "details": self.details,
            },
        )

    def __str__(self) -> str:
        """String representation of the error."""
        msg = f"[{self.error_code.value}] {self.message}"
        if self.cause:
            msg = f"{msg} (caused by: {type(self.cause).__name__}: {str(self.cause)})"
        return msg

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for serialization."""
        return {
            "type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code.value,
            "error_name": self.error_code.name,
            "details": self.details,
        }


class ConfigurationError(SnapflowError):
    """Rule or field-mapping configuration could not be loaded."""
    default_code = ErrorCode.CONFIG_ERROR


class NotFoundError(ConfigurationError):
    """A rule identifier matched zero or several configuration records."""
    default_code = ErrorCode.RULE_NOT_FOUND


class SchemaResolutionError(SnapflowError):
    """An entity or field name does not resolve in the schema catalog."""
    default_code = ErrorCode.RESOURCE_NOT_FOUND


class UnknownEntityError(SchemaResolutionError):
    """An entity type name is not registered in the schema catalog."""
    default_code = ErrorCode.UNKNOWN_ENTITY


class QueryError(SnapflowError):
    """Query was rejected by the datastore (syntax, permission, ...)."""
    default_code = ErrorCode.QUERY_EXECUTION_ERROR


class PersistenceError(SnapflowError):
    """Writing or rolling back target records failed."""
    default_code = ErrorCode.PERSISTENCE_ERROR


def _truncate(query: str, limit: int = 500) -> str:
    return query[:limit] + "..." if len(query) > limit else query


# Helper functions for common error scenarios
def rule_not_found_error(rule_id: str, matches: int = 0) -> NotFoundError:
    """Create the error raised when a rule id does not match exactly one rule.

    Args:
        rule_id: Rule identifier that was looked up
        matches: Number of configuration records that matched

    Returns:
        NotFoundError with RULE_NOT_FOUND or DUPLICATE_RULE code
    """
    if matches > 1:
        return NotFoundError(
            f"Snapshot rule '{rule_id}' is ambiguous: {matches} records match",
            error_code=ErrorCode.DUPLICATE_RULE,
            details={"rule_id": rule_id, "matches": matches},
        )
    return NotFoundError(
        f"Snapshot rule '{rule_id}' not found",
        details={"rule_id": rule_id, "matches": matches},
    )


def malformed_mapping_error(
    rule_id: str,
    message: str,
    mapping: Optional[Dict[str, Any]] = None,
) -> ConfigurationError:
    """Create a malformed field-mapping error.

    Args:
        rule_id: Owning rule identifier
        message: What is wrong with the mapping data
        mapping: Raw mapping payload, if available

    Returns:
        ConfigurationError with MALFORMED_MAPPING code
    """
    details: Dict[str, Any] = {"rule_id": rule_id}
    if mapping is not None:
        details["mapping"] = {k: str(v) for k, v in mapping.items()}
    return ConfigurationError(
        message,
        error_code=ErrorCode.MALFORMED_MAPPING,
        details=details,
    )


def unknown_entity_error(entity_name: str, role: Optional[str] = None) -> UnknownEntityError:
    """Create an unknown entity error.

    Args:
        entity_name: Entity name that failed to resolve
        role: Role of the entity in the rule (``source`` or ``target``)

    Returns:
        UnknownEntityError with UNKNOWN_ENTITY code
    """
    details: Dict[str, Any] = {"entity": entity_name}
    if role:
        details["role"] = role
    return UnknownEntityError(
        f"Entity type '{entity_name}' is not registered in the schema catalog",
        details=details,
    )


def unknown_field_error(entity_name: str, field_name: str) -> SchemaResolutionError:
    """Create an unknown field error.

    Args:
        entity_name: Entity the field was looked up on
        field_name: Field name that does not exist

    Returns:
        SchemaResolutionError with UNKNOWN_FIELD code
    """
    return SchemaResolutionError(
        f"Field '{field_name}' does not exist on entity '{entity_name}'",
        error_code=ErrorCode.UNKNOWN_FIELD,
        details={"entity": entity_name, "field": field_name},
    )


def query_execution_error(query: str, original_error: Exception) -> QueryError:
    """Create a query execution error.

    Args:
        query: Query that failed
        original_error: The underlying exception

    Returns:
        QueryError with QUERY_EXECUTION_ERROR code
    """
    return QueryError(
        f"Query execution failed: {str(original_error)}",
        details={"query": _truncate(query)},
        cause=original_error,
    )


def persistence_error(
    message: str,
    entity_name: Optional[str] = None,
    record_count: Optional[int] = None,
    cause: Optional[Exception] = None,
    error_code: ErrorCode = ErrorCode.PERSISTENCE_ERROR,
) -> PersistenceError:
    """Create a persistence error.

    Args:
        message: Error message
        entity_name: Target entity being written
        record_count: Size of the batch that failed
        cause: Underlying storage exception
        error_code: Specific DATA_* code

    Returns:
        PersistenceError carrying the batch details
    """
    details: Dict[str, Any] = {}
    if entity_name:
        details["entity"] = entity_name
    if record_count is not None:
        details["record_count"] = record_count
    return PersistenceError(message, error_code=error_code, details=details, cause=cause)
