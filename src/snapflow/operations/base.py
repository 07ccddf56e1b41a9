"""Base operation definitions.

Operations are data structures describing what database action should be
performed, independent of how it is rendered or executed.
"""

import re
from typing import Dict

from pydantic import Field, field_validator

from snapflow.constants import QueryType
from snapflow.types.base import SnapflowBaseModel

IDENTIFIER_PATTERN = re.compile(r'^[a-zA-Z_][a-zA-Z0-9_$#@]*(\.[a-zA-Z_][a-zA-Z0-9_$#@]*)?$')


def validate_identifier(value: str, label: str) -> str:
    """Validate an entity or field identifier.

    Args:
        value: Identifier to validate
        label: Name used in the error message

    Returns:
        The identifier unchanged

    Raises:
        ValueError: If the identifier is empty, too long or contains
            characters outside the allowed set
    """
    if not value:
        raise ValueError(f"{label} cannot be empty")
    if len(value) > 128:
        raise ValueError(f"{label} too long: maximum 128 characters")
    if not IDENTIFIER_PATTERN.match(value):
        raise ValueError(
            f"Invalid {label}: '{value}'. "
            f"Must start with letter or underscore, and contain only alphanumeric, "
            f"underscore, $, # or @ characters (optionally schema-qualified)."
        )
    return value


class BaseOperation(SnapflowBaseModel):
    """Base class for all database operations.

    Attributes:
        operation_type: The type of operation to perform
        object_name: Entity (table) the operation targets
        logging_context: Extra key/values attached to telemetry
    """
    operation_type: QueryType
    object_name: str = Field(..., min_length=1, max_length=128)
    logging_context: Dict[str, str] = Field(default_factory=dict)

    @field_validator('object_name')
    @classmethod
    def validate_object_name(cls, v: str, info) -> str:
        return validate_identifier(v, info.field_name)

    def telemetry_fields(self) -> Dict[str, str]:
        """Return flattened telemetry fields describing this operation."""
        payload: Dict[str, str] = {
            "operation.type": getattr(self.operation_type, "value", str(self.operation_type)),
            "operation.object": self.object_name,
        }
        for key, value in (self.logging_context or {}).items():
            if value is not None:
                payload[f"operation.ctx.{key}"] = str(value)
        return payload
