"""Data Manipulation Language (DML) operations."""

from typing import List, Literal, Optional

from pydantic import Field, field_validator

from snapflow.constants import QueryType
from snapflow.operations.base import BaseOperation, validate_identifier


class Select(BaseOperation):
    """Projection of named columns from one entity, optionally filtered.

    ``where_clause`` is a predicate fragment without the ``WHERE`` keyword
    and is rendered verbatim.
    """
    operation_type: Literal[QueryType.SELECT] = Field(
        default=QueryType.SELECT,
        frozen=True
    )

    columns: List[str] = Field(..., min_length=1)
    where_clause: Optional[str] = Field(default=None)

    @field_validator('columns')
    @classmethod
    def validate_columns(cls, v: List[str]) -> List[str]:
        """Validate every column name and drop repeated ones, keeping order."""
        unique: List[str] = []
        for column in v:
            validate_identifier(column, "column")
            if column not in unique:
                unique.append(column)
        return unique
