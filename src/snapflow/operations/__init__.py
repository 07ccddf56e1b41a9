"""Database operations module.

Operations are pure data that query builders render into SQL text.
"""

from snapflow.operations.base import BaseOperation, validate_identifier
from snapflow.operations.dml import Select

__all__ = [
    "BaseOperation",
    "Select",
    "validate_identifier",
]
