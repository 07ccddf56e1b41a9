"""Snapshot rule configuration models.

A snapshot rule names a source entity, a target entity and an entry
criteria predicate; its field mappings say which source field feeds which
target field. Both are read from configuration storage and never modified
by the engine.
"""

from typing import Dict, Iterable, Optional

from pydantic import ConfigDict, Field, field_validator

from snapflow.constants import SnapshotFrequency
from snapflow.types.base import SnapflowBaseModel

FieldMap = Dict[str, str]
"""Source field name -> target field name."""


class SnapshotRule(SnapflowBaseModel):
    """A configured snapshot pipeline.

    Attributes:
        id: Rule identifier
        source_entity: Entity type records are selected from
        target_entity: Entity type snapshot records are created in
        entry_criteria: Predicate fragment without a leading ``WHERE``
        frequency: Opaque schedule descriptor (``DAILY``, a cron string, ...),
            passed through unchanged and read by the scheduler only
        name: Optional display name
        description: Optional free text
        active: Whether the scheduler should invoke the rule
    """
    model_config = ConfigDict(frozen=True, use_enum_values=False)

    id: str = Field(..., min_length=1)
    source_entity: str = Field(..., min_length=1)
    target_entity: str = Field(..., min_length=1)
    entry_criteria: str = Field(default="")
    frequency: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    active: bool = True

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        return str(v) if v is not None else v

    @field_validator("frequency", mode="before")
    @classmethod
    def coerce_frequency(cls, v):
        if isinstance(v, SnapshotFrequency):
            return v.value
        return str(v) if v is not None else v

    @field_validator("entry_criteria", mode="before")
    @classmethod
    def normalize_criteria(cls, v):
        return "" if v is None else str(v).strip()


class FieldMapping(SnapflowBaseModel):
    """One source field -> target field pairing owned by a rule."""
    model_config = ConfigDict(frozen=True)

    rule_id: str = Field(..., min_length=1)
    source_field: str
    target_field: str

    @field_validator("rule_id", mode="before")
    @classmethod
    def coerce_rule_id(cls, v):
        return str(v) if v is not None else v


def build_field_map(mappings: Iterable[FieldMapping]) -> FieldMap:
    """Fold mappings into a FieldMap.

    A later mapping for an already seen source field replaces the earlier
    one.
    """
    field_map: FieldMap = {}
    for mapping in mappings:
        field_map[mapping.source_field] = mapping.target_field
    return field_map
