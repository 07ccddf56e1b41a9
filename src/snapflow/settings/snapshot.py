import re
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import SettingsConfigDict

from snapflow.constants import (
    DEFAULT_ID_FIELD,
    DEFAULT_MAPPING_TABLE,
    DEFAULT_RULE_TABLE,
    SUPPORTED_DIALECTS,
)
from .base import SnapflowBaseSettings

_IDENTIFIER = re.compile(r'^[a-zA-Z_][a-zA-Z0-9_$#@.]*$')


class SnapshotSettings(SnapflowBaseSettings):
    """Behaviour of the snapshot engine and location of its configuration
    tables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_prefix="SNAPFLOW_SNAPSHOT_"
    )

    id_field: str = Field(
        default=DEFAULT_ID_FIELD,
        description="Implicit identifier field selected when a rule maps no fields "
                    "and used by the criteria probe query"
    )
    rule_table: str = Field(
        default=DEFAULT_RULE_TABLE,
        description="Table holding snapshot rule definitions"
    )
    mapping_table: str = Field(
        default=DEFAULT_MAPPING_TABLE,
        description="Table holding snapshot field mappings"
    )
    sql_dialect: Optional[str] = Field(
        default=None,
        description="sqlglot dialect used to syntax-check and render the criteria probe. "
                    "Defaults to the dialect of the database URL"
    )
    dry_run_default: bool = Field(
        default=False,
        description="Dry-run flag used by entry points when the caller does not pass one"
    )

    @field_validator("id_field", "rule_table", "mapping_table")
    @classmethod
    def validate_identifier(cls, v: str, info) -> str:
        if not _IDENTIFIER.match(v):
            raise ValueError(
                f"Invalid {info.field_name}: '{v}'. "
                f"Must start with a letter or underscore and contain only "
                f"alphanumeric, underscore, '.', $, # or @ characters."
            )
        return v

    @field_validator("sql_dialect")
    @classmethod
    def validate_dialect(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.lower()
        if v not in SUPPORTED_DIALECTS:
            raise ValueError(
                f"Unsupported sql_dialect '{v}'. Choose one of: {', '.join(sorted(SUPPORTED_DIALECTS))}"
            )
        return v
