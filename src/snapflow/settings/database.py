from pydantic import Field, field_validator
from pydantic_settings import SettingsConfigDict

from .base import SnapflowBaseSettings


class DatabaseSettings(SnapflowBaseSettings):
    """Connection settings for the datastore holding source, target and
    configuration tables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_prefix="SNAPFLOW_DB_"
    )

    url: str = Field(
        default="sqlite:///snapflow.db",
        description="SQLAlchemy database URL, e.g. postgresql+psycopg://user@host/db"
    )
    pool_size: int = Field(
        default=5,
        ge=1,
        le=100,
        description="Number of pooled connections kept open"
    )
    max_overflow: int = Field(
        default=10,
        ge=0,
        le=100,
        description="Connections allowed beyond pool_size under load"
    )
    pool_timeout: int = Field(
        default=30,
        ge=1,
        description="Seconds to wait for a pooled connection"
    )
    echo: bool = Field(
        default=False,
        description="Log every SQL statement emitted by SQLAlchemy"
    )
    max_retries: int = Field(
        default=2,
        ge=0,
        le=10,
        description="Retries for queries whose connection was invalidated"
    )
    retry_delay_seconds: float = Field(
        default=0.5,
        ge=0.0,
        le=60.0,
        description="Initial delay between query retries in seconds"
    )

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        if "://" not in v:
            raise ValueError(f"Invalid database URL '{v}': expected '<dialect>://...'")
        return v

    @property
    def dialect_name(self) -> str:
        """Backend name of the URL (``sqlite``, ``postgresql``, ...)."""
        return self.url.split("://", 1)[0].split("+", 1)[0]
