import logging
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import SettingsConfigDict

from .base import SnapflowBaseSettings
from .database import DatabaseSettings
from .snapshot import SnapshotSettings

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class _Settings(SnapflowBaseSettings):

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_prefix="SNAPFLOW_",
        env_nested_delimiter="__"
    )

    app_env: str = Field(
        default="dev",
        description="Deployment environment (dev, qa, prod, ...), attached to logs"
    )
    service_name: str = Field(
        default="snapflow",
        description="Service name reported to OpenTelemetry"
    )
    log_level: str = Field(
        default="INFO",
        description="Root log level applied by setup_logging"
    )
    json_logs: bool = Field(
        default=True,
        description="Emit JSON log lines instead of plain text"
    )

    database: DatabaseSettings = Field(
        default_factory=DatabaseSettings,
        description="Datastore connection configuration"
    )
    snapshot: SnapshotSettings = Field(
        default_factory=SnapshotSettings,
        description="Snapshot engine configuration"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        v = v.upper()
        if v not in _LOG_LEVELS:
            raise ValueError(f"Invalid log_level '{v}'. Choose one of: {', '.join(_LOG_LEVELS)}")
        return v


# Singleton instance
_settings: Optional[_Settings] = None


def get_settings(force_reload: bool = False) -> _Settings:
    """Get the singleton settings instance for the application.

    Settings are loaded from environment variables (and ``.env``) on first
    access and reused afterwards.

    Args:
        force_reload: If True, creates a new Settings instance even if
                     one already exists. Useful for testing or when
                     environment variables have changed.

    Returns:
        Settings: The singleton Settings instance
    """
    global _settings

    if _settings is None or force_reload:
        _settings = _Settings()
        logging.getLogger(__name__).debug(
            "settings.loaded",
            extra={"app_env": _settings.app_env, "db.dialect": _settings.database.dialect_name},
        )

    return _settings


def _reload_settings() -> _Settings:
    """Force reload of settings.

    This is primarily for testing purposes where you need to reset
    the singleton instance.

    Returns:
        A fresh _Settings instance
    """
    global _settings
    _settings = None
    return get_settings(force_reload=True)
