from pydantic_settings import BaseSettings, SettingsConfigDict


class SnapflowBaseSettings(BaseSettings):
    """Base class for every snapflow settings group.

    Subclasses set their own ``env_prefix`` so each group reads a separate
    namespace of environment variables (``SNAPFLOW_DB_``,
    ``SNAPFLOW_SNAPSHOT_``, ...).
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_nested_delimiter="__"
    )
