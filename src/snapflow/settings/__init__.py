"""Settings module providing configuration management for snapflow.

Configuration is built on Pydantic Settings and organised by domain:

    - base.py: SnapflowBaseSettings, shared model configuration
    - database.py: DatabaseSettings (``SNAPFLOW_DB_*``)
    - snapshot.py: SnapshotSettings (``SNAPFLOW_SNAPSHOT_*``)
    - main.py: the aggregating _Settings and the get_settings() singleton

Configuration Sources (precedence order):
    1. Environment Variables (highest priority)
    2. ``.env`` file in the working directory
    3. Default Values in code (lowest priority)

Quick Start:
    >>> from snapflow.settings import get_settings
    >>> settings = get_settings()
    >>> settings.database.url
    'sqlite:///snapflow.db'
"""

from .main import _Settings, _reload_settings, get_settings
from .base import SnapflowBaseSettings
from .database import DatabaseSettings
from .snapshot import SnapshotSettings

__all__ = [
    "get_settings",
    "DatabaseSettings",
    "SnapshotSettings",
]
