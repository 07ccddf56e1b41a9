from snapflow.config_store.memory import InMemoryConfigurationStore
from snapflow.config_store.sql import SqlConfigurationStore

__all__ = [
    "InMemoryConfigurationStore",
    "SqlConfigurationStore",
]
