from snapflow.compute.engines.base import BaseSQLEngine
from snapflow.compute.engines.sqlite import SQLiteSQLEngine

__all__ = [
    "BaseSQLEngine",
    "SQLiteSQLEngine",
]
