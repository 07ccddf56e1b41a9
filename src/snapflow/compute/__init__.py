from snapflow.compute.engines import BaseSQLEngine, SQLiteSQLEngine
from snapflow.compute.factory import create_sql_engine

__all__ = [
    "BaseSQLEngine",
    "SQLiteSQLEngine",
    "create_sql_engine",
]
