"""SQL and query-related constants."""

from enum import Enum


class QueryType(str, Enum):
    """SQL query type enumeration.

    Snapshot rules only ever read their source entity, so SELECT is the
    one statement built as text. Writes go through SQLAlchemy constructs.
    """

    SELECT = "SELECT"
    INSERT = "INSERT"


SUPPORTED_DIALECTS = frozenset(
    {"sqlite", "postgres", "mysql", "tsql", "snowflake", "oracle", "duckdb"}
)
