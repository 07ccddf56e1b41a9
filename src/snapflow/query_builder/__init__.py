"""Query builders turning snapshot rules into SQL text."""

from snapflow.query_builder.builder import SnapshotQueryBuilder

__all__ = ["SnapshotQueryBuilder"]
