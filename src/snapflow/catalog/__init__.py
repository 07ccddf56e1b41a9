from snapflow.catalog.memory import InMemorySchemaCatalog
from snapflow.catalog.records import EntityRecord, EntityType
from snapflow.catalog.sql import SqlEntityType, SqlSchemaCatalog

__all__ = [
    "EntityRecord",
    "EntityType",
    "InMemorySchemaCatalog",
    "SqlEntityType",
    "SqlSchemaCatalog",
]
