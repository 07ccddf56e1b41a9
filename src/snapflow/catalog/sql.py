"""Schema catalog backed by database reflection.

Entity types are database tables (optionally ``schema.table``), fields are
their columns. Reflected tables are cached for the lifetime of the catalog
so that resolving an entity never opens a second connection while a write
checkpoint holds the database.
"""

from typing import Dict, Optional, Tuple

from sqlalchemy import MetaData, Table, inspect
from sqlalchemy.exc import NoSuchTableError, SQLAlchemyError

from snapflow.catalog.records import EntityType
from snapflow.common.exceptions import SchemaResolutionError
from snapflow.compute.engines.base import BaseSQLEngine
from snapflow.logging import get_logger

logger = get_logger(__name__)


class SqlEntityType(EntityType):
    """Entity type backed by a reflected SQLAlchemy ``Table``."""

    def __init__(self, name: str, table: Table):
        super().__init__(
            name,
            [column.name for column in table.columns],
            key_fields=[column.name for column in table.primary_key.columns],
        )
        self.table = table


def _split_name(name: str) -> Tuple[Optional[str], str]:
    if "." in name:
        schema, table_name = name.split(".", 1)
        return schema, table_name
    return None, name


class SqlSchemaCatalog:
    """Resolve entity types by reflecting database tables.

    Args:
        sql_engine: Engine shared with the query service and store
    """

    def __init__(self, sql_engine: BaseSQLEngine):
        self.sql_engine = sql_engine
        self._metadata = MetaData()
        self._cache: Dict[str, SqlEntityType] = {}

    def resolve_entity_type(self, name: str) -> Optional[SqlEntityType]:
        """Return the entity type for table ``name`` or None if it does not exist.

        Raises:
            SchemaResolutionError: If the database cannot be inspected
        """
        if not name:
            return None
        if name in self._cache:
            return self._cache[name]

        schema, table_name = _split_name(name)
        try:
            if not inspect(self.sql_engine.engine).has_table(table_name, schema=schema):
                logger.debug("catalog.entity.unknown", extra={"entity": name})
                return None
            table = Table(table_name, self._metadata, schema=schema, autoload_with=self.sql_engine.engine)
        except NoSuchTableError:
            return None
        except SQLAlchemyError as exc:
            raise SchemaResolutionError(
                f"Failed to inspect entity type '{name}'",
                details={"entity": name},
                cause=exc,
            )

        entity_type = SqlEntityType(name, table)
        self._cache[name] = entity_type
        logger.debug(
            "catalog.entity.reflected",
            extra={"entity": name, "field_count": len(entity_type.fields)},
        )
        return entity_type

    def clear_cache(self) -> None:
        """Forget reflected tables so schema changes are picked up."""
        self._cache.clear()
        self._metadata = MetaData()
