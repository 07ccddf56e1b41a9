"""Configuration store reading rules and mappings from database tables.

Expected layout (names configurable through ``SnapshotSettings``)::

    snapshot_rule(id, source_entity, target_entity, entry_criteria,
                  frequency, name, description, active)
    snapshot_field_mapping(id, rule_id, source_field, target_field)

Only ``id``, ``source_entity`` and ``target_entity`` are required on the rule
table and ``rule_id``, ``source_field`` and ``target_field`` on the mapping
table; optional columns are read when present. Mappings are returned in
``id`` order when the mapping table has an ``id`` column.
"""

from typing import Any, Dict, List, Optional

from pydantic import ValidationError
from sqlalchemy import MetaData, Table, select
from sqlalchemy.exc import SQLAlchemyError

from snapflow.common.exceptions import ConfigurationError, malformed_mapping_error
from snapflow.compute.engines.base import BaseSQLEngine
from snapflow.constants import DEFAULT_MAPPING_TABLE, DEFAULT_RULE_TABLE
from snapflow.logging import get_logger
from snapflow.types import FieldMapping, SnapshotRule

logger = get_logger(__name__)

_RULE_COLUMNS = (
    "id",
    "source_entity",
    "target_entity",
    "entry_criteria",
    "frequency",
    "name",
    "description",
    "active",
)
_MAPPING_COLUMNS = ("rule_id", "source_field", "target_field")


def _drop_none(row: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in row.items() if value is not None}


class SqlConfigurationStore:
    """Read snapshot rules and field mappings from SQL tables.

    Args:
        sql_engine: Engine the configuration tables live on
        rule_table: Rule table name, optionally ``schema.table``
        mapping_table: Mapping table name, optionally ``schema.table``
    """

    def __init__(
        self,
        sql_engine: BaseSQLEngine,
        rule_table: str = DEFAULT_RULE_TABLE,
        mapping_table: str = DEFAULT_MAPPING_TABLE,
    ):
        self.sql_engine = sql_engine
        self.rule_table = rule_table
        self.mapping_table = mapping_table
        self._metadata = MetaData()
        self._tables: Dict[str, Table] = {}

    def _table(self, name: str) -> Table:
        if name not in self._tables:
            schema: Optional[str] = None
            table_name = name
            if "." in name:
                schema, table_name = name.split(".", 1)
            try:
                self._tables[name] = Table(
                    table_name,
                    self._metadata,
                    schema=schema,
                    autoload_with=self.sql_engine.engine,
                )
            except SQLAlchemyError as exc:
                raise ConfigurationError(
                    f"Configuration table '{name}' is not available",
                    details={"table": name},
                    cause=exc,
                )
        return self._tables[name]

    def _fetch(self, table: Table, statement) -> List[Dict[str, Any]]:
        try:
            with self.sql_engine.engine.connect() as conn:
                return [dict(row) for row in conn.execute(statement).mappings()]
        except SQLAlchemyError as exc:
            raise ConfigurationError(
                f"Failed to read configuration table '{table.fullname}'",
                details={"table": table.fullname},
                cause=exc,
            )

    def get_rules(self, rule_id: str) -> List[SnapshotRule]:
        """Return every rule row whose id equals ``rule_id``.

        Raises:
            ConfigurationError: If the table cannot be read or a row is invalid
        """
        table = self._table(self.rule_table)
        columns = [table.c[name] for name in _RULE_COLUMNS if name in table.c]
        rows = self._fetch(table, select(*columns).where(table.c.id == rule_id))

        rules = []
        for row in rows:
            try:
                rules.append(SnapshotRule(**_drop_none(row)))
            except ValidationError as exc:
                raise ConfigurationError(
                    f"Snapshot rule '{rule_id}' is malformed: {exc.errors()[0]['msg']}",
                    details={"rule_id": rule_id, "table": table.fullname},
                    cause=exc,
                )
        return rules

    def get_field_mappings(self, rule_id: str) -> List[FieldMapping]:
        """Return the mappings owned by ``rule_id`` in stored order.

        Raises:
            ConfigurationError: If the table cannot be read or a row is malformed
        """
        table = self._table(self.mapping_table)
        statement = select(*[table.c[name] for name in _MAPPING_COLUMNS]).where(table.c.rule_id == rule_id)
        if "id" in table.c:
            statement = statement.order_by(table.c.id)
        rows = self._fetch(table, statement)

        mappings = []
        for row in rows:
            try:
                mappings.append(FieldMapping(**row))
            except ValidationError as exc:
                raise malformed_mapping_error(
                    str(rule_id),
                    f"Field mapping of rule '{rule_id}' is malformed: {exc.errors()[0]['msg']}",
                    mapping=row,
                )
        logger.debug(
            "config_store.mappings.loaded",
            extra={"rule_id": str(rule_id), "mapping_count": len(mappings)},
        )
        return mappings
