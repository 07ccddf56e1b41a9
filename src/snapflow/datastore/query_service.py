"""Query service executing dynamically built selection queries."""

from typing import Dict, List, Optional

import sqlglot
from sqlglot import exp
from sqlglot.errors import ParseError

from snapflow.catalog.records import EntityRecord
from snapflow.compute.engines.base import BaseSQLEngine
from snapflow.logging import get_logger

logger = get_logger(__name__)

# SQLAlchemy dialect name -> sqlglot dialect name
_SQLGLOT_DIALECTS: Dict[str, str] = {
    "postgresql": "postgres",
    "mssql": "tsql",
}


def sqlglot_dialect(sqlalchemy_dialect: str) -> str:
    return _SQLGLOT_DIALECTS.get(sqlalchemy_dialect, sqlalchemy_dialect)


class SqlQueryService:
    """Run SELECT statements and wrap the rows as records.

    Records returned here are open: they carry exactly the columns the query
    projected and are tagged with the entity named in its ``FROM`` clause.

    Args:
        sql_engine: Engine to execute queries on
        dialect: sqlglot dialect used to read the entity name from queries.
            Defaults to the engine's dialect
    """

    def __init__(self, sql_engine: BaseSQLEngine, dialect: Optional[str] = None):
        self.sql_engine = sql_engine
        self.dialect = dialect or sqlglot_dialect(sql_engine.settings.dialect_name)

    def _entity_name(self, query: str) -> str:
        try:
            table = sqlglot.parse_one(query, read=self.dialect).find(exp.Table)
        except ParseError:
            return ""
        if table is None:
            return ""
        return ".".join(part for part in (table.db, table.name) if part)

    def execute_query(self, query: str) -> List[EntityRecord]:
        """Execute ``query`` and return one record per row.

        Raises:
            QueryError: If the datastore rejects the query
        """
        rows = self.sql_engine.fetch_all(query, telemetry={"snapflow.component": "query_service"})
        entity_name = self._entity_name(query)
        records = [EntityRecord(entity_name, values=row) for row in rows]
        logger.debug(
            "query_service.executed",
            extra={"entity": entity_name, "row_count": len(records)},
        )
        return records
