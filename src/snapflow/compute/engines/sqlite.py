"""SQLite engine.

pysqlite issues its own ``BEGIN`` lazily and commits before DDL, which breaks
SAVEPOINT handling. The engine disables that behaviour and emits ``BEGIN``
itself so that checkpoints and per-record savepoints work as on other
backends.
"""

from typing import Any, Dict

from sqlalchemy import event
from sqlalchemy.engine import Engine

from snapflow.compute.engines.base import BaseSQLEngine
from snapflow.logging import get_logger

logger = get_logger(__name__)


class SQLiteSQLEngine(BaseSQLEngine):
    """SQL engine for SQLite databases."""

    def _engine_options(self) -> Dict[str, Any]:
        # SQLite pools reject the sizing arguments used by server backends.
        return {}

    def _configure_engine(self, engine: Engine) -> None:
        @event.listens_for(engine, "connect")
        def _on_connect(dbapi_connection, connection_record):
            dbapi_connection.isolation_level = None
            cursor = dbapi_connection.cursor()
            try:
                cursor.execute("PRAGMA foreign_keys=ON")
            finally:
                cursor.close()

        @event.listens_for(engine, "begin")
        def _on_begin(conn):
            conn.exec_driver_sql("BEGIN")

        logger.debug("sqlite.transaction_hooks.installed", extra={"db.url": str(engine.url)})
