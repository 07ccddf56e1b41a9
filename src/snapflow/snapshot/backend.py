"""Wiring of the collaborators a snapshot run needs."""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from snapflow.catalog import SqlSchemaCatalog
from snapflow.compute import BaseSQLEngine, create_sql_engine
from snapflow.config_store import SqlConfigurationStore
from snapflow.datastore import SqlQueryService, SqlTransactionalStore
from snapflow.logging import get_logger
from snapflow.protocols import ConfigurationStore, QueryService, SchemaCatalog, TransactionalStore

if TYPE_CHECKING:
    from snapflow.settings import _Settings

logger = get_logger(__name__)


@dataclass
class SnapshotBackend:
    """The four services a snapshot run talks to.

    Attributes:
        config_store: Source of rules and field mappings
        catalog: Entity type lookup
        query_service: Executes the selection query
        store: Persists target records
        sql_engine: Shared engine, when the services are SQL-backed
    """

    config_store: ConfigurationStore
    catalog: SchemaCatalog
    query_service: QueryService
    store: TransactionalStore
    sql_engine: Optional[BaseSQLEngine] = None

    def dispose(self) -> None:
        if self.sql_engine is not None:
            self.sql_engine.dispose()


def create_sql_backend(settings: Optional['_Settings'] = None) -> SnapshotBackend:
    """Build SQL-backed services sharing one engine.

    Args:
        settings: Settings to use. If None, uses ``get_settings()``
    """
    if settings is None:
        from snapflow.settings import get_settings
        settings = get_settings()

    sql_engine = create_sql_engine(settings.database)
    catalog = SqlSchemaCatalog(sql_engine)
    backend = SnapshotBackend(
        config_store=SqlConfigurationStore(
            sql_engine,
            rule_table=settings.snapshot.rule_table,
            mapping_table=settings.snapshot.mapping_table,
        ),
        catalog=catalog,
        query_service=SqlQueryService(sql_engine),
        store=SqlTransactionalStore(sql_engine, catalog),
        sql_engine=sql_engine,
    )
    logger.info(
        "Created SQL snapshot backend",
        extra={
            "db.platform": settings.database.dialect_name,
            "rule_table": settings.snapshot.rule_table,
            "mapping_table": settings.snapshot.mapping_table,
        },
    )
    return backend


_backend: Optional[SnapshotBackend] = None


def get_backend(force_reload: bool = False) -> SnapshotBackend:
    """Return the process-wide SQL backend built from ``get_settings()``.

    Reusing one backend keeps the connection pool and reflected tables
    across runs.
    """
    global _backend
    if _backend is None or force_reload:
        if _backend is not None:
            _backend.dispose()
        _backend = create_sql_backend()
    return _backend
