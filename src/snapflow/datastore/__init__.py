from snapflow.datastore.query_service import SqlQueryService, sqlglot_dialect
from snapflow.datastore.transactional_store import Checkpoint, SqlTransactionalStore

__all__ = [
    "Checkpoint",
    "SqlQueryService",
    "SqlTransactionalStore",
    "sqlglot_dialect",
]
