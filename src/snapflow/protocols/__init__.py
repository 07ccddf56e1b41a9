"""Protocol definitions for the collaborators of the snapshot engine.

The engine only depends on these interfaces; SQL-backed and in-memory
implementations live in ``snapflow.catalog``, ``snapflow.datastore`` and
``snapflow.config_store``.
"""

from snapflow.protocols.catalog import EntityTypeHandle, Record, SchemaCatalog
from snapflow.protocols.services import (
    CheckpointHandle,
    ConfigurationStore,
    QueryService,
    TransactionalStore,
)

__all__ = [
    "Record",
    "EntityTypeHandle",
    "SchemaCatalog",
    "QueryService",
    "CheckpointHandle",
    "TransactionalStore",
    "ConfigurationStore",
]
