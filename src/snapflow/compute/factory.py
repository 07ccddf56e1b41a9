"""Engine factory for the SQL datastore.

The factory picks the engine implementation from the dialect of the
configured database URL. Dialects without a dedicated engine use
``BaseSQLEngine``, which covers any backend SQLAlchemy supports.
"""

from typing import TYPE_CHECKING, Dict, Optional, Type

from snapflow.compute.engines.base import BaseSQLEngine
from snapflow.compute.engines.sqlite import SQLiteSQLEngine
from snapflow.logging import get_logger

if TYPE_CHECKING:
    from snapflow.settings import DatabaseSettings

logger = get_logger(__name__)


_ENGINES: Dict[str, Type[BaseSQLEngine]] = {
    "sqlite": SQLiteSQLEngine,
}


def create_sql_engine(settings: Optional['DatabaseSettings'] = None) -> BaseSQLEngine:
    """Create the SQL engine for the configured database.

    Args:
        settings: Database settings. If None, uses ``get_settings().database``

    Returns:
        BaseSQLEngine: Engine instance; the SQLAlchemy engine is created lazily

    Example:
        >>> engine = create_sql_engine(DatabaseSettings(url="sqlite:///snap.db"))
        >>> type(engine).__name__
        'SQLiteSQLEngine'
    """
    if settings is None:
        from snapflow.settings import get_settings
        settings = get_settings().database

    engine_cls = _ENGINES.get(settings.dialect_name, BaseSQLEngine)
    engine = engine_cls(settings)

    logger.info(
        "Created SQL engine",
        extra={"db.platform": settings.dialect_name, "engine": engine_cls.__name__},
    )
    return engine
