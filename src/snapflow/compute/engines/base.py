import time
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Dict, Iterator, List, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import DBAPIError

from snapflow.common.exceptions import SnapflowError, query_execution_error
from snapflow.logging import get_logger
from snapflow.utils.decorators import retry_with_backoff, traced

if TYPE_CHECKING:
    from snapflow.settings import DatabaseSettings

logger = get_logger(__name__)


def _is_invalidated_connection(exc: Exception) -> bool:
    """Only a dropped connection is worth retrying; bad SQL never is."""
    return isinstance(exc, DBAPIError) and bool(exc.connection_invalidated)


class BaseSQLEngine:
    """SQLAlchemy-based SQL execution engine.

    Wraps a lazily created SQLAlchemy ``Engine`` and provides the read path
    (``fetch_all``) used by the query service plus raw connections for the
    transactional store. Backend-specific engines inherit from this class and
    customise it through hooks.

    Platform Customization:
        Subclasses can override these hooks:
        - _engine_options(): Keyword arguments for ``create_engine``
        - _configure_engine(): Register engine-level event listeners
        - get_connection_info(): Return platform-specific connection details

    Example:
        >>> engine = BaseSQLEngine(settings.database)
        >>> rows = engine.fetch_all("SELECT id FROM account")
    """

    def __init__(self, settings: 'DatabaseSettings'):
        """Initialize SQL engine.

        Args:
            settings: Database settings holding the URL and pool options
        """
        self.settings = settings
        self._engine: Optional[Engine] = None
        self._connection_info: Dict[str, Any] = {
            "platform": settings.dialect_name,
        }

    @property
    def engine(self) -> Engine:
        """Get or create SQLAlchemy engine with lazy initialization."""
        if self._engine is None:
            self._engine = self._create_engine()
        return self._engine

    def _engine_options(self) -> Dict[str, Any]:
        """Keyword arguments passed to ``create_engine``."""
        return {
            "pool_pre_ping": True,
            "pool_size": self.settings.pool_size,
            "max_overflow": self.settings.max_overflow,
            "pool_timeout": self.settings.pool_timeout,
        }

    def _configure_engine(self, engine: Engine) -> None:
        """Apply backend-specific engine configuration.

        Override this method in subclasses to register event listeners.

        Args:
            engine: Freshly created SQLAlchemy engine
        """
        pass

    def _create_engine(self) -> Engine:
        """Create SQLAlchemy engine with connection pooling.

        Raises:
            SnapflowError: If engine creation fails
        """
        platform = self._connection_info.get("platform", "sql")
        try:
            engine = create_engine(
                self.settings.url,
                echo=self.settings.echo,
                **self._engine_options(),
            )
            self._configure_engine(engine)
        except Exception as e:
            raise SnapflowError(
                f"Failed to create {platform} engine",
                details={"platform": platform},
                cause=e,
            )

        logger.info("sql_engine.created", extra={"db.platform": platform})
        return engine

    @contextmanager
    def _get_connection(self) -> Iterator[Connection]:
        """Get a database connection from the pool.

        Yields:
            Connection: Database connection, closed on exit
        """
        conn = self.engine.connect()
        try:
            yield conn
        finally:
            conn.close()

    def connect(self) -> Connection:
        """Check a connection out of the pool; the caller must close it."""
        return self.engine.connect()

    def _span_attributes(
        self,
        query: str,
        telemetry: Optional[Dict[str, str]] = None,
        *,
        operation: str,
    ) -> Dict[str, Any]:
        """Build OpenTelemetry span attributes for SQL operations."""
        sanitized_query = (query or "").strip()
        if len(sanitized_query) > 4096:
            sanitized_query = f"{sanitized_query[:4093]}..."

        attributes: Dict[str, Any] = {
            "db.system": self._connection_info.get("platform", "sql"),
            "db.operation": operation,
        }
        if sanitized_query:
            attributes["db.statement"] = sanitized_query
        for key, value in (telemetry or {}).items():
            attributes[f"snapflow.telemetry.{key}"] = value
        return attributes

    def _fetch_all(self, query: str) -> List[Dict[str, Any]]:
        with self._get_connection() as conn:
            result = conn.execute(text(query))
            return [dict(row) for row in result.mappings().all()]

    @traced(
        span_name="snapflow.compute.sql.fetch_all",
        attribute_getter=lambda self, query, telemetry=None: self._span_attributes(
            query,
            telemetry,
            operation="fetch_all",
        ),
    )
    def fetch_all(self, query: str, telemetry: Optional[Dict[str, str]] = None) -> List[Dict[str, Any]]:
        """Execute query and fetch all results as a list of dictionaries.

        Queries whose connection was invalidated are retried with backoff.

        Raises:
            QueryError: If query execution fails
        """
        start_time = time.time()
        payload: Dict[str, str] = dict(telemetry or {})
        payload.setdefault("db.platform", str(self._connection_info.get("platform", "sql")))

        fetch = retry_with_backoff(
            max_retries=self.settings.max_retries,
            initial_delay=self.settings.retry_delay_seconds,
            retry_condition=_is_invalidated_connection,
        )(self._fetch_all)

        try:
            rows = fetch(query)
        except Exception as exc:
            duration = time.time() - start_time
            logger.error(
                "Fetch all failed",
                extra={**payload, "duration.seconds": f"{duration:.6f}", "error": str(exc)},
            )
            raise query_execution_error(query, exc)

        duration = time.time() - start_time
        logger.info(
            "Results fetched",
            extra={**payload, "row_count": str(len(rows)), "duration.seconds": f"{duration:.6f}"},
        )
        return rows

    def test_connection(self) -> bool:
        """Test if connection to the database is working.

        Returns:
            True if connection is successful, False otherwise
        """
        try:
            with self._get_connection() as conn:
                return conn.execute(text("SELECT 1")).scalar_one() == 1
        except Exception as exc:
            logger.error(
                "SQL connection test failed",
                extra={"db.platform": str(self._connection_info.get("platform")), "error": str(exc)},
                exc_info=True,
            )
            return False

    def get_connection_info(self) -> Dict[str, Any]:
        """Get connection information for debugging/logging."""
        return self._connection_info.copy()

    def dispose(self) -> None:
        """Close every pooled connection."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
