"""Scheduler entry point for snapshot rules.

``ScheduledSnapshot`` is the zero-argument callable a scheduler holds on to.
It builds a fresh executor on every ``execute()`` call and never lets an
error escape: failures are logged with their traceback and reported through
``last_error`` and the optional ``on_failure`` callback.
"""

from typing import TYPE_CHECKING, Callable, Optional

from snapflow.logging import get_logger
from snapflow.monitoring import MetricsCollector
from snapflow.snapshot.backend import SnapshotBackend
from snapflow.snapshot.executor import SnapshotExecutor
from snapflow.types import SnapshotRunResult

if TYPE_CHECKING:
    from snapflow.settings import _Settings

logger = get_logger(__name__)

SuccessCallback = Callable[[SnapshotRunResult], None]
FailureCallback = Callable[[str, Exception], None]


class ScheduledSnapshot:
    """Schedulable wrapper around ``SnapshotExecutor``.

    Attributes:
        rule_id: Rule to run
        dry_run: Passed to every executor
        last_result: Result of the last successful execution
        last_error: Error of the last failed execution

    Example:
        >>> job = ScheduledSnapshot("daily-finance-accounts")
        >>> scheduler.every_day(job.execute)
    """

    def __init__(
        self,
        rule_id: str,
        dry_run: bool = False,
        *,
        backend: Optional[SnapshotBackend] = None,
        settings: Optional['_Settings'] = None,
        metrics: Optional[MetricsCollector] = None,
        on_success: Optional[SuccessCallback] = None,
        on_failure: Optional[FailureCallback] = None,
        executor_factory: Callable[..., SnapshotExecutor] = SnapshotExecutor,
    ):
        self.rule_id = str(rule_id)
        self.dry_run = dry_run
        self.backend = backend
        self.settings = settings
        self.metrics = metrics
        self.on_success = on_success
        self.on_failure = on_failure
        self.executor_factory = executor_factory
        self.last_result: Optional[SnapshotRunResult] = None
        self.last_error: Optional[Exception] = None

    def execute(self) -> None:
        """Run the rule once; never raises."""
        try:
            executor = self.executor_factory(
                self.rule_id,
                self.dry_run,
                backend=self.backend,
                settings=self.settings,
                metrics=self.metrics,
            )
            result = executor.run()
        except Exception as exc:
            self.last_error = exc
            logger.error(
                "snapshot.schedule.failed",
                extra={
                    "rule_id": self.rule_id,
                    "dry_run": self.dry_run,
                    "error": str(exc),
                    "error_type": type(exc).__name__,
                },
                exc_info=True,
            )
            self._notify(self.on_failure, self.rule_id, exc)
            return

        self.last_result = result
        self.last_error = None
        self._notify(self.on_success, result)

    def _notify(self, callback: Optional[Callable[..., None]], *args) -> None:
        if callback is None:
            return
        try:
            callback(*args)
        except Exception as exc:
            logger.warning(
                "snapshot.schedule.callback_failed",
                extra={
                    "rule_id": self.rule_id,
                    "callback": getattr(callback, "__name__", repr(callback)),
                    "error": str(exc),
                },
                exc_info=True,
            )

    __call__ = execute

    def __repr__(self) -> str:
        return f"ScheduledSnapshot(rule_id={self.rule_id!r}, dry_run={self.dry_run!r})"
