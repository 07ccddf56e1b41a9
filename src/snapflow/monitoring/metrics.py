"""Metrics collection for snapshot runs.

This module provides classes for collecting and exporting metrics
related to snapshot runs: how many ran, how many records they wrote,
how long they took and how often they failed.
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from snapflow.__version__ import __version__
from snapflow.logging import get_logger
from snapflow.telemetry import get_meter


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class SnapshotRunMetrics:
    """Container for the metrics of a single snapshot run.

    Attributes:
        rule_id: Snapshot rule identifier
        source_entity: Entity the records were read from
        target_entity: Entity the records were written to
        records_read: Number of source records selected
        records_written: Number of target records persisted (0 on dry runs)
        duration_seconds: Run duration in seconds
        success: Whether the run completed without error
        dry_run: Whether the run was a rehearsal
        error_type: Exception class name if the run failed
        timestamp: When the run finished
    """

    rule_id: str
    source_entity: str
    target_entity: str
    records_read: int
    records_written: int
    duration_seconds: float
    success: bool
    dry_run: bool = False
    error_type: Optional[str] = None
    timestamp: datetime = field(default_factory=_utcnow)

    def to_dict(self) -> Dict[str, Any]:
        """Convert metrics to dictionary."""
        data = asdict(self)
        data['timestamp'] = self.timestamp.isoformat()
        return data


class MetricsCollector:
    """Collector for snapshot run metrics.

    Metrics are kept in memory for summaries and exported through the
    active OpenTelemetry meter provider (a no-op unless the host installs
    an SDK).
    """

    def __init__(self, service_name: str = "snapflow"):
        """Initialize metrics collector.

        Args:
            service_name: Meter name reported to OpenTelemetry
        """
        self.logger = get_logger(__name__)
        self._metrics: List[SnapshotRunMetrics] = []
        self.meter = get_meter(service_name, __version__)
        self._setup_instruments()

    def _setup_instruments(self) -> None:
        """Setup OpenTelemetry instruments."""
        self.run_counter = self.meter.create_counter(
            "snapflow.snapshot.runs",
            description="Total number of snapshot runs",
            unit="runs"
        )
        self.records_counter = self.meter.create_counter(
            "snapflow.snapshot.records_written",
            description="Total target records persisted",
            unit="records"
        )
        self.failure_counter = self.meter.create_counter(
            "snapflow.snapshot.failures",
            description="Total number of failed snapshot runs",
            unit="runs"
        )
        self.duration_histogram = self.meter.create_histogram(
            "snapflow.snapshot.duration",
            description="Duration of snapshot runs",
            unit="s"
        )

    def record_run(self, metrics: SnapshotRunMetrics) -> None:
        """Record a finished snapshot run.

        Args:
            metrics: Run metrics to record
        """
        self._metrics.append(metrics)

        attributes = {
            "rule_id": metrics.rule_id,
            "target_entity": metrics.target_entity,
            "success": str(metrics.success).lower(),
            "dry_run": str(metrics.dry_run).lower(),
        }

        self.run_counter.add(1, attributes)
        self.records_counter.add(metrics.records_written, attributes)
        if not metrics.success:
            self.failure_counter.add(1, {**attributes, "error_type": metrics.error_type or "unknown"})
        self.duration_histogram.record(metrics.duration_seconds, attributes)

        self.logger.debug("snapshot.metrics.recorded", extra=metrics.to_dict())

    def get_metrics_summary(self, time_window: timedelta = timedelta(hours=1)) -> Dict[str, Any]:
        """Get summary of metrics for a time window.

        Args:
            time_window: Time window to summarize

        Returns:
            Dictionary with metrics summary
        """
        cutoff = _utcnow() - time_window
        recent = [m for m in self._metrics if m.timestamp > cutoff]

        if not recent:
            return {
                "total_runs": 0,
                "successful_runs": 0,
                "failed_runs": 0,
                "success_rate": 0.0,
                "records_written": 0,
                "average_duration_seconds": 0.0,
            }

        successful = [m for m in recent if m.success]
        errors: Dict[str, int] = {}
        for metric in recent:
            if not metric.success:
                key = metric.error_type or "unknown"
                errors[key] = errors.get(key, 0) + 1

        return {
            "total_runs": len(recent),
            "successful_runs": len(successful),
            "failed_runs": len(recent) - len(successful),
            "success_rate": len(successful) / len(recent),
            "records_written": sum(m.records_written for m in recent),
            "average_duration_seconds": sum(m.duration_seconds for m in recent) / len(recent),
            "errors_by_type": errors,
        }

    def clear(self) -> None:
        """Drop all in-memory metrics."""
        self._metrics.clear()


_collector: Optional[MetricsCollector] = None


def get_metrics_collector() -> MetricsCollector:
    """Return the process-wide metrics collector, creating it on first use."""
    global _collector
    if _collector is None:
        from snapflow.settings import get_settings
        _collector = MetricsCollector(service_name=get_settings().service_name)
    return _collector
