"""Run metrics for snapflow."""

from snapflow.monitoring.metrics import MetricsCollector, SnapshotRunMetrics, get_metrics_collector

__all__ = [
    "MetricsCollector",
    "SnapshotRunMetrics",
    "get_metrics_collector",
]
