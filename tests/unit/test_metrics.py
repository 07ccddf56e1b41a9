"""Unit tests for run metrics."""

from datetime import timedelta

from snapflow.monitoring import MetricsCollector, SnapshotRunMetrics


def _metrics(success=True, written=3, error_type=None):
    return SnapshotRunMetrics(
        rule_id="r1",
        source_entity="Account",
        target_entity="AccountSnapshot",
        records_read=3,
        records_written=written,
        duration_seconds=0.5,
        success=success,
        error_type=error_type,
    )


class TestMetricsCollector:

    def test_empty_summary(self):
        assert MetricsCollector().get_metrics_summary()["total_runs"] == 0

    def test_summary(self):
        collector = MetricsCollector()
        collector.record_run(_metrics())
        collector.record_run(_metrics(success=False, written=0, error_type="PersistenceError"))

        summary = collector.get_metrics_summary(timedelta(minutes=5))

        assert summary["total_runs"] == 2
        assert summary["success_rate"] == 0.5
        assert summary["records_written"] == 3
        assert summary["errors_by_type"] == {"PersistenceError": 1}

    def test_clear(self):
        collector = MetricsCollector()
        collector.record_run(_metrics())
        collector.clear()

        assert collector.get_metrics_summary()["total_runs"] == 0

    def test_to_dict(self):
        data = _metrics().to_dict()

        assert data["rule_id"] == "r1"
        assert isinstance(data["timestamp"], str)
