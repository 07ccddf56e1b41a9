"""Public entry points and the scheduler adapter against SQLite."""

from snapflow import ScheduledSnapshot, run_snapshot, validate_snapshot_rule
from snapflow.common.exceptions import NotFoundError
from snapflow.constants import RunStatus
from snapflow.observability import ExecutionRequestContext


class TestRunSnapshot:

    def test_account_example(self, add_rule, backend, count_rows):
        add_rule("finance-daily")

        result = run_snapshot("finance-daily", dry_run=False, backend=backend)

        assert result.status == RunStatus.COMMITTED
        assert count_rows("account_snapshot") == 3

    def test_account_example_dry_run(self, add_rule, backend, count_rows):
        add_rule("finance-daily")

        result = run_snapshot("finance-daily", dry_run=True, backend=backend)

        assert result.status == RunStatus.ROLLED_BACK
        assert count_rows("account_snapshot") == 0

    def test_accepts_request_context(self, add_rule, backend):
        add_rule("finance-daily")
        ctx = ExecutionRequestContext.generate(correlation_id="nightly-42")

        result = run_snapshot("finance-daily", dry_run=True, ctx=ctx, backend=backend)

        assert result.rule_id == "finance-daily"
        assert ctx.rule_id == "finance-daily"


class TestValidateSnapshotRule:

    def test_report(self, add_rule, backend):
        add_rule("finance-daily", mappings={"name": "snapshot_name", "industry": "snapshot_industry"})

        report = validate_snapshot_rule("finance-daily", backend=backend)

        assert report.entities_valid
        assert report.criteria_valid
        assert not report.fields_valid
        assert [check.source_field for check in report.invalid_mappings] == ["industry"]


class TestScheduledSnapshot:

    def test_execute_runs_the_rule(self, add_rule, backend, settings, metrics, count_rows):
        add_rule("finance-daily")
        job = ScheduledSnapshot("finance-daily", backend=backend, settings=settings, metrics=metrics)

        assert job.execute() is None

        assert job.last_error is None
        assert job.last_result.status == RunStatus.COMMITTED
        assert count_rows("account_snapshot") == 3

    def test_execute_contains_failures(self, backend, settings, metrics, count_rows):
        failures = []
        job = ScheduledSnapshot(
            "missing",
            backend=backend,
            settings=settings,
            metrics=metrics,
            on_failure=lambda rule_id, exc: failures.append((rule_id, exc)),
        )

        job.execute()

        assert isinstance(job.last_error, NotFoundError)
        assert failures == [("missing", job.last_error)]
        assert count_rows("account_snapshot") == 0
