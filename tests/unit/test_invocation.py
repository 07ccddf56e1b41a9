"""Unit tests for the scheduler adapter."""

from unittest.mock import Mock

from snapflow.common.exceptions import NotFoundError
from snapflow.snapshot import ScheduledSnapshot


class TestScheduledSnapshot:

    def test_success_is_reported(self):
        executor = Mock()
        factory = Mock(return_value=executor)
        on_success = Mock()
        job = ScheduledSnapshot("r1", dry_run=True, executor_factory=factory, on_success=on_success)

        assert job.execute() is None

        factory.assert_called_once_with("r1", True, backend=None, settings=None, metrics=None)
        assert job.last_result is executor.run.return_value
        on_success.assert_called_once_with(executor.run.return_value)

    def test_run_failure_is_contained(self):
        error = RuntimeError("database went away")
        executor = Mock()
        executor.run.side_effect = error
        on_failure = Mock()
        job = ScheduledSnapshot("r1", executor_factory=Mock(return_value=executor), on_failure=on_failure)

        job.execute()

        assert job.last_error is error
        assert job.last_result is None
        on_failure.assert_called_once_with("r1", error)

    def test_construction_failure_is_contained(self):
        error = NotFoundError("Snapshot rule 'r1' not found")
        job = ScheduledSnapshot("r1", executor_factory=Mock(side_effect=error))

        job.execute()

        assert job.last_error is error

    def test_callback_failure_is_suppressed(self):
        job = ScheduledSnapshot(
            "r1",
            executor_factory=Mock(return_value=Mock()),
            on_success=Mock(side_effect=ValueError("callback bug")),
        )

        job.execute()

        assert job.last_error is None

    def test_new_executor_per_execution(self):
        factory = Mock(return_value=Mock())
        job = ScheduledSnapshot("r1", executor_factory=factory)

        job.execute()
        job()

        assert factory.call_count == 2

    def test_success_clears_previous_error(self):
        executor = Mock()
        executor.run.side_effect = [RuntimeError("first"), Mock()]
        job = ScheduledSnapshot("r1", executor_factory=Mock(return_value=executor))

        job.execute()
        assert job.last_error is not None
        job.execute()
        assert job.last_error is None
