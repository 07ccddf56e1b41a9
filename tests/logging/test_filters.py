import logging

from snapflow.logging.filters import ContextFilter, clear_request_context, set_request_context


def _record() -> logging.LogRecord:
    return logging.LogRecord(
        name="test.logger",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg="sample",
        args=(),
        exc_info=None,
    )


def test_context_filter_uses_request_context():
    set_request_context(request_id="req-1", rule_id="r1", run_id="run-9")
    try:
        record = _record()
        assert ContextFilter().filter(record)
        assert record.request_id == "req-1"
        assert record.rule_id == "r1"
        assert record.run_id == "run-9"
        assert record.sdk_name == "snapflow"
    finally:
        clear_request_context()


def test_context_filter_keeps_explicit_extra():
    set_request_context(rule_id="r1")
    try:
        record = _record()
        record.rule_id = "explicit"
        assert ContextFilter().filter(record)
        assert record.rule_id == "explicit"
    finally:
        clear_request_context()


def test_context_filter_no_context_is_graceful():
    clear_request_context()
    record = _record()
    assert ContextFilter().filter(record)
    assert record.request_id is None
    assert record.run_id is None


def test_context_filter_stamps_environment():
    record = _record()
    assert ContextFilter(environment="qa").filter(record)
    assert record.app_env == "qa"
