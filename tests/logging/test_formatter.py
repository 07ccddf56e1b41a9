import json
import logging

from snapflow.logging import ContextFilter, CustomJsonFormatter, setup_logging


def test_json_formatter_includes_extra_fields():
    record = logging.LogRecord(
        name="snapflow.snapshot.executor",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="snapshot.run.finish",
        args=(),
        exc_info=None,
    )
    record.rule_id = "r1"
    record.written_count = 3

    payload = json.loads(CustomJsonFormatter().format(record))

    assert payload["message"] == "snapshot.run.finish"
    assert payload["level"] == "INFO"
    assert payload["rule_id"] == "r1"
    assert payload["written_count"] == 3
    assert "trace_id" not in payload


def test_setup_logging_installs_context_aware_handler():
    root = logging.getLogger()
    previous_level = root.level
    previous_handlers = list(root.handlers)
    try:
        setup_logging("debug")

        handler = root.handlers[0]
        assert root.level == logging.DEBUG
        assert isinstance(handler.formatter, CustomJsonFormatter)
        assert any(isinstance(f, ContextFilter) for f in handler.filters)
    finally:
        for handler in list(root.handlers):
            root.removeHandler(handler)
        for handler in previous_handlers:
            root.addHandler(handler)
        root.setLevel(previous_level)
