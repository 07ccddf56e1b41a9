"""Logging filters for context injection.

This module provides filters that inject context variables into log records,
so that every line emitted during a snapshot run carries the rule and run
identifiers.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar
from typing import Optional

from snapflow.__version__ import __version__

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
rule_id_var: ContextVar[Optional[str]] = ContextVar("rule_id", default=None)
run_id_var: ContextVar[Optional[str]] = ContextVar("run_id", default=None)


class ContextFilter(logging.Filter):
    """Logging filter that adds context variables to log records.

    Values already present on the record (for example passed through
    ``extra=``) are left untouched.

    Args:
        environment: Deployment environment stamped on every record as ``app_env``
    """

    def __init__(self, environment: Optional[str] = None):
        super().__init__()
        self.environment = environment

    def filter(self, record: logging.LogRecord) -> bool:
        """Add context variables to the log record.

        Args:
            record: Log record to enhance

        Returns:
            Always True (doesn't filter out any records)
        """
        for name, var in (
            ("request_id", request_id_var),
            ("rule_id", rule_id_var),
            ("run_id", run_id_var),
        ):
            if getattr(record, name, None) is None:
                setattr(record, name, var.get())
        if self.environment and getattr(record, "app_env", None) is None:
            setattr(record, "app_env", self.environment)
        setattr(record, "sdk_name", "snapflow")
        setattr(record, "sdk_version", __version__)

        return True


def set_request_context(
    request_id: Optional[str] = None,
    rule_id: Optional[str] = None,
    run_id: Optional[str] = None,
) -> None:
    """Set request context variables."""
    if request_id is not None:
        request_id_var.set(request_id)
    if rule_id is not None:
        rule_id_var.set(rule_id)
    if run_id is not None:
        run_id_var.set(run_id)


def clear_request_context() -> None:
    """Clear all request context variables."""
    request_id_var.set(None)
    rule_id_var.set(None)
    run_id_var.set(None)
