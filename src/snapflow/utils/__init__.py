"""Utility decorators shared across snapflow."""

from snapflow.utils.decorators import catch_exception, retry_with_backoff, traced

retry = retry_with_backoff

__all__ = [
    "traced",
    "retry",
    "retry_with_backoff",
    "catch_exception",
]
