"""Observability utilities for snapflow."""

from .context import (
    ExecutionRequestContext,
    execution_request_scope,
    resolve_request_context,
)

__all__ = [
    "ExecutionRequestContext",
    "execution_request_scope",
    "resolve_request_context",
]
