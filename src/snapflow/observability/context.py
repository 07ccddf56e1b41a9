"""Shared observability context utilities."""

from __future__ import annotations

import uuid
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Mapping, Optional

from opentelemetry.trace import Status, StatusCode
from pydantic import Field

from snapflow.logging import get_logger
from snapflow.logging.filters import clear_request_context, set_request_context
from snapflow.telemetry import get_tracer
from snapflow.types.base import SnapflowBaseModel


class ExecutionRequestContext(SnapflowBaseModel):
    """Observability context propagated across an execution request."""

    request_id: str
    rule_id: Optional[str] = None
    correlation_id: Optional[str] = None
    attributes: Dict[str, Any] = Field(default_factory=dict)
    telemetry_base: Dict[str, str] = Field(default_factory=dict, exclude=True)

    @classmethod
    def generate(cls, **kwargs: Any) -> "ExecutionRequestContext":
        """Generate a new context with a unique request id."""
        ctx = cls(request_id=str(uuid.uuid4()), **kwargs)
        ctx.telemetry_base = ctx.to_telemetry_dict()
        return ctx

    @staticmethod
    def _stringify(value: Any) -> Optional[str]:
        if value is None:
            return None
        return str(value)

    def to_telemetry_dict(self) -> Dict[str, str]:
        payload: Dict[str, str] = {"request_id": self.request_id}
        if self.rule_id:
            payload["rule_id"] = self.rule_id
        if self.correlation_id:
            payload["correlation_id"] = self.correlation_id
        for key, value in (self.attributes or {}).items():
            sanitized = self._stringify(value)
            if sanitized is not None:
                payload[f"ctx.{key}"] = sanitized
        return payload


@contextmanager
def execution_request_scope(
    ctx: ExecutionRequestContext,
    *,
    operation: Optional[str] = None,
) -> Iterator[None]:
    """Apply logging + tracing scope for a request/operation."""
    ctx.telemetry_base = ctx.to_telemetry_dict()

    set_request_context(
        request_id=ctx.request_id,
        rule_id=ctx.rule_id,
    )

    tracer = get_tracer("snapflow")
    span_name = operation or "snapflow.request"
    span_attributes = {f"snapflow.{key}": value for key, value in ctx.telemetry_base.items()}
    if operation:
        span_attributes["snapflow.operation.name"] = operation

    with tracer.start_as_current_span(span_name) as span:
        for key, value in span_attributes.items():
            span.set_attribute(key, value)

        try:
            yield
        except Exception as exc:
            span.record_exception(exc)
            span.set_status(Status(StatusCode.ERROR))
            get_logger(__name__).error(
                "Execution failed",
                extra={**ctx.telemetry_base, "operation.name": span_name},
                exc_info=True,
            )
            raise
        finally:
            clear_request_context()


def resolve_request_context(ctx: Optional[Any]) -> ExecutionRequestContext:
    """Normalize inbound context data into an ExecutionRequestContext."""
    if isinstance(ctx, ExecutionRequestContext):
        if not ctx.telemetry_base:
            ctx.telemetry_base = ctx.to_telemetry_dict()
        return ctx

    if ctx is None:
        return ExecutionRequestContext.generate()

    if isinstance(ctx, str):
        return ExecutionRequestContext(request_id=ctx)

    data: Dict[str, Any] = {}

    if isinstance(ctx, Mapping):
        data = dict(ctx)
    else:
        # Attribute lookups for scheduler job objects and similar hosts
        for key in ("request_id", "id", "job_id"):
            if hasattr(ctx, key):
                data["request_id"] = getattr(ctx, key)
                break
        for key in ("rule_id", "correlation_id", "attributes"):
            if hasattr(ctx, key):
                data[key] = getattr(ctx, key)

    request_id = data.get("request_id") or data.get("id") or data.get("job_id")
    request_id = str(request_id) if request_id else str(uuid.uuid4())

    attributes = data.get("attributes") or {}
    if not isinstance(attributes, dict):
        attributes = {"value": str(attributes)}

    rule_id = data.get("rule_id")
    ctx_obj = ExecutionRequestContext(
        request_id=request_id,
        rule_id=str(rule_id) if rule_id is not None else None,
        correlation_id=data.get("correlation_id"),
        attributes=attributes,
    )
    ctx_obj.telemetry_base = ctx_obj.to_telemetry_dict()
    return ctx_obj
