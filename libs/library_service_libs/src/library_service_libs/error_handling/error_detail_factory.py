"""Factory for ErrorDetail instances enriched with trace context."""

from __future__ import annotations

import traceback
from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4

from library_core.error_enums import AnyErrorCode
from library_core.models.error_models import ErrorDetail
from opentelemetry import trace


def create_error_detail_with_context(
    error_code: AnyErrorCode,
    message: str,
    service: str,
    operation: str,
    correlation_id: UUID | None = None,
    details: dict[str, Any] | None = None,
    capture_stack: bool = False,
) -> ErrorDetail:
    trace_id: str | None = None
    span_id: str | None = None
    span = trace.get_current_span()
    if span is not None:
        span_context = span.get_span_context()
        if span_context.is_valid:
            trace_id = format(span_context.trace_id, "032x")
            span_id = format(span_context.span_id, "016x")

    stack_trace: str | None = None
    if capture_stack:
        formatted = traceback.format_exc()
        if formatted.strip() == "NoneType: None":
            formatted = "".join(traceback.format_stack()[:-1])
        stack_trace = formatted

    return ErrorDetail(
        error_code=error_code,
        message=message,
        correlation_id=correlation_id or uuid4(),
        timestamp=datetime.now(UTC),
        service=service,
        operation=operation,
        details=details or {},
        stack_trace=stack_trace,
        trace_id=trace_id,
        span_id=span_id,
    )
