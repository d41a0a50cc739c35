"""
LibraryError: the single exception type raised for platform errors.

Wraps an immutable ``ErrorDetail`` and records itself on the active
OpenTelemetry span, so failures show up in traces without extra code at
the raise site.
"""

from __future__ import annotations

from typing import Any

from library_core.models.error_models import ErrorDetail
from library_core.rpc_status import RpcStatus, http_status_for, rpc_status_for
from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode


class LibraryError(Exception):
    def __init__(self, error_detail: ErrorDetail) -> None:
        super().__init__(error_detail.message)
        self.error_detail = error_detail
        self._record_to_span()

    @property
    def correlation_id(self) -> str:
        return str(self.error_detail.correlation_id)

    @property
    def error_code(self) -> str:
        return self.error_detail.error_code.value

    @property
    def service(self) -> str:
        return self.error_detail.service

    @property
    def operation(self) -> str:
        return self.error_detail.operation

    @property
    def rpc_status(self) -> RpcStatus:
        return rpc_status_for(self.error_detail.error_code)

    @property
    def status_code(self) -> int:
        return http_status_for(self.rpc_status)

    def _record_to_span(self) -> None:
        span = trace.get_current_span()
        if span is None or not span.is_recording():
            return

        span.record_exception(self)
        span.set_status(Status(StatusCode.ERROR, self.error_detail.message))
        span.set_attribute("error", True)
        span.set_attribute("error.code", self.error_code)
        span.set_attribute("error.message", self.error_detail.message)
        span.set_attribute("error.service", self.service)
        span.set_attribute("error.operation", self.operation)
        span.set_attribute("correlation_id", self.correlation_id)
        for key, value in self.error_detail.details.items():
            if isinstance(value, str | int | float | bool):
                span.set_attribute(f"error.details.{key}", value)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": str(self),
            "error_detail": self.error_detail.model_dump(mode="json"),
        }

    def add_detail(self, key: str, value: Any) -> LibraryError:
        """Return a new error carrying one more detail; the original stays untouched."""
        details = {**self.error_detail.details, key: value}
        return LibraryError(self.error_detail.model_copy(update={"details": details}))

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.error_detail.message}"

    def __repr__(self) -> str:
        return (
            f"LibraryError(code={self.error_code}, "
            f"message={self.error_detail.message!r}, "
            f"service={self.service}, "
            f"operation={self.operation}, "
            f"correlation_id={self.correlation_id})"
        )
