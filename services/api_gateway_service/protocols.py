"""
Protocols for API Gateway Service.

Routers depend on these protocols, not on concrete implementations.
"""

from __future__ import annotations

from typing import Any, Protocol

from library_service_libs.error_handling import CorrelationContext
from prometheus_client import Counter, Histogram


class RpcClientProtocol(Protocol):
    """One back-end service reached over the RPC boundary."""

    target_service: str

    async def call(
        self, method: str, payload: dict[str, Any], correlation: CorrelationContext
    ) -> dict[str, Any]:
        """Invoke ``method``; a remote failure is raised as the original LibraryError."""
        ...


class MetricsProtocol(Protocol):
    """Protocol for metrics collection matching GatewayMetrics exactly."""

    @property
    def http_requests_total(self) -> Counter: ...

    @property
    def http_request_duration_seconds(self) -> Histogram: ...

    @property
    def downstream_service_calls_total(self) -> Counter: ...

    @property
    def downstream_service_call_duration_seconds(self) -> Histogram: ...
