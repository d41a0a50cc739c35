"""httpx RPC client used by the gateway to reach the back-end services.

Every call carries the request correlation id as ``request-id`` and an
absolute ``request-deadline`` derived from the gateway timeout. Error
responses are rebuilt into the ``LibraryError`` the remote service raised so
the error handlers can map its RPC status to HTTP.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any

import httpx
from library_service_libs.error_handling import (
    CorrelationContext,
    raise_connection_error,
    raise_timeout_error,
)
from library_service_libs.logging_utils import create_service_logger
from library_service_libs.rpc import (
    REQUEST_DEADLINE_HEADER,
    REQUEST_ID_HEADER,
    error_from_rpc_response,
    remaining_time,
    rpc_path,
)

from services.api_gateway_service.protocols import MetricsProtocol, RpcClientProtocol

logger = create_service_logger("api_gateway.rpc_client")

SERVICE_NAME = "api_gateway_service"


class HttpxRpcClient(RpcClientProtocol):
    """RPC client for a single back-end service."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: str,
        target_service: str,
        metrics: MetricsProtocol,
        timeout_seconds: float = 10.0,
    ) -> None:
        self._client = client
        self.base_url = base_url.rstrip("/")
        self.target_service = target_service
        self._metrics = metrics
        self.timeout_seconds = timeout_seconds

    def _effective_timeout(self, method: str, correlation: CorrelationContext) -> float:
        """Clamp the call timeout to what is left of the inbound request deadline."""
        remaining = remaining_time()
        if remaining is None:
            return self.timeout_seconds
        if remaining <= 0:
            raise_timeout_error(
                service=SERVICE_NAME,
                operation=method,
                timeout_seconds=0,
                message=f"Deadline exceeded before calling {self.target_service}.{method}",
                correlation_id=correlation.uuid,
            )
        return min(self.timeout_seconds, remaining)

    async def call(
        self, method: str, payload: dict[str, Any], correlation: CorrelationContext
    ) -> dict[str, Any]:
        timeout = self._effective_timeout(method, correlation)
        headers = {
            REQUEST_ID_HEADER: correlation.original,
            REQUEST_DEADLINE_HEADER: f"{time.time() + timeout:.6f}",
        }
        url = f"{self.base_url}{rpc_path(self.target_service, method)}"

        start = time.perf_counter()
        try:
            response = await self._client.post(
                url, json=payload, headers=headers, timeout=timeout
            )
        except httpx.TimeoutException:
            self._record(method, "timeout", start)
            raise_timeout_error(
                service=SERVICE_NAME,
                operation=method,
                timeout_seconds=timeout,
                message=f"{self.target_service}.{method} timed out",
                correlation_id=correlation.uuid,
                target_service=self.target_service,
            )
        except httpx.TransportError as e:
            self._record(method, "unavailable", start)
            raise_connection_error(
                service=SERVICE_NAME,
                operation=method,
                target=self.target_service,
                message=f"Failed to reach {self.target_service}: {e}",
                correlation_id=correlation.uuid,
            )

        self._record(method, str(response.status_code), start)
        try:
            body = response.json()
        except ValueError:
            body = None

        if response.status_code == 200 and isinstance(body, dict):
            return body

        error = error_from_rpc_response(
            response.status_code,
            body,
            service=self.target_service,
            operation=method,
            correlation_id=correlation.uuid,
        )
        logger.debug(
            "RPC call returned error",
            target_service=self.target_service,
            method=method,
            error_code=error.error_code,
        )
        raise error

    def _record(self, method: str, status: str, start: float) -> None:
        self._metrics.downstream_service_calls_total.labels(
            service=self.target_service, method=method, status_code=status
        ).inc()
        self._metrics.downstream_service_call_duration_seconds.labels(
            service=self.target_service, method=method
        ).observe(time.perf_counter() - start)


@dataclass(frozen=True)
class ServiceClients:
    """The back-end services the gateway routes to."""

    auth: RpcClientProtocol
    user: RpcClientProtocol
    author: RpcClientProtocol
    category: RpcClientProtocol
    book: RpcClientProtocol
    loan: RpcClientProtocol
