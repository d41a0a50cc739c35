"""Middleware for API Gateway Service."""

from __future__ import annotations

import time

from fastapi import Request
from library_service_libs.error_handling import correlation_from_value
from library_service_libs.logging_utils import (
    bind_correlation_id,
    clear_correlation_id,
    create_service_logger,
)
from library_service_libs.rpc.metadata import set_deadline
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.routing import Match

from services.api_gateway_service.app.metrics import GatewayMetrics
from services.api_gateway_service.config import settings

logger = create_service_logger("api_gateway.middleware")

CORRELATION_HEADER = "X-Correlation-ID"


class CorrelationIDMiddleware(BaseHTTPMiddleware):
    """
    Give every request a fresh correlation id and a deadline.

    The id is generated here and never taken from the client. It is bound to
    the structlog context so every log record of the request carries it, and
    the RPC client forwards it as ``request-id``.
    """

    async def dispatch(self, request: Request, call_next):
        correlation = correlation_from_value(None, source="generated")
        request.state.correlation = correlation
        request.state.correlation_id = correlation.uuid
        bind_correlation_id(correlation.original)
        set_deadline(time.time() + settings.RPC_TIMEOUT_SECONDS)

        try:
            response = await call_next(request)
        finally:
            set_deadline(None)
            clear_correlation_id()

        response.headers[CORRELATION_HEADER] = correlation.original
        return response


class RequestMetricsMiddleware(BaseHTTPMiddleware):
    """Counts requests by route template so path parameters do not explode labels."""

    def __init__(self, app, metrics: GatewayMetrics) -> None:
        super().__init__(app)
        self.metrics = metrics

    @staticmethod
    def _endpoint(request: Request) -> str:
        for route in request.app.routes:
            match, _ = route.matches(request.scope)
            if match == Match.FULL:
                return getattr(route, "path", request.url.path)
        return "unmatched"

    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        endpoint = self._endpoint(request)
        response = await call_next(request)
        self.metrics.http_requests_total.labels(
            method=request.method, endpoint=endpoint, http_status=str(response.status_code)
        ).inc()
        self.metrics.http_request_duration_seconds.labels(
            method=request.method, endpoint=endpoint
        ).observe(time.perf_counter() - start)
        return response
