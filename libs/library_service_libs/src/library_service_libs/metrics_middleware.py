"""Shared Prometheus metrics middleware for the Quart RPC services."""

from __future__ import annotations

import time

from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY, Counter, Histogram, generate_latest
from quart import Blueprint, Quart, Response, g, request

from .logging_utils import create_service_logger

logger = create_service_logger("library.metrics_middleware")

RPC_REQUESTS_TOTAL = Counter(
    "rpc_requests_total",
    "Total RPC requests handled",
    ["service", "method", "status_code"],
)
RPC_REQUEST_DURATION = Histogram(
    "rpc_request_duration_seconds",
    "RPC request duration in seconds",
    ["service", "method"],
)

metrics_bp = Blueprint("metrics", __name__)


@metrics_bp.route("/metrics")
async def metrics() -> Response:
    """Prometheus metrics endpoint."""
    try:
        return Response(generate_latest(REGISTRY), content_type=CONTENT_TYPE_LATEST)
    except Exception as e:
        logger.error(f"Error generating metrics: {e}", exc_info=True)
        return Response("Error generating metrics", status=500)


def setup_metrics_middleware(app: Quart, service_name: str) -> None:
    """Record request count and duration for every request and serve /metrics."""
    app.register_blueprint(metrics_bp)

    @app.before_request
    async def start_timer() -> None:
        g.start_time = time.perf_counter()

    @app.after_request
    async def record_request_metrics(response: Response) -> Response:
        start_time = getattr(g, "start_time", None)
        if start_time is None:
            return response
        method = request.path.rsplit("/", 1)[-1]
        try:
            RPC_REQUESTS_TOTAL.labels(
                service=service_name, method=method, status_code=str(response.status_code)
            ).inc()
            RPC_REQUEST_DURATION.labels(service=service_name, method=method).observe(
                time.perf_counter() - start_time
            )
        except Exception as e:
            logger.error(f"Error recording request metrics: {e}")
        return response
