from __future__ import annotations

from fastapi import Request
from fastapi.responses import JSONResponse
from library_service_libs.error_handling.fastapi import error_response
from library_service_libs.logging_utils import create_service_logger
from limits import RateLimitItem, parse
from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.middleware.base import BaseHTTPMiddleware

from services.api_gateway_service.config import Settings

logger = create_service_logger("api_gateway.rate_limiter")

RATE_LIMIT_MESSAGE = "You have exceeded the request limit. Please try again later."


def rate_limit_for(settings: Settings) -> str:
    return f"{settings.RATE_LIMIT_REQUESTS}/minute"


def create_limiter(settings: Settings) -> Limiter:
    # In-memory fixed window; the gateway runs as a single instance
    return Limiter(
        key_func=get_remote_address,
        default_limits=[rate_limit_for(settings)],
        strategy="fixed-window",
    )


def rate_limit_exceeded_response(request: Request, limit: RateLimitItem) -> JSONResponse:
    logger.warning(
        "Rate limit exceeded",
        client=get_remote_address(request),
        path=request.url.path,
        limit=str(limit),
    )
    return error_response(429, RATE_LIMIT_MESSAGE, "Too many requests")


class ClientRateLimitMiddleware(BaseHTTPMiddleware):
    """
    One fixed window per client IP across the whole API.

    The window is charged before routing, so every request counts, including
    ones for unknown paths, and the check does not depend on how routers are
    mounted.
    """

    def __init__(self, app, limiter: Limiter, limit: str) -> None:
        super().__init__(app)
        self.limiter = limiter
        self.limit = parse(limit)

    async def dispatch(self, request: Request, call_next):
        if self.limiter.enabled and not self.limiter.limiter.hit(
            self.limit, get_remote_address(request)
        ):
            return rate_limit_exceeded_response(request, self.limit)
        return await call_next(request)
