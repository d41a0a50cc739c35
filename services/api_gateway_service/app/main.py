from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from hypercorn.asyncio import serve
from hypercorn.config import Config
from library_service_libs.error_handling.fastapi import (
    register_error_handlers as register_fastapi_error_handlers,
)
from library_service_libs.logging_utils import configure_service_logging

from services.api_gateway_service.app.metrics import GatewayMetrics
from services.api_gateway_service.app.startup_setup import (
    create_di_container,
    initialize_services,
    setup_dependency_injection,
    shutdown_services,
)
from services.api_gateway_service.config import settings

from ..routers import (
    auth_routes,
    author_routes,
    book_routes,
    category_routes,
    loan_routes,
    user_routes,
)
from ..routers.metrics_routes import router as metrics_router
from .middleware import CorrelationIDMiddleware, RequestMetricsMiddleware
from .rate_limiter import ClientRateLimitMiddleware, create_limiter, rate_limit_for

configure_service_logging(settings.SERVICE_NAME, log_level=settings.LOG_LEVEL)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    await initialize_services(app)
    try:
        yield
    finally:
        await shutdown_services(app)


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.SERVICE_NAME,
        version="1.0.0",
        description="Library API Gateway - client-facing HTTP API for the library platform",
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    metrics = GatewayMetrics()

    # Register error handlers
    register_fastapi_error_handlers(app)

    # Rate limiting by client IP
    app.state.limiter = create_limiter(settings)
    app.add_middleware(
        ClientRateLimitMiddleware, limiter=app.state.limiter, limit=rate_limit_for(settings)
    )

    app.add_middleware(RequestMetricsMiddleware, metrics=metrics)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
        allow_methods=settings.CORS_ALLOW_METHODS,
        allow_headers=settings.CORS_ALLOW_HEADERS,
    )

    # Outermost, so every response (including 429s) carries the correlation id
    app.add_middleware(CorrelationIDMiddleware)

    # Include routers
    app.include_router(metrics_router)
    app.include_router(auth_routes.router, prefix="/api", tags=["Auth"])
    app.include_router(author_routes.router, prefix="/api", tags=["Authors"])
    app.include_router(category_routes.router, prefix="/api", tags=["Categories"])
    app.include_router(book_routes.router, prefix="/api", tags=["Books"])
    app.include_router(loan_routes.router, prefix="/api", tags=["Loans"])
    app.include_router(user_routes.router, prefix="/api", tags=["Users"])

    # Setup Dishka DI
    container = create_di_container(metrics)
    setup_dependency_injection(app, container)

    # Store container reference for startup and cleanup
    app.state.di_container = container

    return app


app = create_app()


if __name__ == "__main__":
    config = Config()
    config.bind = [f"{settings.HTTP_HOST}:{settings.HTTP_PORT}"]
    asyncio.run(serve(app, config))
