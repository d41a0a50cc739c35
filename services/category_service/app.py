"""
Category Service Application - RPC back-end for category records.
"""

from __future__ import annotations

import asyncio

from hypercorn.asyncio import serve
from hypercorn.config import Config
from library_service_libs import LibraryServiceApp
from library_service_libs.error_handling.quart import register_error_handlers
from library_service_libs.logging_utils import (
    configure_service_logging,
    create_service_logger,
)
from library_service_libs.metrics_middleware import setup_metrics_middleware
from library_service_libs.rpc import setup_rpc_metadata

from services.category_service.api.rpc_routes import bp as rpc_bp
from services.category_service.config import settings
from services.category_service.startup_setup import initialize_services, shutdown_services

configure_service_logging(settings.SERVICE_NAME, log_level=settings.LOG_LEVEL)
logger = create_service_logger("category_service.app")


def create_app() -> LibraryServiceApp:
    app = LibraryServiceApp(__name__)
    app.service_name = settings.SERVICE_NAME

    setup_rpc_metadata(app)
    setup_metrics_middleware(app, settings.SERVICE_NAME)
    register_error_handlers(app, settings.SERVICE_NAME)
    app.register_blueprint(rpc_bp)

    @app.before_serving
    async def startup() -> None:
        await initialize_services(app, settings)
        logger.info("Category Service startup completed successfully")

    @app.after_serving
    async def shutdown() -> None:
        await shutdown_services(app)

    return app


app = create_app()


if __name__ == "__main__":
    config = Config()
    config.bind = [f"{settings.HTTP_HOST}:{settings.HTTP_PORT}"]
    asyncio.run(serve(app, config))
