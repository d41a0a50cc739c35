from __future__ import annotations

from dishka import make_async_container
from library_service_libs import LibraryServiceApp
from library_service_libs.log_pipeline_provider import LogPipelineProvider
from library_service_libs.log_producer import BrokerLogProducer
from library_service_libs.logging_utils import create_service_logger
from library_service_libs.rpc import RpcRequestProvider
from quart_dishka import QuartDishka
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine

from services.user_service.config import Settings
from services.user_service.di import CoreProvider, UserServiceProvider

logger = create_service_logger("user_service.startup")


async def initialize_services(app: LibraryServiceApp, settings: Settings) -> None:
    logger.info("User Service initializing", settings=str(settings))

    container = make_async_container(
        CoreProvider(),
        UserServiceProvider(),
        RpcRequestProvider(),
        LogPipelineProvider.from_settings(settings),
    )
    QuartDishka(app=app, container=container)
    app.container = container

    # Resolving the producer installs the broker log sink for the process
    await container.get(BrokerLogProducer)

    # The users table belongs to the Auth Service; only check that it is reachable
    app.database_engine = await container.get(AsyncEngine)
    async with app.database_engine.connect() as conn:
        await conn.execute(text("SELECT 1"))

    logger.info("User Service connected", database=settings.get_database_url_masked())


async def shutdown_services(app: LibraryServiceApp) -> None:
    await app.container.close()
    logger.info("User Service shutdown complete")
