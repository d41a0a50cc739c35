from __future__ import annotations

from dishka import make_async_container
from library_service_libs import LibraryServiceApp
from library_service_libs.log_pipeline_provider import LogPipelineProvider
from library_service_libs.log_producer import BrokerLogProducer
from library_service_libs.logging_utils import create_service_logger
from library_service_libs.rpc import RpcRequestProvider
from quart_dishka import QuartDishka
from sqlalchemy.ext.asyncio import AsyncEngine

from services.category_service.config import Settings
from services.category_service.di import CategoryServiceProvider, CoreProvider
from services.category_service.models_db import Base

logger = create_service_logger("category_service.startup")


async def initialize_services(app: LibraryServiceApp, settings: Settings) -> None:
    logger.info("Category Service initializing", settings=str(settings))

    container = make_async_container(
        CoreProvider(),
        CategoryServiceProvider(),
        RpcRequestProvider(),
        LogPipelineProvider.from_settings(settings),
    )
    QuartDishka(app=app, container=container)
    app.container = container

    # Resolving the producer installs the broker log sink for the process
    await container.get(BrokerLogProducer)

    app.database_engine = await container.get(AsyncEngine)
    async with app.database_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.info("Category Service database schema ready", database=settings.get_database_url_masked())


async def shutdown_services(app: LibraryServiceApp) -> None:
    await app.container.close()
    logger.info("Category Service shutdown complete")
