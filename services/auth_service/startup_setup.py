from __future__ import annotations

from dishka import make_async_container
from library_core.broker_topology import Exchange
from library_service_libs import LibraryServiceApp
from library_service_libs.kafka_client import declare_topology
from library_service_libs.log_pipeline_provider import LogPipelineProvider
from library_service_libs.log_producer import BrokerLogProducer
from library_service_libs.logging_utils import create_service_logger
from library_service_libs.protocols import RedisClientProtocol
from library_service_libs.rpc import RpcRequestProvider
from quart_dishka import QuartDishka
from sqlalchemy.ext.asyncio import AsyncEngine

from services.auth_service.config import Settings
from services.auth_service.di import AuthServiceProvider, CoreProvider
from services.auth_service.models_db import Base

logger = create_service_logger("auth_service.startup")


async def initialize_services(app: LibraryServiceApp, settings: Settings) -> None:
    logger.info("Auth Service initializing", settings=str(settings))

    # OTP codes are mailed through the email exchange
    created = await declare_topology(settings.KAFKA_BOOTSTRAP_SERVERS, Exchange.EMAIL)
    if created:
        logger.info("Declared broker topics", topics=created)

    container = make_async_container(
        CoreProvider(),
        AuthServiceProvider(),
        RpcRequestProvider(),
        LogPipelineProvider.from_settings(settings),
    )
    QuartDishka(app=app, container=container)
    app.container = container

    # Resolving the producer installs the broker log sink for the process
    await container.get(BrokerLogProducer)

    # Fail fast when the OTP store is unreachable
    await container.get(RedisClientProtocol)

    app.database_engine = await container.get(AsyncEngine)
    async with app.database_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.info("Auth Service database schema ready", database=settings.get_database_url_masked())


async def shutdown_services(app: LibraryServiceApp) -> None:
    # Closing the container disconnects Redis and drains the log workers
    await app.container.close()
    logger.info("Auth Service shutdown complete")
