"""
Logger Service worker entry point.

Consumes ``log_queue`` into the document store and the rotating file sink,
and serves /metrics. This process never forwards its own logs to the broker.
Exits with status 1 when startup fails.
"""

from __future__ import annotations

import asyncio
import signal
import sys

from dishka import make_async_container
from hypercorn.asyncio import serve
from hypercorn.config import Config
from library_core.broker_topology import Exchange
from library_service_libs.kafka_client import declare_topology
from library_service_libs.logging_utils import configure_service_logging, create_service_logger
from library_service_libs.metrics_middleware import metrics_bp
from quart import Quart
from sqlalchemy.ext.asyncio import AsyncEngine

from services.logger_service.config import settings
from services.logger_service.di import LoggerServiceProvider
from services.logger_service.kafka_consumer import LogQueueConsumer
from services.logger_service.models_db import Base

logger = create_service_logger("logger_service.worker_main")


def create_metrics_app() -> Quart:
    app = Quart(__name__)
    app.register_blueprint(metrics_bp)
    return app


async def main() -> int:
    configure_service_logging(settings.SERVICE_NAME, log_level=settings.LOG_LEVEL)
    logger.info("Starting Logger Service worker", settings=str(settings))

    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop.set)

    container = make_async_container(LoggerServiceProvider())
    consumer_task: asyncio.Task | None = None
    exit_code = 0
    try:
        try:
            created = await declare_topology(settings.KAFKA_BOOTSTRAP_SERVERS, Exchange.LOG)
            if created:
                logger.info("Declared broker topics", topics=created)

            engine = await container.get(AsyncEngine)
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)

            consumer = await container.get(LogQueueConsumer)
        except Exception as e:
            logger.critical(f"Logger Service failed to start: {e}", exc_info=True)
            return 1

        consumer_task = asyncio.create_task(consumer.start_consumer())
        config = Config()
        config.bind = [f"{settings.HTTP_HOST}:{settings.HTTP_PORT}"]
        metrics_task = asyncio.create_task(
            serve(create_metrics_app(), config, shutdown_trigger=stop.wait)
        )
        logger.info("Logger Service worker running", topic=consumer.topic)

        done, _ = await asyncio.wait(
            {consumer_task, asyncio.create_task(stop.wait())},
            return_when=asyncio.FIRST_COMPLETED,
        )
        if consumer_task in done and consumer_task.exception() is not None:
            logger.error("Log consumer stopped unexpectedly", error=str(consumer_task.exception()))
            exit_code = 1
        stop.set()
        await metrics_task
    finally:
        if consumer_task and not consumer_task.done():
            consumer_task.cancel()
            try:
                await consumer_task
            except asyncio.CancelledError:
                logger.info("Log consumer task cancelled")
        await container.close()

    logger.info("Logger Service worker shutdown complete", exit_code=exit_code)
    return exit_code


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
