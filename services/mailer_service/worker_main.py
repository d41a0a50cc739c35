"""
Mailer Service worker entry point.

Runs one consumer task per email_exchange queue and serves /metrics.
Templates are loaded before any consumer starts; a missing or broken
template is a startup failure and the process exits with status 1.
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
from library_service_libs.log_pipeline_provider import LogPipelineProvider
from library_service_libs.log_producer import BrokerLogProducer
from library_service_libs.logging_utils import configure_service_logging, create_service_logger
from library_service_libs.metrics_middleware import metrics_bp
from quart import Quart

from services.mailer_service.config import settings
from services.mailer_service.di import MailerServiceProvider
from services.mailer_service.kafka_consumer import MailQueueConsumer
from services.mailer_service.notification_processor import template_ids
from services.mailer_service.protocols import TemplateRenderer

logger = create_service_logger("mailer_service.worker_main")


def create_metrics_app() -> Quart:
    app = Quart(__name__)
    app.register_blueprint(metrics_bp)
    return app


async def main() -> int:
    configure_service_logging(settings.SERVICE_NAME, log_level=settings.LOG_LEVEL)
    logger.info("Starting Mailer Service worker")

    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop.set)

    container = make_async_container(
        MailerServiceProvider(), LogPipelineProvider.from_settings(settings)
    )
    tasks: list[asyncio.Task] = []
    exit_code = 0
    try:
        try:
            renderer = await container.get(TemplateRenderer)
            renderer.ensure_templates(template_ids())

            created = await declare_topology(settings.KAFKA_BOOTSTRAP_SERVERS, Exchange.EMAIL)
            if created:
                logger.info("Declared broker topics", topics=created)

            consumers = await container.get(list[MailQueueConsumer])
            await container.get(BrokerLogProducer)
        except Exception as e:
            logger.critical(f"Mailer Service failed to start: {e}", exc_info=True)
            return 1

        tasks = [asyncio.create_task(c.start_consumer()) for c in consumers]
        config = Config()
        config.bind = [f"{settings.HTTP_HOST}:{settings.HTTP_PORT}"]
        metrics_task = asyncio.create_task(
            serve(create_metrics_app(), config, shutdown_trigger=stop.wait)
        )
        logger.info("Mailer Service worker running", topics=[c.topic for c in consumers])

        done, _ = await asyncio.wait(
            {*tasks, asyncio.create_task(stop.wait())},
            return_when=asyncio.FIRST_COMPLETED,
        )
        for task in done & set(tasks):
            if task.exception() is not None:
                logger.error("Mail consumer stopped unexpectedly", error=str(task.exception()))
                exit_code = 1
        stop.set()
        await metrics_task
    finally:
        for task in tasks:
            if not task.done():
                task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        await container.close()

    logger.info("Mailer Service worker shutdown complete", exit_code=exit_code)
    return exit_code


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
