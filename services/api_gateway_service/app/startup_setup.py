"""Startup setup for API Gateway Service."""

from __future__ import annotations

from dishka import AsyncContainer, make_async_container
from dishka.integrations.fastapi import FastapiProvider, setup_dishka
from fastapi import FastAPI
from library_service_libs.log_pipeline_provider import LogPipelineProvider
from library_service_libs.log_producer import BrokerLogProducer
from library_service_libs.logging_utils import create_service_logger

from services.api_gateway_service.app.auth_provider import AuthProvider
from services.api_gateway_service.app.di import ApiGatewayProvider
from services.api_gateway_service.app.metrics import GatewayMetrics
from services.api_gateway_service.config import settings

logger = create_service_logger("api_gateway_service.startup")


def create_di_container(metrics: GatewayMetrics) -> AsyncContainer:
    """Create and configure the DI container."""
    try:
        logger.info("Creating DI container...")
        container = make_async_container(
            ApiGatewayProvider(metrics),
            AuthProvider(),
            LogPipelineProvider.from_settings(settings),
            FastapiProvider(),  # Provides Request object to context
        )
        logger.info("DI container created successfully")
        return container
    except Exception as e:
        logger.critical(f"Failed to create DI container: {e}", exc_info=True)
        raise


def setup_dependency_injection(app: FastAPI, container: AsyncContainer) -> None:
    """Setup Dishka integration with FastAPI."""
    try:
        logger.info("Setting up dependency injection...")
        setup_dishka(container, app)
        logger.info("Dependency injection setup completed")
    except Exception as e:
        logger.critical(f"Failed to setup dependency injection: {e}", exc_info=True)
        raise


async def initialize_services(app: FastAPI) -> None:
    # Resolving the producer installs the broker log sink for the process
    await app.state.di_container.get(BrokerLogProducer)
    logger.info("API Gateway Service log pipeline ready")


async def shutdown_services(app: FastAPI) -> None:
    """Gracefully shutdown all services."""
    await app.state.di_container.close()
    logger.info("API Gateway Service shutdown completed")
