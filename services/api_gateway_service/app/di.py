from __future__ import annotations

from collections.abc import AsyncIterator

import httpx
from dishka import Provider, Scope, provide
from prometheus_client import REGISTRY, CollectorRegistry

from services.api_gateway_service.app.metrics import GatewayMetrics
from services.api_gateway_service.config import Settings, settings
from services.api_gateway_service.implementations.rpc_client import (
    HttpxRpcClient,
    ServiceClients,
)
from services.api_gateway_service.protocols import MetricsProtocol


class ApiGatewayProvider(Provider):
    scope = Scope.APP

    def __init__(self, metrics: GatewayMetrics) -> None:
        super().__init__()
        self._metrics = metrics

    @provide
    def get_config(self) -> Settings:
        return settings

    @provide(scope=Scope.APP)
    async def get_http_client(self, config: Settings) -> AsyncIterator[httpx.AsyncClient]:
        async with httpx.AsyncClient(
            timeout=httpx.Timeout(
                config.RPC_TIMEOUT_SECONDS,
                connect=config.HTTP_CLIENT_CONNECT_TIMEOUT_SECONDS,
            )
        ) as httpx_client:
            yield httpx_client

    @provide(scope=Scope.APP)
    def provide_service_clients(
        self, config: Settings, client: httpx.AsyncClient, metrics: MetricsProtocol
    ) -> ServiceClients:
        def rpc(base_url: str, target_service: str) -> HttpxRpcClient:
            return HttpxRpcClient(
                client,
                base_url,
                target_service,
                metrics,
                timeout_seconds=config.RPC_TIMEOUT_SECONDS,
            )

        return ServiceClients(
            auth=rpc(config.AUTH_SERVICE_URL, "auth"),
            user=rpc(config.USER_SERVICE_URL, "user"),
            author=rpc(config.AUTHOR_SERVICE_URL, "author"),
            category=rpc(config.CATEGORY_SERVICE_URL, "category"),
            book=rpc(config.BOOK_SERVICE_URL, "book"),
            loan=rpc(config.LOAN_SERVICE_URL, "loan"),
        )

    @provide(scope=Scope.APP)
    def provide_metrics(self) -> MetricsProtocol:
        return self._metrics

    @provide(scope=Scope.APP)
    def provide_registry(self) -> CollectorRegistry:
        return REGISTRY
