"""
Shared fixtures for API Gateway Service tests.

The app comes from ``create_app()`` with its production container swapped
for one without the broker log pipeline. Back-end services are mocked at the
HTTP layer with respx, so requests go through the real ``HttpxRpcClient``.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

import httpx
import pytest
from dishka import make_async_container
from dishka.integrations.fastapi import FastapiProvider, setup_dishka
from httpx import ASGITransport, AsyncClient
from prometheus_client import REGISTRY, CollectorRegistry
from respx import MockRouter

from services.api_gateway_service.app.auth_provider import AuthProvider
from services.api_gateway_service.app.di import ApiGatewayProvider
from services.api_gateway_service.app.main import create_app
from services.api_gateway_service.app.metrics import GatewayMetrics
from services.api_gateway_service.config import settings

USER_ID = "3f1c2b7e-8d4a-4c1e-9f6b-2a7d5e9c1b40"
ADMIN_ID = "b2e7d9a1-5c3f-4e8b-a6d2-9f1c7e4b3a58"
TOKEN = "valid-access-token"

_SERVICE_URLS = {
    "auth": settings.AUTH_SERVICE_URL,
    "user": settings.USER_SERVICE_URL,
    "author": settings.AUTHOR_SERVICE_URL,
    "category": settings.CATEGORY_SERVICE_URL,
    "book": settings.BOOK_SERVICE_URL,
    "loan": settings.LOAN_SERVICE_URL,
}


def rpc_url(service: str, method: str) -> str:
    return f"{_SERVICE_URLS[service]}/v1/rpc/{service}/{method}"


def rpc_error(error_code: str, message: str, service: str = "book_service") -> dict[str, Any]:
    """An RPC error body as the back-end services write it."""
    return {
        "error": {
            "error_code": error_code,
            "message": message,
            "correlation_id": str(uuid4()),
            "timestamp": datetime.now(UTC).isoformat(),
            "service": service,
            "operation": "test",
            "details": {},
        }
    }


def page(total_items: int, page_size: int = 10) -> dict[str, int]:
    return {
        "page": 1,
        "page_size": page_size,
        "total_items": total_items,
        "total_pages": (total_items + page_size - 1) // page_size,
    }


@pytest.fixture(autouse=True)
def _clear_prometheus_registry():
    """Clear Prometheus registry before each test to avoid collisions."""
    collectors = list(REGISTRY._collector_to_names.keys())
    for collector in collectors:
        REGISTRY.unregister(collector)
    yield


@pytest.fixture
async def client() -> AsyncIterator[AsyncClient]:
    app = create_app()
    container = make_async_container(
        ApiGatewayProvider(GatewayMetrics(registry=CollectorRegistry())),
        AuthProvider(),
        FastapiProvider(),
    )
    # Replaces the production container, which would start a Kafka producer
    setup_dishka(container, app)

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    await container.close()


def _validate_token_route(respx_mock: MockRouter, user_id: str, role: str) -> Any:
    return respx_mock.post(rpc_url("auth", "ValidateToken")).mock(
        return_value=httpx.Response(
            200,
            json={"valid": True, "user_id": user_id, "role": role, "email": f"{role}@example.com"},
        )
    )


@pytest.fixture
def as_user(respx_mock: MockRouter) -> dict[str, str]:
    """Bearer headers for a regular user; ValidateToken accepts the token."""
    _validate_token_route(respx_mock, USER_ID, "user")
    return {"Authorization": f"Bearer {TOKEN}"}


@pytest.fixture
def as_admin(respx_mock: MockRouter) -> dict[str, str]:
    _validate_token_route(respx_mock, ADMIN_ID, "admin")
    return {"Authorization": f"Bearer {TOKEN}"}
