"""
Behaviour tests for the outbound RPC client.

Uses aioresponses to stand in for the remote service.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import AsyncIterator
from datetime import UTC, datetime
from uuid import uuid4

import aiohttp
import pytest
from aioresponses import aioresponses
from library_service_libs.error_handling import LibraryError, correlation_from_value
from library_service_libs.rpc import RpcClient
from library_service_libs.rpc.metadata import set_deadline
from yarl import URL

BOOK_URL = "http://book-service:8000/v1/rpc/book/GetBook"


@pytest.fixture
async def session() -> AsyncIterator[aiohttp.ClientSession]:
    async with aiohttp.ClientSession() as session:
        yield session


@pytest.fixture
def client(session: aiohttp.ClientSession) -> RpcClient:
    return RpcClient(
        session,
        "http://book-service:8000",
        target_service="book",
        caller_service="loan_service",
        timeout_seconds=5,
    )


class TestRpcClient:
    async def test_success_returns_body_and_sends_metadata(self, client: RpcClient) -> None:
        corr = correlation_from_value(str(uuid4()), source="test")

        with aioresponses() as m:
            m.post(BOOK_URL, status=200, payload={"id": "b-1", "stock": 2})
            body = await client.call("GetBook", {"id": "b-1"}, corr)

            request = m.requests[("POST", URL(BOOK_URL))][0]

        assert body == {"id": "b-1", "stock": 2}
        headers = request.kwargs["headers"]
        assert headers["request-id"] == corr.original
        assert float(headers["request-deadline"]) > time.time()
        assert request.kwargs["json"] == {"id": "b-1"}

    async def test_domain_error_survives_the_hop(self, client: RpcClient) -> None:
        corr = correlation_from_value(str(uuid4()), source="test")
        remote_error = {
            "error": {
                "error_code": "STOCK_EXHAUSTED",
                "message": "Book 'b-1' is out of stock",
                "correlation_id": str(corr.uuid),
                "timestamp": datetime.now(UTC).isoformat(),
                "service": "book_service",
                "operation": "DecrementBookStock",
                "details": {"book_id": "b-1"},
            },
            "status": "FAILED_PRECONDITION",
        }

        with aioresponses() as m:
            m.post(BOOK_URL, status=409, payload=remote_error)
            with pytest.raises(LibraryError) as exc_info:
                await client.call("GetBook", {"id": "b-1"}, corr)

        error = exc_info.value
        assert error.error_code == "STOCK_EXHAUSTED"
        assert error.service == "book_service"
        assert error.error_detail.details == {"book_id": "b-1"}
        assert error.error_detail.correlation_id == corr.uuid

    async def test_unparseable_error_falls_back_to_http_status(self, client: RpcClient) -> None:
        corr = correlation_from_value(str(uuid4()), source="test")

        with aioresponses() as m:
            m.post(BOOK_URL, status=404, body="not json")
            with pytest.raises(LibraryError) as exc_info:
                await client.call("GetBook", {"id": "b-1"}, corr)

        assert exc_info.value.error_code == "RESOURCE_NOT_FOUND"

    async def test_connection_failure_is_unavailable(self, client: RpcClient) -> None:
        corr = correlation_from_value(None, source="test")

        with aioresponses() as m:
            m.post(BOOK_URL, exception=aiohttp.ClientConnectionError("refused"))
            with pytest.raises(LibraryError) as exc_info:
                await client.call("GetBook", {"id": "b-1"}, corr)

        assert exc_info.value.error_code == "CONNECTION_ERROR"
        assert exc_info.value.rpc_status.value == "UNAVAILABLE"

    async def test_timeout_is_deadline_exceeded(self, client: RpcClient) -> None:
        corr = correlation_from_value(None, source="test")

        with aioresponses() as m:
            m.post(BOOK_URL, exception=asyncio.TimeoutError())
            with pytest.raises(LibraryError) as exc_info:
                await client.call("GetBook", {"id": "b-1"}, corr)

        assert exc_info.value.error_code == "TIMEOUT"
        assert exc_info.value.status_code == 504

    async def test_expired_deadline_fails_fast(self, client: RpcClient) -> None:
        corr = correlation_from_value(None, source="test")
        set_deadline(time.time() - 1)
        try:
            with aioresponses() as m:
                with pytest.raises(LibraryError) as exc_info:
                    await client.call("GetBook", {"id": "b-1"}, corr)
                assert m.requests == {}
        finally:
            set_deadline(None)

        assert exc_info.value.error_code == "TIMEOUT"
