"""Validation and error mapping at the Loan Service RPC boundary."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest
from dishka import Provider, Scope, make_async_container, provide
from library_service_libs.error_handling import raise_active_loan_exists
from library_service_libs.rpc import RpcRequestProvider
from quart.typing import TestClientProtocol as QuartTestClient
from quart_dishka import QuartDishka

from services.loan_service.app import create_app
from services.loan_service.domain_handlers.loan_handler import LoanHandler

RPC = "/v1/rpc/loan"


@pytest.fixture
def mock_handler() -> AsyncMock:
    return AsyncMock(spec=LoanHandler)


@pytest.fixture
async def app_client(mock_handler: AsyncMock) -> AsyncGenerator[QuartTestClient, None]:
    class TestProvider(Provider):
        @provide(scope=Scope.APP)
        def provide_loan_handler(self) -> LoanHandler:
            return mock_handler

    container = make_async_container(TestProvider(), RpcRequestProvider())
    app = create_app()
    QuartDishka(app=app, container=container)

    async with app.test_client() as client:
        yield client

    await container.close()


class TestLoanRpcValidation:
    async def test_unknown_status_is_rejected(
        self, app_client: QuartTestClient, mock_handler: AsyncMock
    ) -> None:
        response = await app_client.post(
            f"{RPC}/UpdateLoanStatus", json={"loan_id": str(uuid4()), "status": "STOLEN"}
        )

        assert response.status_code == 400
        body = await response.get_json()
        assert body["error"]["details"]["errors"][0]["field"] == "status"
        mock_handler.update_loan_status.assert_not_awaited()

    async def test_invalid_email_is_rejected(self, app_client: QuartTestClient) -> None:
        response = await app_client.post(
            f"{RPC}/CreateLoan",
            json={"user_id": str(uuid4()), "email": "not-an-email", "book_id": str(uuid4())},
        )

        assert response.status_code == 400

    async def test_domain_error_keeps_its_code(
        self, app_client: QuartTestClient, mock_handler: AsyncMock
    ) -> None:
        user_id, book_id = uuid4(), uuid4()

        async def already_borrowed(request, correlation):
            raise_active_loan_exists(
                service="loan_service",
                operation="CreateLoan",
                user_id=str(user_id),
                book_id=str(book_id),
                correlation_id=correlation.uuid,
            )

        mock_handler.create_loan.side_effect = already_borrowed

        response = await app_client.post(
            f"{RPC}/CreateLoan",
            json={"user_id": str(user_id), "email": "reader@example.com", "book_id": str(book_id)},
        )

        assert response.status_code == 409
        body = await response.get_json()
        assert body["status"] == "FAILED_PRECONDITION"
        assert body["error"]["error_code"] == "ACTIVE_LOAN_EXISTS"
        assert body["error"]["message"] == (
            "User must return the borrowed book before borrowing it again"
        )
