"""RPC tests for the User Service over a users table seeded as the Auth Service writes it."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest
from dishka import Provider, Scope, make_async_container, provide
from library_core.domain_enums import UserRole
from library_service_libs.rpc import RpcRequestProvider
from quart.typing import TestClientProtocol as QuartTestClient
from quart_dishka import QuartDishka
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker

from services.auth_service.models_db import User
from services.user_service.app import create_app
from services.user_service.domain_handlers.user_handler import UserHandler
from services.user_service.implementations.user_directory_impl import SqlAlchemyUserDirectory

RPC = "/v1/rpc/user"


async def seed_users(engine: AsyncEngine, count: int) -> list[User]:
    base = datetime(2024, 1, 1, tzinfo=UTC)
    users = [
        User(
            id=uuid4(),
            email=f"reader{i}@example.com",
            username=f"reader{i}",
            password_hash="$argon2id$v=19$secret",
            role=UserRole.ADMIN if i == 0 else UserRole.USER,
            verified=i % 2 == 0,
            refresh_token="refresh-secret",
            created_at=base + timedelta(minutes=i),
            updated_at=base + timedelta(minutes=i),
        )
        for i in range(count)
    ]
    async with async_sessionmaker(engine, expire_on_commit=False)() as session:
        session.add_all(users)
        await session.commit()
    return users


class TestUserRpc:
    @pytest.fixture
    async def app_client(self, engine: AsyncEngine) -> AsyncGenerator[QuartTestClient, None]:
        class TestProvider(Provider):
            @provide(scope=Scope.APP)
            def provide_user_handler(self) -> UserHandler:
                return UserHandler(SqlAlchemyUserDirectory(engine, "user_service"), "user_service")

        container = make_async_container(TestProvider(), RpcRequestProvider())
        app = create_app()
        QuartDishka(app=app, container=container)

        async with app.test_client() as client:
            yield client

        await container.close()

    async def test_get_by_id_omits_secrets(
        self, app_client: QuartTestClient, engine: AsyncEngine
    ) -> None:
        users = await seed_users(engine, 1)

        response = await app_client.post(f"{RPC}/GetUserById", json={"id": str(users[0].id)})

        assert response.status_code == 200
        data = await response.get_json()
        assert data["email"] == "reader0@example.com"
        assert data["role"] == "admin"
        assert "password_hash" not in data
        assert "refresh_token" not in data

    async def test_get_by_email_is_case_insensitive(
        self, app_client: QuartTestClient, engine: AsyncEngine
    ) -> None:
        users = await seed_users(engine, 2)

        response = await app_client.post(
            f"{RPC}/GetUserByEmail", json={"email": "READER1@example.com"}
        )

        assert response.status_code == 200
        assert (await response.get_json())["id"] == str(users[1].id)

    async def test_unknown_user_is_not_found(self, app_client: QuartTestClient) -> None:
        response = await app_client.post(f"{RPC}/GetUserById", json={"id": str(uuid4())})

        assert response.status_code == 404
        body = await response.get_json()
        assert body["status"] == "NOT_FOUND"
        assert body["error"]["error_code"] == "RESOURCE_NOT_FOUND"

    async def test_list_users_paginates(
        self, app_client: QuartTestClient, engine: AsyncEngine
    ) -> None:
        await seed_users(engine, 5)

        response = await app_client.post(f"{RPC}/ListUsers", json={"page": 2, "page_size": 2})

        assert response.status_code == 200
        data = await response.get_json()
        assert [u["username"] for u in data["users"]] == ["reader2", "reader3"]
        assert data["pagination"]["total_items"] == 5
        assert data["pagination"]["total_pages"] == 3

    async def test_list_defaults_to_first_page(
        self, app_client: QuartTestClient, engine: AsyncEngine
    ) -> None:
        await seed_users(engine, 3)

        response = await app_client.post(f"{RPC}/ListUsers", json={})

        data = await response.get_json()
        assert len(data["users"]) == 3
        assert data["pagination"]["page"] == 1

    @pytest.mark.parametrize("payload", [{"page_size": 101}, {"page": 0}])
    async def test_invalid_paging_is_rejected(
        self, app_client: QuartTestClient, payload: dict
    ) -> None:
        response = await app_client.post(f"{RPC}/ListUsers", json=payload)

        assert response.status_code == 400
