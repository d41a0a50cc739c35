"""RPC integration tests for the Category Service backed by SQLite."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncGenerator
from typing import Any

import pytest
from dishka import Provider, Scope, make_async_container, provide
from library_service_libs.rpc import RpcRequestProvider
from quart.typing import TestClientProtocol as QuartTestClient
from quart_dishka import QuartDishka
from sqlalchemy.ext.asyncio import AsyncEngine

from services.category_service.app import create_app
from services.category_service.domain_handlers.category_handler import CategoryHandler
from services.category_service.implementations.category_repository_impl import (
    CategoryRepositoryImpl,
)

RPC = "/v1/rpc/category"


@pytest.fixture
async def app_client(engine: AsyncEngine) -> AsyncGenerator[QuartTestClient, None]:
    class TestProvider(Provider):
        @provide(scope=Scope.APP)
        def provide_category_handler(self) -> CategoryHandler:
            return CategoryHandler(CategoryRepositoryImpl(engine, "category_service"))

    container = make_async_container(TestProvider(), RpcRequestProvider())
    app = create_app()
    QuartDishka(app=app, container=container)

    async with app.test_client() as client:
        yield client

    await container.close()


async def create_category(client: QuartTestClient, name: str = "Science Fiction") -> dict[str, Any]:
    response = await client.post(f"{RPC}/CreateCategory", json={"name": name})
    assert response.status_code == 200
    return await response.get_json()


class TestCategoryLifecycle:
    async def test_create_get_update_delete(self, app_client: QuartTestClient) -> None:
        created = await create_category(app_client)
        assert created["version"] == 1

        updated = await app_client.post(
            f"{RPC}/UpdateCategory",
            json={"id": created["id"], "name": "Speculative Fiction", "version": 1},
        )
        updated_body = await updated.get_json()
        assert updated_body["version"] == 2

        fetched = await app_client.post(f"{RPC}/GetCategory", json={"id": created["id"]})
        assert (await fetched.get_json())["name"] == "Speculative Fiction"

        deleted = await app_client.post(
            f"{RPC}/DeleteCategory", json={"id": created["id"], "version": 2}
        )
        assert deleted.status_code == 200
        assert (await deleted.get_json())["deleted"] is True

    async def test_concurrent_renames_all_land_with_distinct_versions(
        self, app_client: QuartTestClient
    ) -> None:
        created = await create_category(app_client)

        responses = await asyncio.gather(
            *[
                app_client.post(
                    f"{RPC}/UpdateCategory",
                    json={"id": created["id"], "name": f"Name {i}", "version": 1},
                )
                for i in range(3)
            ]
        )

        ok = [r for r in responses if r.status_code == 200]
        conflicts = [r for r in responses if r.status_code == 409]
        assert len(ok) + len(conflicts) == 3
        versions = sorted([(await r.get_json())["version"] for r in ok])
        assert len(set(versions)) == len(versions)

        fetched = await app_client.post(f"{RPC}/GetCategory", json={"id": created["id"]})
        assert (await fetched.get_json())["version"] == 1 + len(ok)


class TestCategoryValidation:
    @pytest.mark.parametrize("name", ["ab", "x" * 101])
    async def test_name_length_bounds(self, app_client: QuartTestClient, name: str) -> None:
        response = await app_client.post(f"{RPC}/CreateCategory", json={"name": name})

        assert response.status_code == 400
        body = await response.get_json()
        assert body["error"]["error_code"] == "VALIDATION_ERROR"

    async def test_non_uuid_id_is_rejected(self, app_client: QuartTestClient) -> None:
        response = await app_client.post(f"{RPC}/GetCategory", json={"id": "not-a-uuid"})

        assert response.status_code == 400
        body = await response.get_json()
        assert body["error"]["details"]["errors"][0]["field"] == "id"

    async def test_list_rejects_page_zero(self, app_client: QuartTestClient) -> None:
        response = await app_client.post(f"{RPC}/ListCategories", json={"page": 0})

        assert response.status_code == 400

    async def test_unknown_method_is_unimplemented(self, app_client: QuartTestClient) -> None:
        response = await app_client.post(f"{RPC}/RenameEverything", json={})

        assert response.status_code == 501
        assert (await response.get_json())["status"] == "UNIMPLEMENTED"
