from __future__ import annotations

from uuid import UUID

from library_service_libs.versioned_repository import VersionedRepository
from sqlalchemy.ext.asyncio import AsyncEngine

from services.category_service.models_db import Category


class CategoryRepositoryImpl:
    """Categories stored under optimistic concurrency control."""

    def __init__(self, engine: AsyncEngine, service_name: str) -> None:
        self.store = VersionedRepository(
            engine, Category, service_name=service_name, resource_type="Category"
        )

    async def create(self, name: str, correlation_id: UUID) -> Category:
        return await self.store.insert({"name": name}, correlation_id, operation="CreateCategory")

    async def get(self, category_id: UUID, correlation_id: UUID) -> Category:
        return await self.store.read(category_id, correlation_id, operation="GetCategory")

    async def rename(
        self, category_id: UUID, version: int, name: str, correlation_id: UUID
    ) -> Category:
        return await self.store.update(
            category_id,
            version,
            lambda _current: {"name": name},
            correlation_id,
            operation="UpdateCategory",
        )

    async def delete(self, category_id: UUID, version: int, correlation_id: UUID) -> None:
        await self.store.delete(category_id, version, correlation_id, operation="DeleteCategory")

    async def list(
        self, page: int, page_size: int, correlation_id: UUID
    ) -> tuple[list[Category], int]:
        return await self.store.list(
            correlation_id=correlation_id,
            page=page,
            page_size=page_size,
            operation="ListCategories",
        )
