"""Versioned SQLAlchemy repository for authors."""

from __future__ import annotations

from uuid import UUID

from library_service_libs.versioned_repository import VersionedRepository
from sqlalchemy.ext.asyncio import AsyncEngine

from services.author_service.models_db import Author


class AuthorRepositoryImpl:
    def __init__(self, engine: AsyncEngine, service_name: str) -> None:
        self.store = VersionedRepository(
            engine, Author, service_name=service_name, resource_type="Author"
        )

    async def create(self, name: str, biography: str, correlation_id: UUID) -> Author:
        return await self.store.insert(
            {"name": name, "biography": biography}, correlation_id, operation="CreateAuthor"
        )

    async def get(self, author_id: UUID, correlation_id: UUID) -> Author:
        return await self.store.read(author_id, correlation_id, operation="GetAuthor")

    async def update(
        self, author_id: UUID, version: int, name: str, biography: str, correlation_id: UUID
    ) -> Author:
        return await self.store.update(
            author_id,
            version,
            lambda _current: {"name": name, "biography": biography},
            correlation_id,
            operation="UpdateAuthor",
        )

    async def delete(self, author_id: UUID, version: int, correlation_id: UUID) -> None:
        await self.store.delete(author_id, version, correlation_id, operation="DeleteAuthor")

    async def list(
        self, page: int, page_size: int, correlation_id: UUID
    ) -> tuple[list[Author], int]:
        return await self.store.list(
            correlation_id=correlation_id,
            page=page,
            page_size=page_size,
            operation="ListAuthors",
        )
