from __future__ import annotations

from typing import Any
from uuid import UUID

from library_service_libs.versioned_repository import VersionedRepository
from sqlalchemy.ext.asyncio import AsyncEngine

from services.book_service.models_db import Book
from services.book_service.protocols import BookMutator


class BookRepositoryImpl:
    def __init__(self, engine: AsyncEngine, service_name: str) -> None:
        self.store = VersionedRepository(
            engine, Book, service_name=service_name, resource_type="Book"
        )

    async def create(
        self, title: str, author_id: UUID, category_id: UUID, stock: int, correlation_id: UUID
    ) -> Book:
        return await self.store.insert(
            {"title": title, "author_id": author_id, "category_id": category_id, "stock": stock},
            correlation_id,
            operation="CreateBook",
        )

    async def get(self, book_id: UUID, correlation_id: UUID) -> Book:
        return await self.store.read(book_id, correlation_id, operation="GetBook")

    async def mutate(
        self,
        book_id: UUID,
        version: int | None,
        mutator: BookMutator,
        correlation_id: UUID,
        operation: str,
    ) -> Book:
        return await self.store.update(book_id, version, mutator, correlation_id, operation)

    async def delete(self, book_id: UUID, version: int, correlation_id: UUID) -> None:
        await self.store.delete(book_id, version, correlation_id, operation="DeleteBook")

    async def list(
        self,
        page: int,
        page_size: int,
        correlation_id: UUID,
        author_id: UUID | None = None,
        category_id: UUID | None = None,
    ) -> tuple[list[Book], int]:
        conditions: list[Any] = []
        operation = "ListBooks"
        if author_id is not None:
            conditions.append(Book.author_id == author_id)
            operation = "ListBooksByAuthor"
        if category_id is not None:
            conditions.append(Book.category_id == category_id)
            operation = "ListBooksByCategory"
        return await self.store.list(
            *conditions,
            correlation_id=correlation_id,
            page=page,
            page_size=page_size,
            order_by=[Book.title, Book.id],
            operation=operation,
        )
