"""Protocols for the Book Service."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, Protocol
from uuid import UUID

from library_service_libs.error_handling import CorrelationContext

from services.book_service.models_db import Book

BookMutator = Callable[[Book], Mapping[str, Any]]


class BookRepositoryProtocol(Protocol):
    async def create(
        self, title: str, author_id: UUID, category_id: UUID, stock: int, correlation_id: UUID
    ) -> Book: ...

    async def get(self, book_id: UUID, correlation_id: UUID) -> Book: ...

    async def mutate(
        self,
        book_id: UUID,
        version: int | None,
        mutator: BookMutator,
        correlation_id: UUID,
        operation: str,
    ) -> Book: ...

    async def delete(self, book_id: UUID, version: int, correlation_id: UUID) -> None: ...

    async def list(
        self,
        page: int,
        page_size: int,
        correlation_id: UUID,
        author_id: UUID | None = None,
        category_id: UUID | None = None,
    ) -> tuple[list[Book], int]: ...


class CatalogReferenceCheckerProtocol(Protocol):
    """Confirms that referenced authors and categories exist in their services."""

    async def ensure_author_exists(
        self, author_id: UUID, correlation: CorrelationContext, operation: str
    ) -> None: ...

    async def ensure_category_exists(
        self, category_id: UUID, correlation: CorrelationContext, operation: str
    ) -> None: ...
