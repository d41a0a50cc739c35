"""
Book catalog and stock handler.

Stock changes go through the versioned store's retry loop; the decrement
check lives in the mutator so it is re-evaluated against every fresh read.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from typing import Any
from uuid import UUID

from library_core.pagination import PageInfo
from library_service_libs.error_handling import CorrelationContext, raise_stock_exhausted
from library_service_libs.logging_utils import create_service_logger

from services.book_service.api.schemas import (
    AdjustBookStockRequest,
    BookResponse,
    CreateBookRequest,
    DeleteBookRequest,
    DeleteBookResponse,
    GetBookRequest,
    ListBooksByAuthorRequest,
    ListBooksByCategoryRequest,
    ListBooksRequest,
    ListBooksResponse,
    UpdateBookRequest,
    UpdateBookStockRequest,
)
from services.book_service.models_db import Book
from services.book_service.protocols import (
    BookRepositoryProtocol,
    CatalogReferenceCheckerProtocol,
)

logger = create_service_logger("book_service.book_handler")


class BookHandler:
    def __init__(
        self,
        repository: BookRepositoryProtocol,
        references: CatalogReferenceCheckerProtocol,
        service_name: str,
    ) -> None:
        self._repository = repository
        self._references = references
        self._service_name = service_name

    async def _check_references(
        self,
        author_id: UUID,
        category_id: UUID,
        correlation: CorrelationContext,
        operation: str,
    ) -> None:
        await asyncio.gather(
            self._references.ensure_author_exists(author_id, correlation, operation),
            self._references.ensure_category_exists(category_id, correlation, operation),
        )

    async def create_book(
        self, request: CreateBookRequest, correlation: CorrelationContext
    ) -> BookResponse:
        await self._check_references(
            request.author_id, request.category_id, correlation, "CreateBook"
        )
        book = await self._repository.create(
            request.title, request.author_id, request.category_id, request.stock, correlation.uuid
        )
        logger.info("Book created", book_id=str(book.id), stock=book.stock)
        return BookResponse.model_validate(book)

    async def get_book(self, request: GetBookRequest, correlation: CorrelationContext) -> BookResponse:
        return BookResponse.model_validate(await self._repository.get(request.id, correlation.uuid))

    async def update_book(
        self, request: UpdateBookRequest, correlation: CorrelationContext
    ) -> BookResponse:
        await self._check_references(
            request.author_id, request.category_id, correlation, "UpdateBook"
        )
        changes = {
            "title": request.title,
            "author_id": request.author_id,
            "category_id": request.category_id,
            "stock": request.stock,
        }
        book = await self._repository.mutate(
            request.id, request.version, lambda _current: changes, correlation.uuid, "UpdateBook"
        )
        logger.info("Book updated", book_id=str(book.id), version=book.version)
        return BookResponse.model_validate(book)

    async def delete_book(
        self, request: DeleteBookRequest, correlation: CorrelationContext
    ) -> DeleteBookResponse:
        await self._repository.delete(request.id, request.version, correlation.uuid)
        logger.info("Book deleted", book_id=str(request.id))
        return DeleteBookResponse(id=request.id)

    async def update_stock(
        self, request: UpdateBookStockRequest, correlation: CorrelationContext
    ) -> BookResponse:
        book = await self._repository.mutate(
            request.id,
            request.version,
            lambda _current: {"stock": request.new_stock},
            correlation.uuid,
            "UpdateBookStock",
        )
        logger.info("Book stock set", book_id=str(book.id), stock=book.stock)
        return BookResponse.model_validate(book)

    async def increment_stock(
        self, request: AdjustBookStockRequest, correlation: CorrelationContext
    ) -> BookResponse:
        def increment(current: Book) -> Mapping[str, Any]:
            return {"stock": current.stock + 1}

        book = await self._repository.mutate(
            request.id, request.version, increment, correlation.uuid, "IncrementBookStock"
        )
        logger.info("Book stock incremented", book_id=str(book.id), stock=book.stock)
        return BookResponse.model_validate(book)

    async def decrement_stock(
        self, request: AdjustBookStockRequest, correlation: CorrelationContext
    ) -> BookResponse:
        def decrement(current: Book) -> Mapping[str, Any]:
            if current.stock <= 0:
                raise_stock_exhausted(
                    service=self._service_name,
                    operation="DecrementBookStock",
                    book_id=str(current.id),
                    correlation_id=correlation.uuid,
                )
            return {"stock": current.stock - 1}

        book = await self._repository.mutate(
            request.id, request.version, decrement, correlation.uuid, "DecrementBookStock"
        )
        logger.info("Book stock decremented", book_id=str(book.id), stock=book.stock)
        return BookResponse.model_validate(book)

    async def _list(
        self,
        request: ListBooksRequest,
        correlation: CorrelationContext,
        author_id: UUID | None = None,
        category_id: UUID | None = None,
    ) -> ListBooksResponse:
        books, total = await self._repository.list(
            request.page,
            request.page_size,
            correlation.uuid,
            author_id=author_id,
            category_id=category_id,
        )
        return ListBooksResponse(
            books=[BookResponse.model_validate(b) for b in books],
            pagination=PageInfo.build(request.page, request.page_size, total),
        )

    async def list_books(
        self, request: ListBooksRequest, correlation: CorrelationContext
    ) -> ListBooksResponse:
        return await self._list(request, correlation)

    async def list_books_by_author(
        self, request: ListBooksByAuthorRequest, correlation: CorrelationContext
    ) -> ListBooksResponse:
        return await self._list(request, correlation, author_id=request.author_id)

    async def list_books_by_category(
        self, request: ListBooksByCategoryRequest, correlation: CorrelationContext
    ) -> ListBooksResponse:
        return await self._list(request, correlation, category_id=request.category_id)
