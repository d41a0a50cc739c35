"""Book routes, forwarded to the book service.

``includeAuthor`` and ``includeCategory`` replace ``author_id`` /
``category_id`` with the full record from the owning service. A lookup that
fails leaves the id in place; the book itself is still returned.
"""

from __future__ import annotations

import asyncio
from typing import Any

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from library_service_libs.error_handling import CorrelationContext, LibraryError
from library_service_libs.logging_utils import create_service_logger
from pydantic import UUID4

from ..app.auth_provider import AdminUser, AuthenticatedUser
from ..implementations.rpc_client import ServiceClients
from ..models.requests import BookBody, BookUpdateBody, DeleteBody
from ._route_utils import Pagination, pagination_params, success

router = APIRouter(prefix="/books", route_class=DishkaRoute)
logger = create_service_logger("api_gateway.book_routes")


class _Related:
    """Per-request lookups of authors and categories, each id fetched once."""

    def __init__(self, clients: ServiceClients, correlation: CorrelationContext) -> None:
        self.clients = clients
        self.correlation = correlation
        self._cache: dict[tuple[str, str], asyncio.Task] = {}

    async def _fetch(self, kind: str, record_id: str) -> dict[str, Any] | None:
        client, method = (
            (self.clients.author, "GetAuthor")
            if kind == "author"
            else (self.clients.category, "GetCategory")
        )
        try:
            return await client.call(method, {"id": record_id}, self.correlation)
        except LibraryError as e:
            logger.warning(
                f"Failed to include {kind}", record_id=record_id, error_code=e.error_code
            )
            return None

    def get(self, kind: str, record_id: str) -> asyncio.Task:
        key = (kind, record_id)
        if key not in self._cache:
            self._cache[key] = asyncio.ensure_future(self._fetch(kind, record_id))
        return self._cache[key]

    async def embed(self, book: dict[str, Any], kinds: list[str]) -> None:
        for kind in kinds:
            field = f"{kind}_id"
            record = await self.get(kind, book[field])
            if record is not None:
                book[kind] = record
                del book[field]


def _included(include_author: bool, include_category: bool) -> list[str]:
    kinds = []
    if include_author:
        kinds.append("author")
    if include_category:
        kinds.append("category")
    return kinds


async def _embed_all(
    books: list[dict[str, Any]],
    kinds: list[str],
    clients: ServiceClients,
    correlation: CorrelationContext,
) -> None:
    if not kinds:
        return
    related = _Related(clients, correlation)
    await asyncio.gather(*(related.embed(book, kinds) for book in books))


@router.get("")
async def list_books(
    _user: FromDishka[AuthenticatedUser],
    clients: FromDishka[ServiceClients],
    correlation: FromDishka[CorrelationContext],
    pagination: Pagination = Depends(pagination_params),
    include_author: bool = Query(False, alias="includeAuthor"),
    include_category: bool = Query(False, alias="includeCategory"),
) -> JSONResponse:
    result = await clients.book.call("ListBooks", pagination.as_payload(), correlation)
    await _embed_all(
        result["books"], _included(include_author, include_category), clients, correlation
    )
    return success("Book data fetched successfully", result)


@router.post("", status_code=201)
async def create_book(
    body: BookBody,
    admin: FromDishka[AdminUser],
    clients: FromDishka[ServiceClients],
    correlation: FromDishka[CorrelationContext],
) -> JSONResponse:
    book = await clients.book.call("CreateBook", body.model_dump(mode="json"), correlation)
    logger.info("Book created", book_id=book.get("id"), admin_id=str(admin.user_id))
    return success("Book created successfully", book, status_code=201)


@router.get("/author/{author_id}")
async def list_books_by_author(
    author_id: UUID4,
    _user: FromDishka[AuthenticatedUser],
    clients: FromDishka[ServiceClients],
    correlation: FromDishka[CorrelationContext],
    pagination: Pagination = Depends(pagination_params),
    include_author: bool = Query(False, alias="includeAuthor"),
    include_category: bool = Query(False, alias="includeCategory"),
) -> JSONResponse:
    payload = {"author_id": str(author_id), **pagination.as_payload()}
    result = await clients.book.call("ListBooksByAuthor", payload, correlation)
    await _embed_all(
        result["books"], _included(include_author, include_category), clients, correlation
    )
    return success(f"Books by author '{author_id}' fetched successfully", result)


@router.get("/category/{category_id}")
async def list_books_by_category(
    category_id: UUID4,
    _user: FromDishka[AuthenticatedUser],
    clients: FromDishka[ServiceClients],
    correlation: FromDishka[CorrelationContext],
    pagination: Pagination = Depends(pagination_params),
    include_author: bool = Query(False, alias="includeAuthor"),
    include_category: bool = Query(False, alias="includeCategory"),
) -> JSONResponse:
    payload = {"category_id": str(category_id), **pagination.as_payload()}
    result = await clients.book.call("ListBooksByCategory", payload, correlation)
    await _embed_all(
        result["books"], _included(include_author, include_category), clients, correlation
    )
    return success(f"Books under category '{category_id}' fetched successfully", result)


@router.get("/{book_id}")
async def get_book(
    book_id: UUID4,
    _user: FromDishka[AuthenticatedUser],
    clients: FromDishka[ServiceClients],
    correlation: FromDishka[CorrelationContext],
    include_author: bool = Query(False, alias="includeAuthor"),
    include_category: bool = Query(False, alias="includeCategory"),
) -> JSONResponse:
    book = await clients.book.call("GetBook", {"id": str(book_id)}, correlation)
    await _embed_all([book], _included(include_author, include_category), clients, correlation)
    return success(f"Book data with id '{book_id}' fetched successfully", book)


@router.put("/{book_id}")
async def update_book(
    book_id: UUID4,
    body: BookUpdateBody,
    _admin: FromDishka[AdminUser],
    clients: FromDishka[ServiceClients],
    correlation: FromDishka[CorrelationContext],
) -> JSONResponse:
    payload = {"id": str(book_id), **body.model_dump(mode="json")}
    book = await clients.book.call("UpdateBook", payload, correlation)
    return success("Book updated successfully", book)


@router.delete("/{book_id}")
async def delete_book(
    book_id: UUID4,
    body: DeleteBody,
    _admin: FromDishka[AdminUser],
    clients: FromDishka[ServiceClients],
    correlation: FromDishka[CorrelationContext],
) -> JSONResponse:
    payload = {"id": str(book_id), "version": body.version}
    result = await clients.book.call("DeleteBook", payload, correlation)
    return success("Book deleted successfully", result)
