"""Author routes, forwarded to the author service.

Reads need an authenticated caller; mutations need an admin. With
``includeBooks=true`` each author carries its first page of books from the
book service as ``sample_books`` plus ``total_books``.
"""

from __future__ import annotations

import asyncio
from typing import Any

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from library_service_libs.error_handling import CorrelationContext
from library_service_libs.logging_utils import create_service_logger
from pydantic import UUID4

from ..app.auth_provider import AdminUser, AuthenticatedUser
from ..implementations.rpc_client import ServiceClients
from ..models.requests import AuthorBody, AuthorUpdateBody, DeleteBody
from ._route_utils import SAMPLE_BOOKS_PAGE, Pagination, pagination_params, success

router = APIRouter(prefix="/authors", route_class=DishkaRoute)
logger = create_service_logger("api_gateway.author_routes")


async def _attach_books(
    author: dict[str, Any], clients: ServiceClients, correlation: CorrelationContext
) -> dict[str, Any]:
    result = await clients.book.call(
        "ListBooksByAuthor", {"author_id": author["id"], **SAMPLE_BOOKS_PAGE}, correlation
    )
    author["sample_books"] = result["books"]
    author["total_books"] = result["pagination"]["total_items"]
    return author


@router.get("")
async def list_authors(
    _user: FromDishka[AuthenticatedUser],
    clients: FromDishka[ServiceClients],
    correlation: FromDishka[CorrelationContext],
    pagination: Pagination = Depends(pagination_params),
    include_books: bool = Query(False, alias="includeBooks"),
) -> JSONResponse:
    result = await clients.author.call("ListAuthors", pagination.as_payload(), correlation)
    if include_books:
        await asyncio.gather(
            *(_attach_books(author, clients, correlation) for author in result["authors"])
        )
    return success("Author data fetched successfully", result)


@router.post("", status_code=201)
async def create_author(
    body: AuthorBody,
    admin: FromDishka[AdminUser],
    clients: FromDishka[ServiceClients],
    correlation: FromDishka[CorrelationContext],
) -> JSONResponse:
    author = await clients.author.call("CreateAuthor", body.model_dump(mode="json"), correlation)
    logger.info("Author created", author_id=author.get("id"), admin_id=str(admin.user_id))
    return success("Author created successfully", author, status_code=201)


@router.get("/{author_id}")
async def get_author(
    author_id: UUID4,
    _user: FromDishka[AuthenticatedUser],
    clients: FromDishka[ServiceClients],
    correlation: FromDishka[CorrelationContext],
    include_books: bool = Query(False, alias="includeBooks"),
) -> JSONResponse:
    author = await clients.author.call("GetAuthor", {"id": str(author_id)}, correlation)
    if include_books:
        await _attach_books(author, clients, correlation)
    return success(f"Author data with id '{author_id}' fetched successfully", author)


@router.put("/{author_id}")
async def update_author(
    author_id: UUID4,
    body: AuthorUpdateBody,
    _admin: FromDishka[AdminUser],
    clients: FromDishka[ServiceClients],
    correlation: FromDishka[CorrelationContext],
) -> JSONResponse:
    payload = {"id": str(author_id), **body.model_dump(mode="json")}
    author = await clients.author.call("UpdateAuthor", payload, correlation)
    return success("Author updated successfully", author)


@router.delete("/{author_id}")
async def delete_author(
    author_id: UUID4,
    body: DeleteBody,
    _admin: FromDishka[AdminUser],
    clients: FromDishka[ServiceClients],
    correlation: FromDishka[CorrelationContext],
) -> JSONResponse:
    payload = {"id": str(author_id), "version": body.version}
    result = await clients.author.call("DeleteAuthor", payload, correlation)
    return success("Author deleted successfully", result)
