"""Category routes, forwarded to the category service.

Reads need an authenticated caller; mutations need an admin. With
``includeBooks=true`` each category carries its first page of books from the
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
from ..models.requests import CategoryBody, CategoryUpdateBody, DeleteBody
from ._route_utils import SAMPLE_BOOKS_PAGE, Pagination, pagination_params, success

router = APIRouter(prefix="/categories", route_class=DishkaRoute)
logger = create_service_logger("api_gateway.category_routes")


async def _attach_books(
    category: dict[str, Any], clients: ServiceClients, correlation: CorrelationContext
) -> dict[str, Any]:
    result = await clients.book.call(
        "ListBooksByCategory", {"category_id": category["id"], **SAMPLE_BOOKS_PAGE}, correlation
    )
    category["sample_books"] = result["books"]
    category["total_books"] = result["pagination"]["total_items"]
    return category


@router.get("")
async def list_categories(
    _user: FromDishka[AuthenticatedUser],
    clients: FromDishka[ServiceClients],
    correlation: FromDishka[CorrelationContext],
    pagination: Pagination = Depends(pagination_params),
    include_books: bool = Query(False, alias="includeBooks"),
) -> JSONResponse:
    result = await clients.category.call("ListCategories", pagination.as_payload(), correlation)
    if include_books:
        await asyncio.gather(
            *(_attach_books(category, clients, correlation) for category in result["categories"])
        )
    return success("Category data fetched successfully", result)


@router.post("", status_code=201)
async def create_category(
    body: CategoryBody,
    admin: FromDishka[AdminUser],
    clients: FromDishka[ServiceClients],
    correlation: FromDishka[CorrelationContext],
) -> JSONResponse:
    category = await clients.category.call(
        "CreateCategory", body.model_dump(mode="json"), correlation
    )
    logger.info("Category created", category_id=category.get("id"), admin_id=str(admin.user_id))
    return success("Category created successfully", category, status_code=201)


@router.get("/{category_id}")
async def get_category(
    category_id: UUID4,
    _user: FromDishka[AuthenticatedUser],
    clients: FromDishka[ServiceClients],
    correlation: FromDishka[CorrelationContext],
    include_books: bool = Query(False, alias="includeBooks"),
) -> JSONResponse:
    category = await clients.category.call("GetCategory", {"id": str(category_id)}, correlation)
    if include_books:
        await _attach_books(category, clients, correlation)
    return success(f"Category data with id '{category_id}' fetched successfully", category)


@router.put("/{category_id}")
async def update_category(
    category_id: UUID4,
    body: CategoryUpdateBody,
    _admin: FromDishka[AdminUser],
    clients: FromDishka[ServiceClients],
    correlation: FromDishka[CorrelationContext],
) -> JSONResponse:
    payload = {"id": str(category_id), **body.model_dump(mode="json")}
    category = await clients.category.call("UpdateCategory", payload, correlation)
    return success("Category updated successfully", category)


@router.delete("/{category_id}")
async def delete_category(
    category_id: UUID4,
    body: DeleteBody,
    _admin: FromDishka[AdminUser],
    clients: FromDishka[ServiceClients],
    correlation: FromDishka[CorrelationContext],
) -> JSONResponse:
    payload = {"id": str(category_id), "version": body.version}
    result = await clients.category.call("DeleteCategory", payload, correlation)
    return success("Category deleted successfully", result)
