"""RPC routes for the Category Service."""

from __future__ import annotations

from typing import Any

from dishka import FromDishka
from library_service_libs.error_handling import CorrelationContext
from library_service_libs.rpc import parse_rpc_request, rpc_blueprint, rpc_response
from quart_dishka import inject

from services.category_service.api.schemas import (
    CreateCategoryRequest,
    DeleteCategoryRequest,
    GetCategoryRequest,
    ListCategoriesRequest,
    UpdateCategoryRequest,
)
from services.category_service.domain_handlers.category_handler import CategoryHandler

bp = rpc_blueprint("category")

RpcResult = tuple[dict[str, Any], int]


@bp.post("/CreateCategory")
@inject
async def create_category(
    handler: FromDishka[CategoryHandler], correlation: FromDishka[CorrelationContext]
) -> RpcResult:
    req = await parse_rpc_request(CreateCategoryRequest)
    return rpc_response(await handler.create_category(req, correlation))


@bp.post("/GetCategory")
@inject
async def get_category(
    handler: FromDishka[CategoryHandler], correlation: FromDishka[CorrelationContext]
) -> RpcResult:
    req = await parse_rpc_request(GetCategoryRequest)
    return rpc_response(await handler.get_category(req, correlation))


@bp.post("/UpdateCategory")
@inject
async def update_category(
    handler: FromDishka[CategoryHandler], correlation: FromDishka[CorrelationContext]
) -> RpcResult:
    req = await parse_rpc_request(UpdateCategoryRequest)
    return rpc_response(await handler.update_category(req, correlation))


@bp.post("/DeleteCategory")
@inject
async def delete_category(
    handler: FromDishka[CategoryHandler], correlation: FromDishka[CorrelationContext]
) -> RpcResult:
    req = await parse_rpc_request(DeleteCategoryRequest)
    return rpc_response(await handler.delete_category(req, correlation))


@bp.post("/ListCategories")
@inject
async def list_categories(
    handler: FromDishka[CategoryHandler], correlation: FromDishka[CorrelationContext]
) -> RpcResult:
    req = await parse_rpc_request(ListCategoriesRequest)
    return rpc_response(await handler.list_categories(req, correlation))
