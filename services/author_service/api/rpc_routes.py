"""RPC routes for the Author Service."""

from __future__ import annotations

from typing import Any

from dishka import FromDishka
from library_service_libs.error_handling import CorrelationContext
from library_service_libs.rpc import parse_rpc_request, rpc_blueprint, rpc_response
from quart_dishka import inject

from services.author_service.api.schemas import (
    CreateAuthorRequest,
    DeleteAuthorRequest,
    GetAuthorRequest,
    ListAuthorsRequest,
    UpdateAuthorRequest,
)
from services.author_service.domain_handlers.author_handler import AuthorHandler

bp = rpc_blueprint("author")

RpcResult = tuple[dict[str, Any], int]


@bp.post("/CreateAuthor")
@inject
async def create_author(
    handler: FromDishka[AuthorHandler], correlation: FromDishka[CorrelationContext]
) -> RpcResult:
    req = await parse_rpc_request(CreateAuthorRequest)
    return rpc_response(await handler.create_author(req, correlation))


@bp.post("/GetAuthor")
@inject
async def get_author(
    handler: FromDishka[AuthorHandler], correlation: FromDishka[CorrelationContext]
) -> RpcResult:
    req = await parse_rpc_request(GetAuthorRequest)
    return rpc_response(await handler.get_author(req, correlation))


@bp.post("/UpdateAuthor")
@inject
async def update_author(
    handler: FromDishka[AuthorHandler], correlation: FromDishka[CorrelationContext]
) -> RpcResult:
    req = await parse_rpc_request(UpdateAuthorRequest)
    return rpc_response(await handler.update_author(req, correlation))


@bp.post("/DeleteAuthor")
@inject
async def delete_author(
    handler: FromDishka[AuthorHandler], correlation: FromDishka[CorrelationContext]
) -> RpcResult:
    req = await parse_rpc_request(DeleteAuthorRequest)
    return rpc_response(await handler.delete_author(req, correlation))


@bp.post("/ListAuthors")
@inject
async def list_authors(
    handler: FromDishka[AuthorHandler], correlation: FromDishka[CorrelationContext]
) -> RpcResult:
    req = await parse_rpc_request(ListAuthorsRequest)
    return rpc_response(await handler.list_authors(req, correlation))
