"""RPC routes for the User Service."""

from __future__ import annotations

from typing import Any

from dishka import FromDishka
from library_service_libs.error_handling import CorrelationContext
from library_service_libs.rpc import parse_rpc_request, rpc_blueprint, rpc_response
from quart_dishka import inject

from services.user_service.api.schemas import (
    GetUserByEmailRequest,
    GetUserByIdRequest,
    ListUsersRequest,
)
from services.user_service.domain_handlers.user_handler import UserHandler

bp = rpc_blueprint("user")

RpcResult = tuple[dict[str, Any], int]


@bp.post("/GetUserById")
@inject
async def get_user_by_id(
    handler: FromDishka[UserHandler], correlation: FromDishka[CorrelationContext]
) -> RpcResult:
    req = await parse_rpc_request(GetUserByIdRequest)
    return rpc_response(await handler.get_user_by_id(req, correlation))


@bp.post("/GetUserByEmail")
@inject
async def get_user_by_email(
    handler: FromDishka[UserHandler], correlation: FromDishka[CorrelationContext]
) -> RpcResult:
    req = await parse_rpc_request(GetUserByEmailRequest)
    return rpc_response(await handler.get_user_by_email(req, correlation))


@bp.post("/ListUsers")
@inject
async def list_users(
    handler: FromDishka[UserHandler], correlation: FromDishka[CorrelationContext]
) -> RpcResult:
    req = await parse_rpc_request(ListUsersRequest)
    return rpc_response(await handler.list_users(req, correlation))
