"""User routes, forwarded to the user service."""

from __future__ import annotations

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from library_service_libs.error_handling import CorrelationContext

from ..app.auth_provider import AdminUser, AuthenticatedUser
from ..implementations.rpc_client import ServiceClients
from ._route_utils import Pagination, pagination_params, success

router = APIRouter(prefix="/users", route_class=DishkaRoute)


@router.get("/me")
async def get_current_user(
    user: FromDishka[AuthenticatedUser],
    clients: FromDishka[ServiceClients],
    correlation: FromDishka[CorrelationContext],
) -> JSONResponse:
    profile = await clients.user.call("GetUserById", {"id": str(user.user_id)}, correlation)
    return success("User data fetched successfully", profile)


@router.get("")
async def list_users(
    _admin: FromDishka[AdminUser],
    clients: FromDishka[ServiceClients],
    correlation: FromDishka[CorrelationContext],
    pagination: Pagination = Depends(pagination_params),
) -> JSONResponse:
    result = await clients.user.call("ListUsers", pagination.as_payload(), correlation)
    return success("User data fetched successfully", result)
