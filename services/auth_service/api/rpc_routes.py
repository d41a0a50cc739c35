"""RPC routes for the Auth Service."""

from __future__ import annotations

from typing import Any

from dishka import FromDishka
from library_service_libs.error_handling import CorrelationContext
from library_service_libs.rpc import parse_rpc_request, rpc_blueprint, rpc_response
from quart_dishka import inject

from services.auth_service.api.schemas import (
    LoginRequest,
    LogoutRequest,
    RefreshTokenRequest,
    RegisterRequest,
    SendOtpRequest,
    ValidateTokenRequest,
    VerifyEmailRequest,
)
from services.auth_service.domain_handlers.authentication_handler import AuthenticationHandler
from services.auth_service.domain_handlers.registration_handler import RegistrationHandler

bp = rpc_blueprint("auth")

RpcResult = tuple[dict[str, Any], int]


@bp.post("/Register")
@inject
async def register(
    handler: FromDishka[RegistrationHandler], correlation: FromDishka[CorrelationContext]
) -> RpcResult:
    req = await parse_rpc_request(RegisterRequest)
    return rpc_response(await handler.register(req, correlation))


@bp.post("/SendOTP")
@inject
async def send_otp(
    handler: FromDishka[RegistrationHandler], correlation: FromDishka[CorrelationContext]
) -> RpcResult:
    req = await parse_rpc_request(SendOtpRequest)
    return rpc_response(await handler.send_otp(req, correlation))


@bp.post("/VerifyEmail")
@inject
async def verify_email(
    handler: FromDishka[RegistrationHandler], correlation: FromDishka[CorrelationContext]
) -> RpcResult:
    req = await parse_rpc_request(VerifyEmailRequest)
    return rpc_response(await handler.verify_email(req, correlation))


@bp.post("/Login")
@inject
async def login(
    handler: FromDishka[AuthenticationHandler], correlation: FromDishka[CorrelationContext]
) -> RpcResult:
    req = await parse_rpc_request(LoginRequest)
    return rpc_response(await handler.login(req, correlation))


@bp.post("/ValidateToken")
@inject
async def validate_token(
    handler: FromDishka[AuthenticationHandler], correlation: FromDishka[CorrelationContext]
) -> RpcResult:
    req = await parse_rpc_request(ValidateTokenRequest)
    return rpc_response(await handler.validate_token(req, correlation))


@bp.post("/RefreshToken")
@inject
async def refresh_token(
    handler: FromDishka[AuthenticationHandler], correlation: FromDishka[CorrelationContext]
) -> RpcResult:
    req = await parse_rpc_request(RefreshTokenRequest)
    return rpc_response(await handler.refresh_token(req, correlation))


@bp.post("/Logout")
@inject
async def logout(
    handler: FromDishka[AuthenticationHandler], correlation: FromDishka[CorrelationContext]
) -> RpcResult:
    req = await parse_rpc_request(LogoutRequest)
    return rpc_response(await handler.logout(req, correlation))
