"""Authentication routes, forwarded to the auth service.

Registration, OTP verification, login and token validation are public.
Refresh and logout act on the caller's own session, so the user id comes
from the validated bearer token and never from the body.
"""

from __future__ import annotations

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter
from fastapi.responses import JSONResponse
from library_service_libs.error_handling import CorrelationContext
from library_service_libs.logging_utils import create_service_logger

from ..app.auth_provider import AuthenticatedUser
from ..implementations.rpc_client import ServiceClients
from ..models.requests import (
    LoginBody,
    RefreshTokenBody,
    RegisterBody,
    SendOtpBody,
    ValidateTokenBody,
    VerifyEmailBody,
)
from ._route_utils import success

router = APIRouter(prefix="/auth", route_class=DishkaRoute)
logger = create_service_logger("api_gateway.auth_routes")


@router.post("/register", status_code=201)
async def register(
    body: RegisterBody,
    clients: FromDishka[ServiceClients],
    correlation: FromDishka[CorrelationContext],
) -> JSONResponse:
    user = await clients.auth.call("Register", body.model_dump(mode="json"), correlation)
    logger.info("User registered", user_id=user.get("id"))
    return success("Registration successful", user, status_code=201)


@router.post("/send-otp")
async def send_otp(
    body: SendOtpBody,
    clients: FromDishka[ServiceClients],
    correlation: FromDishka[CorrelationContext],
) -> JSONResponse:
    result = await clients.auth.call("SendOTP", body.model_dump(mode="json"), correlation)
    return success(f"OTP code will be sent to {body.email}", result)


@router.post("/verify-email")
async def verify_email(
    body: VerifyEmailBody,
    clients: FromDishka[ServiceClients],
    correlation: FromDishka[CorrelationContext],
) -> JSONResponse:
    result = await clients.auth.call("VerifyEmail", body.model_dump(mode="json"), correlation)
    return success("Email verification successful", result)


@router.post("/login")
async def login(
    body: LoginBody,
    clients: FromDishka[ServiceClients],
    correlation: FromDishka[CorrelationContext],
) -> JSONResponse:
    tokens = await clients.auth.call("Login", body.model_dump(mode="json"), correlation)
    return success("Login successful", tokens)


@router.post("/validate-token")
async def validate_token(
    body: ValidateTokenBody,
    clients: FromDishka[ServiceClients],
    correlation: FromDishka[CorrelationContext],
) -> JSONResponse:
    result = await clients.auth.call("ValidateToken", body.model_dump(mode="json"), correlation)
    return success("Token validation successful", result)


@router.post("/refresh-token")
async def refresh_token(
    body: RefreshTokenBody,
    user: FromDishka[AuthenticatedUser],
    clients: FromDishka[ServiceClients],
    correlation: FromDishka[CorrelationContext],
) -> JSONResponse:
    payload = {"user_id": str(user.user_id), "refresh_token": body.refresh_token}
    tokens = await clients.auth.call("RefreshToken", payload, correlation)
    return success("Token refresh successful", tokens)


@router.post("/logout")
async def logout(
    user: FromDishka[AuthenticatedUser],
    clients: FromDishka[ServiceClients],
    correlation: FromDishka[CorrelationContext],
) -> JSONResponse:
    result = await clients.auth.call("Logout", {"user_id": str(user.user_id)}, correlation)
    logger.info("User logged out", user_id=str(user.user_id))
    return success("Logout successful", result)
