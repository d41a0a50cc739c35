"""
Authentication dependencies for guarded routes.

Routes ask for ``FromDishka[AuthenticatedUser]`` or ``FromDishka[AdminUser]``.
Resolving either validates the bearer token against the auth service's
``ValidateToken``; the gateway never decodes tokens itself.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import NewType
from uuid import UUID

from dishka import Provider, Scope, from_context, provide
from fastapi import Request
from library_core.domain_enums import UserRole
from library_service_libs.error_handling import (
    CorrelationContext,
    correlation_from_value,
    raise_authentication_error,
    raise_authorization_error,
)
from library_service_libs.logging_utils import create_service_logger

from services.api_gateway_service.implementations.rpc_client import ServiceClients

BearerToken = NewType("BearerToken", str)

SERVICE_NAME = "api_gateway_service"

logger = create_service_logger("api_gateway.auth_provider")


@dataclass(frozen=True)
class AuthenticatedUser:
    user_id: UUID
    role: UserRole
    email: str

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


@dataclass(frozen=True)
class AdminUser(AuthenticatedUser):
    """An authenticated user whose role is admin."""


class AuthProvider(Provider):
    """Provider for authentication dependencies at REQUEST scope."""

    request = from_context(provides=Request, scope=Scope.REQUEST)

    @provide(scope=Scope.REQUEST)
    def provide_correlation(self, request: Request) -> CorrelationContext:
        """Correlation of the current request, as allocated by the middleware."""
        correlation = getattr(request.state, "correlation", None)
        if correlation is None:
            correlation = correlation_from_value(None, source="generated")
        return correlation

    @provide(scope=Scope.REQUEST)
    def extract_bearer_token(
        self, request: Request, correlation: CorrelationContext
    ) -> BearerToken:
        authorization = request.headers.get("Authorization")
        if not authorization:
            raise_authentication_error(
                service=SERVICE_NAME,
                operation="extract_bearer_token",
                message="Not authenticated",
                correlation_id=correlation.uuid,
                reason="missing_authorization_header",
            )

        parts = authorization.split()
        if len(parts) != 2 or parts[0].lower() != "bearer":
            raise_authentication_error(
                service=SERVICE_NAME,
                operation="extract_bearer_token",
                message="Invalid authentication format",
                correlation_id=correlation.uuid,
                reason="invalid_authorization_format",
            )

        return BearerToken(parts[1])

    @provide(scope=Scope.REQUEST)
    async def provide_authenticated_user(
        self,
        token: BearerToken,
        clients: ServiceClients,
        request: Request,
        correlation: CorrelationContext,
    ) -> AuthenticatedUser:
        body = await clients.auth.call("ValidateToken", {"token": token}, correlation)
        if not body.get("valid"):
            raise_authentication_error(
                service=SERVICE_NAME,
                operation="validate_token",
                message="Invalid or expired token",
                correlation_id=correlation.uuid,
                reason="token_rejected",
            )

        user = AuthenticatedUser(
            user_id=UUID(body["user_id"]),
            role=UserRole(body["role"]),
            email=body["email"],
        )
        request.state.user_id = str(user.user_id)
        request.state.role = user.role.value
        logger.debug("Token validated", user_id=str(user.user_id), role=user.role.value)
        return user

    @provide(scope=Scope.REQUEST)
    def provide_admin_user(
        self, user: AuthenticatedUser, correlation: CorrelationContext
    ) -> AdminUser:
        if not user.is_admin:
            raise_authorization_error(
                service=SERVICE_NAME,
                operation="require_admin",
                message="Admin role required",
                correlation_id=correlation.uuid,
                user_id=str(user.user_id),
            )
        return AdminUser(user_id=user.user_id, role=user.role, email=user.email)
