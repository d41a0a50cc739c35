"""Authentication domain handler for the Auth Service.

Login issues an access/refresh pair and persists the refresh token on the
user row. Only the most recently issued refresh token is accepted by
RefreshToken, so a refresh rotates the pair and Logout revokes it.
"""

from __future__ import annotations

import hmac
from datetime import UTC, datetime
from typing import Any, NoReturn
from uuid import UUID

import jwt
from library_core.domain_enums import TokenType
from library_service_libs.error_handling import (
    CorrelationContext,
    raise_email_not_verified,
    raise_invalid_token,
    raise_password_mismatch,
    raise_resource_not_found,
)
from library_service_libs.logging_utils import create_service_logger

from services.auth_service.api.schemas import (
    LoginRequest,
    LoginResponse,
    LogoutRequest,
    RefreshTokenRequest,
    StatusResponse,
    TokenPair,
    UserResponse,
    ValidateTokenRequest,
    ValidateTokenResponse,
)
from services.auth_service.metrics import get_metrics
from services.auth_service.models_db import User
from services.auth_service.protocols import (
    PasswordHasherProtocol,
    TokenIssuerProtocol,
    UserRepositoryProtocol,
)

logger = create_service_logger("auth_service.domain_handlers.authentication")


class AuthenticationHandler:
    def __init__(
        self,
        user_repo: UserRepositoryProtocol,
        token_issuer: TokenIssuerProtocol,
        password_hasher: PasswordHasherProtocol,
        service_name: str,
    ) -> None:
        self._user_repo = user_repo
        self._token_issuer = token_issuer
        self._password_hasher = password_hasher
        self._service_name = service_name
        metrics = get_metrics()
        self._operations = metrics["auth_operations_total"]
        self._tokens_issued = metrics["auth_tokens_issued_total"]

    async def login(self, request: LoginRequest, correlation: CorrelationContext) -> LoginResponse:
        operation = "Login"
        user = await self._user_repo.get_by_email(request.email)

        # Unknown email and wrong password are indistinguishable to the caller
        if user is None or not self._password_hasher.verify(user.password_hash, request.password):
            self._operations.labels(operation=operation, outcome="password_mismatch").inc()
            raise_password_mismatch(
                service=self._service_name,
                operation=operation,
                correlation_id=correlation.uuid,
            )
        if not user.verified:
            self._operations.labels(operation=operation, outcome="not_verified").inc()
            raise_email_not_verified(
                service=self._service_name,
                operation=operation,
                email=user.email,
                correlation_id=correlation.uuid,
            )

        tokens = self._issue_pair(user)
        now = datetime.now(UTC)
        await self._user_repo.record_login(user.id, tokens.refresh_token, now)
        user.last_login_at = now

        self._operations.labels(operation=operation, outcome="success").inc()
        logger.info("User logged in", user_id=str(user.id))
        return LoginResponse(**tokens.model_dump(), user=UserResponse.model_validate(user))

    async def validate_token(
        self, request: ValidateTokenRequest, correlation: CorrelationContext
    ) -> ValidateTokenResponse:
        claims = self._decode(request.token, TokenType.ACCESS, correlation, "ValidateToken")
        return ValidateTokenResponse(
            valid=True,
            user_id=claims["userId"],
            role=claims["role"],
            email=claims["email"],
        )

    async def refresh_token(
        self, request: RefreshTokenRequest, correlation: CorrelationContext
    ) -> TokenPair:
        operation = "RefreshToken"
        claims = self._decode(request.refresh_token, TokenType.REFRESH, correlation, operation)
        if claims["userId"] != str(request.user_id):
            self._reject(operation, "token issued to another user", correlation)

        user = await self._require_user(request.user_id, correlation, operation)
        if not user.refresh_token or not hmac.compare_digest(
            user.refresh_token, request.refresh_token
        ):
            self._reject(operation, "refresh token revoked or superseded", correlation)

        tokens = self._issue_pair(user)
        await self._user_repo.set_refresh_token(user.id, tokens.refresh_token)

        self._operations.labels(operation=operation, outcome="success").inc()
        logger.info("Tokens refreshed", user_id=str(user.id))
        return tokens

    async def logout(
        self, request: LogoutRequest, correlation: CorrelationContext
    ) -> StatusResponse:
        user = await self._require_user(request.user_id, correlation, "Logout")
        await self._user_repo.set_refresh_token(user.id, None)

        self._operations.labels(operation="Logout", outcome="success").inc()
        logger.info("User logged out", user_id=str(user.id))
        return StatusResponse(message="Logout successful")

    def _issue_pair(self, user: User) -> TokenPair:
        access = self._token_issuer.issue(user, TokenType.ACCESS)
        refresh = self._token_issuer.issue(user, TokenType.REFRESH)
        self._tokens_issued.labels(token_type=TokenType.ACCESS.value).inc()
        self._tokens_issued.labels(token_type=TokenType.REFRESH.value).inc()
        return TokenPair(
            access_token=access,
            refresh_token=refresh,
            expires_in=self._token_issuer.access_ttl_seconds,
        )

    def _decode(
        self,
        token: str,
        expected_type: TokenType,
        correlation: CorrelationContext,
        operation: str,
    ) -> dict[str, Any]:
        try:
            return self._token_issuer.decode(token, expected_type)
        except jwt.ExpiredSignatureError:
            self._reject(operation, "token expired", correlation)
        except jwt.InvalidTokenError as e:
            self._reject(operation, str(e) or e.__class__.__name__, correlation)

    def _reject(
        self, operation: str, reason: str, correlation: CorrelationContext
    ) -> NoReturn:
        self._operations.labels(operation=operation, outcome="invalid_token").inc()
        raise_invalid_token(
            service=self._service_name,
            operation=operation,
            reason=reason,
            correlation_id=correlation.uuid,
        )

    async def _require_user(
        self, user_id: UUID, correlation: CorrelationContext, operation: str
    ) -> User:
        user = await self._user_repo.get_by_id(user_id)
        if user is None:
            raise_resource_not_found(
                service=self._service_name,
                operation=operation,
                resource_type="User",
                resource_id=str(user_id),
                correlation_id=correlation.uuid,
            )
        return user
