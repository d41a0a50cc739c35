"""Login, token validation, refresh rotation and logout."""

from __future__ import annotations

import asyncio
import time
from uuid import uuid4

import jwt
import pytest
from library_service_libs.error_handling import CorrelationContext, LibraryError

from services.auth_service.api.schemas import (
    LoginRequest,
    LogoutRequest,
    RefreshTokenRequest,
    RegisterRequest,
    UserResponse,
    ValidateTokenRequest,
)
from services.auth_service.domain_handlers.authentication_handler import AuthenticationHandler
from services.auth_service.domain_handlers.registration_handler import RegistrationHandler
from services.auth_service.implementations.user_repository_sqlalchemy_impl import (
    SqlAlchemyUserRepo,
)

PASSWORD = "Password1!"


async def register_verified(
    registration: RegistrationHandler,
    user_repo: SqlAlchemyUserRepo,
    correlation: CorrelationContext,
    email: str = "alice@example.com",
) -> UserResponse:
    user = await registration.register(
        RegisterRequest(email=email, username="alice", password=PASSWORD), correlation
    )
    await user_repo.mark_verified(user.id)
    return user


class TestLogin:
    async def test_verified_user_gets_token_pair(
        self,
        registration: RegistrationHandler,
        authentication: AuthenticationHandler,
        user_repo: SqlAlchemyUserRepo,
        correlation: CorrelationContext,
    ) -> None:
        user = await register_verified(registration, user_repo, correlation)

        result = await authentication.login(
            LoginRequest(email="ALICE@example.com", password=PASSWORD), correlation
        )

        assert result.token_type == "Bearer"
        assert result.expires_in == 900
        claims = jwt.decode(result.access_token, "test-secret", algorithms=["HS256"])
        assert claims["userId"] == str(user.id)
        assert claims["role"] == "user"
        assert claims["email"] == "alice@example.com"
        assert claims["tokenType"] == "access"
        assert claims["iss"] == "library-auth-service"
        assert claims["exp"] - claims["iat"] == 900

        stored = await user_repo.get_by_id(user.id)
        assert stored is not None
        assert stored.refresh_token == result.refresh_token
        assert stored.last_login_at is not None

    @pytest.mark.parametrize(
        "email, password",
        [("alice@example.com", "Wrong-pass1"), ("nobody@example.com", PASSWORD)],
    )
    async def test_bad_credentials_are_indistinguishable(
        self,
        registration: RegistrationHandler,
        authentication: AuthenticationHandler,
        user_repo: SqlAlchemyUserRepo,
        correlation: CorrelationContext,
        email: str,
        password: str,
    ) -> None:
        await register_verified(registration, user_repo, correlation)

        with pytest.raises(LibraryError) as exc_info:
            await authentication.login(LoginRequest(email=email, password=password), correlation)

        assert exc_info.value.error_code == "PASSWORD_MISMATCH"
        assert exc_info.value.status_code == 401

    async def test_unverified_user_is_denied(
        self,
        registration: RegistrationHandler,
        authentication: AuthenticationHandler,
        correlation: CorrelationContext,
    ) -> None:
        await registration.register(
            RegisterRequest(email="bob@example.com", username="bob", password=PASSWORD),
            correlation,
        )

        with pytest.raises(LibraryError) as exc_info:
            await authentication.login(
                LoginRequest(email="bob@example.com", password=PASSWORD), correlation
            )

        assert exc_info.value.error_code == "EMAIL_NOT_VERIFIED"
        assert exc_info.value.rpc_status.value == "PERMISSION_DENIED"


class TestValidateToken:
    async def test_access_token_is_valid(
        self,
        registration: RegistrationHandler,
        authentication: AuthenticationHandler,
        user_repo: SqlAlchemyUserRepo,
        correlation: CorrelationContext,
    ) -> None:
        user = await register_verified(registration, user_repo, correlation)
        tokens = await authentication.login(
            LoginRequest(email="alice@example.com", password=PASSWORD), correlation
        )

        result = await authentication.validate_token(
            ValidateTokenRequest(token=tokens.access_token), correlation
        )

        assert result.valid is True
        assert result.user_id == user.id
        assert result.role.value == "user"
        assert result.email == "alice@example.com"

    async def test_refresh_token_is_not_an_access_token(
        self,
        registration: RegistrationHandler,
        authentication: AuthenticationHandler,
        user_repo: SqlAlchemyUserRepo,
        correlation: CorrelationContext,
    ) -> None:
        await register_verified(registration, user_repo, correlation)
        tokens = await authentication.login(
            LoginRequest(email="alice@example.com", password=PASSWORD), correlation
        )

        with pytest.raises(LibraryError) as exc_info:
            await authentication.validate_token(
                ValidateTokenRequest(token=tokens.refresh_token), correlation
            )

        assert exc_info.value.error_code == "INVALID_TOKEN"

    @pytest.mark.parametrize(
        "token",
        [
            "not-a-jwt",
            jwt.encode({"userId": "x", "tokenType": "access"}, "other-secret", algorithm="HS256"),
        ],
    )
    async def test_garbage_and_foreign_tokens_are_rejected(
        self, authentication: AuthenticationHandler, correlation: CorrelationContext, token: str
    ) -> None:
        with pytest.raises(LibraryError) as exc_info:
            await authentication.validate_token(ValidateTokenRequest(token=token), correlation)

        assert exc_info.value.error_code == "INVALID_TOKEN"
        assert exc_info.value.status_code == 401

    async def test_expired_token_is_rejected(
        self, authentication: AuthenticationHandler, correlation: CorrelationContext
    ) -> None:
        now = int(time.time())
        expired = jwt.encode(
            {
                "userId": str(uuid4()),
                "role": "user",
                "email": "alice@example.com",
                "tokenType": "access",
                "iss": "library-auth-service",
                "iat": now - 1000,
                "exp": now - 100,
            },
            "test-secret",
            algorithm="HS256",
        )

        with pytest.raises(LibraryError) as exc_info:
            await authentication.validate_token(ValidateTokenRequest(token=expired), correlation)

        assert exc_info.value.error_detail.details["reason"] == "token expired"


class TestRefreshAndLogout:
    async def test_refresh_rotates_the_stored_token(
        self,
        registration: RegistrationHandler,
        authentication: AuthenticationHandler,
        user_repo: SqlAlchemyUserRepo,
        correlation: CorrelationContext,
    ) -> None:
        user = await register_verified(registration, user_repo, correlation)
        tokens = await authentication.login(
            LoginRequest(email="alice@example.com", password=PASSWORD), correlation
        )
        # A later iat guarantees the rotated token differs from the original
        await asyncio.sleep(1.1)

        rotated = await authentication.refresh_token(
            RefreshTokenRequest(user_id=user.id, refresh_token=tokens.refresh_token), correlation
        )

        assert rotated.refresh_token != tokens.refresh_token
        stored = await user_repo.get_by_id(user.id)
        assert stored is not None and stored.refresh_token == rotated.refresh_token

        with pytest.raises(LibraryError) as exc_info:
            await authentication.refresh_token(
                RefreshTokenRequest(user_id=user.id, refresh_token=tokens.refresh_token),
                correlation,
            )
        assert exc_info.value.error_code == "INVALID_TOKEN"

    async def test_token_of_another_user_is_rejected(
        self,
        registration: RegistrationHandler,
        authentication: AuthenticationHandler,
        user_repo: SqlAlchemyUserRepo,
        correlation: CorrelationContext,
    ) -> None:
        await register_verified(registration, user_repo, correlation)
        tokens = await authentication.login(
            LoginRequest(email="alice@example.com", password=PASSWORD), correlation
        )

        with pytest.raises(LibraryError) as exc_info:
            await authentication.refresh_token(
                RefreshTokenRequest(user_id=uuid4(), refresh_token=tokens.refresh_token),
                correlation,
            )

        assert exc_info.value.error_code == "INVALID_TOKEN"

    async def test_logout_revokes_refresh(
        self,
        registration: RegistrationHandler,
        authentication: AuthenticationHandler,
        user_repo: SqlAlchemyUserRepo,
        correlation: CorrelationContext,
    ) -> None:
        user = await register_verified(registration, user_repo, correlation)
        tokens = await authentication.login(
            LoginRequest(email="alice@example.com", password=PASSWORD), correlation
        )

        await authentication.logout(LogoutRequest(user_id=user.id), correlation)

        stored = await user_repo.get_by_id(user.id)
        assert stored is not None and stored.refresh_token is None
        with pytest.raises(LibraryError) as exc_info:
            await authentication.refresh_token(
                RefreshTokenRequest(user_id=user.id, refresh_token=tokens.refresh_token),
                correlation,
            )
        assert exc_info.value.error_code == "INVALID_TOKEN"
