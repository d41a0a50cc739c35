"""Protocols for the Auth Service."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Protocol
from uuid import UUID

from library_core.domain_enums import TokenType, UserRole

from services.auth_service.models_db import User


class UserRepositoryProtocol(Protocol):
    async def create_user(
        self, email: str, username: str, password_hash: str, correlation_id: UUID
    ) -> User: ...

    async def get_by_email(self, email: str) -> User | None: ...

    async def get_by_id(self, user_id: UUID) -> User | None: ...

    async def mark_verified(self, user_id: UUID) -> None: ...

    async def record_login(
        self, user_id: UUID, refresh_token: str, login_at: datetime | None = None
    ) -> None: ...

    async def set_refresh_token(self, user_id: UUID, refresh_token: str | None) -> None: ...


class PasswordHasherProtocol(Protocol):
    def hash(self, password: str) -> str: ...

    def verify(self, password_hash: str, password: str) -> bool: ...


class TokenIssuerProtocol(Protocol):
    @property
    def access_ttl_seconds(self) -> int: ...

    def issue(self, user: User, token_type: TokenType) -> str: ...

    def decode(self, token: str, expected_type: TokenType) -> dict[str, Any]:
        """Verified claims; raises ``jwt.InvalidTokenError`` on any failure."""
        ...


class OtpStoreProtocol(Protocol):
    async def save(self, email: str, otp: str) -> None: ...

    async def load(self, email: str) -> str | None: ...

    async def discard(self, email: str) -> None: ...


class OtpNotificationPublisherProtocol(Protocol):
    async def publish_otp(self, email: str, otp: str, correlation_id: str) -> None: ...


__all__ = [
    "OtpNotificationPublisherProtocol",
    "OtpStoreProtocol",
    "PasswordHasherProtocol",
    "TokenIssuerProtocol",
    "UserRepositoryProtocol",
    "UserRole",
]
