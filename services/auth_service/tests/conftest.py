"""Shared test fixtures for Auth Service tests."""

from __future__ import annotations

from collections.abc import AsyncIterator
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest
from library_service_libs.error_handling import CorrelationContext, correlation_from_value
from prometheus_client import REGISTRY
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import NullPool

from services.auth_service.domain_handlers.authentication_handler import AuthenticationHandler
from services.auth_service.domain_handlers.registration_handler import RegistrationHandler
from services.auth_service.implementations.password_hasher_impl import Argon2idPasswordHasher
from services.auth_service.implementations.token_issuer_impl import JwtTokenIssuer
from services.auth_service.implementations.user_repository_sqlalchemy_impl import (
    SqlAlchemyUserRepo,
)
from services.auth_service.models_db import Base
from services.auth_service.tests.fakes import InMemoryOtpStore


@pytest.fixture(autouse=True)
def _clear_prometheus_registry() -> Any:
    """Clear the default Prometheus registry so metric modules can be re-imported."""
    collectors = list(REGISTRY._collector_to_names.keys())
    for collector in collectors:
        REGISTRY.unregister(collector)
    yield


@pytest.fixture
async def engine(tmp_path: Path) -> AsyncIterator[AsyncEngine]:
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'identity.db'}",
        poolclass=NullPool,
        connect_args={"timeout": 30},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def correlation() -> CorrelationContext:
    return correlation_from_value(str(uuid4()), source="test")


@pytest.fixture
def user_repo(engine: AsyncEngine) -> SqlAlchemyUserRepo:
    return SqlAlchemyUserRepo(engine, "auth_service")


@pytest.fixture
def password_hasher() -> Argon2idPasswordHasher:
    return Argon2idPasswordHasher(time_cost=1)


@pytest.fixture
def token_issuer() -> JwtTokenIssuer:
    return JwtTokenIssuer(
        secret="test-secret",
        issuer="library-auth-service",
        access_ttl_seconds=900,
        refresh_ttl_seconds=3600,
    )


@pytest.fixture
def otp_store() -> InMemoryOtpStore:
    return InMemoryOtpStore()


@pytest.fixture
def otp_publisher() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def registration(
    user_repo: SqlAlchemyUserRepo,
    password_hasher: Argon2idPasswordHasher,
    otp_store: InMemoryOtpStore,
    otp_publisher: AsyncMock,
) -> RegistrationHandler:
    return RegistrationHandler(user_repo, password_hasher, otp_store, otp_publisher, "auth_service")


@pytest.fixture
def authentication(
    user_repo: SqlAlchemyUserRepo,
    token_issuer: JwtTokenIssuer,
    password_hasher: Argon2idPasswordHasher,
) -> AuthenticationHandler:
    return AuthenticationHandler(user_repo, token_issuer, password_hasher, "auth_service")
