"""Dishka DI configuration for the Auth Service."""

from __future__ import annotations

from collections.abc import AsyncIterator

from dishka import Provider, Scope, provide
from library_service_libs.protocols import MessagePublisherProtocol, RedisClientProtocol
from library_service_libs.redis_client import RedisClient
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from services.auth_service.config import Settings, settings
from services.auth_service.domain_handlers.authentication_handler import AuthenticationHandler
from services.auth_service.domain_handlers.registration_handler import RegistrationHandler
from services.auth_service.implementations.otp_publisher_impl import OtpNotificationPublisher
from services.auth_service.implementations.otp_store_impl import RedisOtpStore
from services.auth_service.implementations.password_hasher_impl import Argon2idPasswordHasher
from services.auth_service.implementations.token_issuer_impl import JwtTokenIssuer
from services.auth_service.implementations.user_repository_sqlalchemy_impl import (
    SqlAlchemyUserRepo,
)
from services.auth_service.protocols import (
    OtpNotificationPublisherProtocol,
    OtpStoreProtocol,
    PasswordHasherProtocol,
    TokenIssuerProtocol,
    UserRepositoryProtocol,
)


class CoreProvider(Provider):
    @provide(scope=Scope.APP)
    def provide_settings(self) -> Settings:
        return settings

    @provide(scope=Scope.APP)
    async def provide_database_engine(self, settings: Settings) -> AsyncIterator[AsyncEngine]:
        engine = create_async_engine(settings.DATABASE_URL, echo=False, pool_pre_ping=True)
        yield engine
        await engine.dispose()

    @provide(scope=Scope.APP)
    async def provide_redis_client(self, settings: Settings) -> AsyncIterator[RedisClientProtocol]:
        client = RedisClient(client_id=f"{settings.SERVICE_NAME}-redis", redis_url=settings.REDIS_URL)
        await client.start()
        yield client
        await client.stop()


class AuthServiceProvider(Provider):
    @provide(scope=Scope.APP)
    def provide_user_repo(self, engine: AsyncEngine, settings: Settings) -> UserRepositoryProtocol:
        return SqlAlchemyUserRepo(engine, settings.SERVICE_NAME)

    @provide(scope=Scope.APP)
    def provide_password_hasher(self, settings: Settings) -> PasswordHasherProtocol:
        return Argon2idPasswordHasher(time_cost=settings.PASSWORD_HASH_TIME_COST)

    @provide(scope=Scope.APP)
    def provide_token_issuer(self, settings: Settings) -> TokenIssuerProtocol:
        return JwtTokenIssuer(
            secret=settings.JWT_SECRET.get_secret_value(),
            issuer=settings.JWT_ISSUER,
            access_ttl_seconds=settings.JWT_ACCESS_TOKEN_EXPIRES_SECONDS,
            refresh_ttl_seconds=settings.JWT_REFRESH_TOKEN_EXPIRES_SECONDS,
        )

    @provide(scope=Scope.APP)
    def provide_otp_store(self, redis: RedisClientProtocol, settings: Settings) -> OtpStoreProtocol:
        return RedisOtpStore(redis, settings.OTP_TTL_SECONDS)

    @provide(scope=Scope.APP)
    def provide_otp_publisher(
        self, publisher: MessagePublisherProtocol
    ) -> OtpNotificationPublisherProtocol:
        return OtpNotificationPublisher(publisher)

    @provide(scope=Scope.APP)
    def provide_registration_handler(
        self,
        user_repo: UserRepositoryProtocol,
        password_hasher: PasswordHasherProtocol,
        otp_store: OtpStoreProtocol,
        otp_publisher: OtpNotificationPublisherProtocol,
        settings: Settings,
    ) -> RegistrationHandler:
        return RegistrationHandler(
            user_repo, password_hasher, otp_store, otp_publisher, settings.SERVICE_NAME
        )

    @provide(scope=Scope.APP)
    def provide_authentication_handler(
        self,
        user_repo: UserRepositoryProtocol,
        token_issuer: TokenIssuerProtocol,
        password_hasher: PasswordHasherProtocol,
        settings: Settings,
    ) -> AuthenticationHandler:
        return AuthenticationHandler(
            user_repo, token_issuer, password_hasher, settings.SERVICE_NAME
        )
