"""Dishka DI configuration for the User Service."""

from __future__ import annotations

from collections.abc import AsyncIterator

from dishka import Provider, Scope, provide
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from services.user_service.config import Settings, settings
from services.user_service.domain_handlers.user_handler import UserHandler
from services.user_service.implementations.user_directory_impl import SqlAlchemyUserDirectory
from services.user_service.protocols import UserDirectoryProtocol


class CoreProvider(Provider):
    @provide(scope=Scope.APP)
    def provide_settings(self) -> Settings:
        return settings

    @provide(scope=Scope.APP)
    async def provide_database_engine(self, settings: Settings) -> AsyncIterator[AsyncEngine]:
        engine = create_async_engine(settings.DATABASE_URL, echo=False, pool_pre_ping=True)
        yield engine
        await engine.dispose()


class UserServiceProvider(Provider):
    @provide(scope=Scope.APP)
    def provide_user_directory(
        self, engine: AsyncEngine, settings: Settings
    ) -> UserDirectoryProtocol:
        return SqlAlchemyUserDirectory(engine, settings.SERVICE_NAME)

    @provide(scope=Scope.APP)
    def provide_user_handler(
        self, directory: UserDirectoryProtocol, settings: Settings
    ) -> UserHandler:
        return UserHandler(directory, settings.SERVICE_NAME)
