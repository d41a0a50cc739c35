"""Dishka DI configuration for the Author Service."""

from __future__ import annotations

from collections.abc import AsyncIterator

from dishka import Provider, Scope, provide
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from services.author_service.config import Settings, settings
from services.author_service.domain_handlers.author_handler import AuthorHandler
from services.author_service.implementations.author_repository_impl import AuthorRepositoryImpl
from services.author_service.protocols import AuthorRepositoryProtocol


class CoreProvider(Provider):
    @provide(scope=Scope.APP)
    def provide_settings(self) -> Settings:
        return settings

    @provide(scope=Scope.APP)
    async def provide_database_engine(self, settings: Settings) -> AsyncIterator[AsyncEngine]:
        engine = create_async_engine(settings.DATABASE_URL, echo=False, pool_pre_ping=True)
        yield engine
        await engine.dispose()


class AuthorServiceProvider(Provider):
    @provide(scope=Scope.APP)
    def provide_author_repository(
        self, engine: AsyncEngine, settings: Settings
    ) -> AuthorRepositoryProtocol:
        return AuthorRepositoryImpl(engine, settings.SERVICE_NAME)

    @provide(scope=Scope.APP)
    def provide_author_handler(self, repository: AuthorRepositoryProtocol) -> AuthorHandler:
        return AuthorHandler(repository)
