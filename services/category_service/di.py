"""Dishka DI configuration for the Category Service."""

from __future__ import annotations

from collections.abc import AsyncIterator

from dishka import Provider, Scope, provide
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from services.category_service.config import Settings, settings
from services.category_service.domain_handlers.category_handler import CategoryHandler
from services.category_service.implementations.category_repository_impl import CategoryRepositoryImpl
from services.category_service.protocols import CategoryRepositoryProtocol


class CoreProvider(Provider):
    @provide(scope=Scope.APP)
    def provide_settings(self) -> Settings:
        return settings

    @provide(scope=Scope.APP)
    async def provide_database_engine(self, settings: Settings) -> AsyncIterator[AsyncEngine]:
        engine = create_async_engine(settings.DATABASE_URL, echo=False, pool_pre_ping=True)
        yield engine
        await engine.dispose()


class CategoryServiceProvider(Provider):
    @provide(scope=Scope.APP)
    def provide_category_repository(
        self, engine: AsyncEngine, settings: Settings
    ) -> CategoryRepositoryProtocol:
        return CategoryRepositoryImpl(engine, settings.SERVICE_NAME)

    @provide(scope=Scope.APP)
    def provide_category_handler(self, repository: CategoryRepositoryProtocol) -> CategoryHandler:
        return CategoryHandler(repository)
