"""Dishka DI configuration for the Book Service."""

from __future__ import annotations

from collections.abc import AsyncIterator

from aiohttp import ClientSession
from dishka import Provider, Scope, provide
from library_service_libs.rpc import RpcClient
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from services.book_service.config import Settings, settings
from services.book_service.domain_handlers.book_handler import BookHandler
from services.book_service.implementations.book_repository_impl import BookRepositoryImpl
from services.book_service.implementations.reference_checker_impl import RpcReferenceChecker
from services.book_service.protocols import (
    BookRepositoryProtocol,
    CatalogReferenceCheckerProtocol,
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
    async def provide_http_session(self) -> AsyncIterator[ClientSession]:
        session = ClientSession()
        yield session
        await session.close()


class BookServiceProvider(Provider):
    @provide(scope=Scope.APP)
    def provide_book_repository(
        self, engine: AsyncEngine, settings: Settings
    ) -> BookRepositoryProtocol:
        return BookRepositoryImpl(engine, settings.SERVICE_NAME)

    @provide(scope=Scope.APP)
    def provide_reference_checker(
        self, session: ClientSession, settings: Settings
    ) -> CatalogReferenceCheckerProtocol:
        def client(base_url: str, target: str) -> RpcClient:
            return RpcClient(
                session,
                base_url,
                target_service=target,
                caller_service=settings.SERVICE_NAME,
                timeout_seconds=settings.RPC_TIMEOUT_SECONDS,
            )

        return RpcReferenceChecker(
            author_client=client(settings.AUTHOR_SERVICE_URL, "author"),
            category_client=client(settings.CATEGORY_SERVICE_URL, "category"),
            service_name=settings.SERVICE_NAME,
        )

    @provide(scope=Scope.APP)
    def provide_book_handler(
        self,
        repository: BookRepositoryProtocol,
        references: CatalogReferenceCheckerProtocol,
        settings: Settings,
    ) -> BookHandler:
        return BookHandler(repository, references, settings.SERVICE_NAME)
