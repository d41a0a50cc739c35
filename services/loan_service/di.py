"""Dishka DI configuration for the Loan Service."""

from __future__ import annotations

from collections.abc import AsyncIterator
from datetime import timedelta

from aiohttp import ClientSession
from dishka import Provider, Scope, provide
from library_service_libs.protocols import MessagePublisherProtocol
from library_service_libs.rpc import RpcClient
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from services.loan_service.config import Settings, settings
from services.loan_service.domain_handlers.loan_handler import LoanHandler
from services.loan_service.implementations.book_client_impl import RpcBookCatalogClient
from services.loan_service.implementations.loan_repository_impl import LoanRepositoryImpl
from services.loan_service.implementations.notification_publisher_impl import (
    LoanNotificationPublisher,
)
from services.loan_service.implementations.stock_reconciler_impl import StockReconciler
from services.loan_service.protocols import (
    BookCatalogClientProtocol,
    LoanNotificationPublisherProtocol,
    LoanRepositoryProtocol,
    StockReconcilerProtocol,
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


class LoanServiceProvider(Provider):
    @provide(scope=Scope.APP)
    def provide_loan_repository(
        self, engine: AsyncEngine, settings: Settings
    ) -> LoanRepositoryProtocol:
        return LoanRepositoryImpl(engine, settings.SERVICE_NAME)

    @provide(scope=Scope.APP)
    def provide_book_client(
        self, session: ClientSession, settings: Settings
    ) -> BookCatalogClientProtocol:
        client = RpcClient(
            session,
            settings.BOOK_SERVICE_URL,
            target_service="book",
            caller_service=settings.SERVICE_NAME,
            timeout_seconds=settings.RPC_TIMEOUT_SECONDS,
        )
        return RpcBookCatalogClient(client, settings.SERVICE_NAME)

    @provide(scope=Scope.APP)
    def provide_notification_publisher(
        self, publisher: MessagePublisherProtocol
    ) -> LoanNotificationPublisherProtocol:
        return LoanNotificationPublisher(publisher)

    @provide(scope=Scope.APP)
    async def provide_stock_reconciler(
        self, book_client: BookCatalogClientProtocol, settings: Settings
    ) -> AsyncIterator[StockReconcilerProtocol]:
        reconciler = StockReconciler(
            book_client,
            max_attempts=settings.RECONCILER_MAX_ATTEMPTS,
            initial_backoff_seconds=settings.RECONCILER_INITIAL_BACKOFF_SECONDS,
            max_backoff_seconds=settings.RECONCILER_MAX_BACKOFF_SECONDS,
        )
        yield reconciler
        await reconciler.shutdown()

    @provide(scope=Scope.APP)
    def provide_loan_handler(
        self,
        repository: LoanRepositoryProtocol,
        book_client: BookCatalogClientProtocol,
        notifications: LoanNotificationPublisherProtocol,
        reconciler: StockReconcilerProtocol,
        settings: Settings,
    ) -> LoanHandler:
        return LoanHandler(
            repository,
            book_client,
            notifications,
            reconciler,
            settings.SERVICE_NAME,
            loan_period=timedelta(days=settings.LOAN_PERIOD_DAYS),
        )
