"""
Coordinator tests for LoanHandler.

Loans live in a SQLite-backed versioned store; the Book Service is an
in-memory fake that applies the same stock rules.
"""

from __future__ import annotations

import asyncio
from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock
from uuid import UUID, uuid4

import aiohttp
import pytest
from library_core.domain_enums import LoanStatus, UserRole
from library_service_libs.error_handling import (
    CorrelationContext,
    LibraryError,
    raise_connection_error,
    raise_database_error,
    raise_reference_not_found,
    raise_stock_exhausted,
)
from sqlalchemy.ext.asyncio import AsyncEngine

from services.loan_service.api.schemas import (
    CreateLoanRequest,
    GetLoanRequest,
    ListUserLoansRequest,
    ReturnLoanRequest,
    UpdateLoanStatusRequest,
)
from services.loan_service.domain_handlers.loan_handler import LoanHandler
from services.loan_service.implementations.loan_repository_impl import LoanRepositoryImpl
from services.loan_service.protocols import (
    BookSnapshot,
    LoanNotificationPublisherProtocol,
    StockReconcilerProtocol,
)

EMAIL = "reader@example.com"


class FakeBookCatalog:
    """In-memory Book Service with the decrement rule and switchable outages."""

    def __init__(self) -> None:
        self.books: dict[UUID, BookSnapshot] = {}
        self.fail_increments = False
        self.increment_error: Exception | None = None
        self.increment_calls = 0
        self.decrement_calls = 0
        self._lock = asyncio.Lock()

    def add(self, stock: int, title: str = "The Left Hand of Darkness") -> BookSnapshot:
        book = BookSnapshot(id=uuid4(), title=title, stock=stock, version=1)
        self.books[book.id] = book
        return book

    async def get_book(
        self, book_id: UUID, correlation: CorrelationContext, operation: str
    ) -> BookSnapshot:
        await asyncio.sleep(0)
        if book_id not in self.books:
            raise_reference_not_found(
                service="loan_service",
                operation=operation,
                reference_type="Book",
                reference_id=str(book_id),
                correlation_id=correlation.uuid,
            )
        return self.books[book_id]

    async def _adjust(self, book_id: UUID, delta: int, correlation: CorrelationContext):
        async with self._lock:
            book = self.books[book_id]
            if book.stock + delta < 0:
                raise_stock_exhausted(
                    service="book_service",
                    operation="DecrementBookStock",
                    book_id=str(book_id),
                    correlation_id=correlation.uuid,
                )
            updated = book.model_copy(
                update={"stock": book.stock + delta, "version": book.version + 1}
            )
            self.books[book_id] = updated
            return updated

    async def decrement_stock(
        self, book_id: UUID, version: int | None, correlation: CorrelationContext
    ) -> BookSnapshot:
        self.decrement_calls += 1
        return await self._adjust(book_id, -1, correlation)

    async def increment_stock(
        self, book_id: UUID, correlation: CorrelationContext
    ) -> BookSnapshot:
        self.increment_calls += 1
        if self.increment_error is not None:
            raise self.increment_error
        if self.fail_increments:
            raise_connection_error(
                service="loan_service",
                operation="IncrementBookStock",
                target="book",
                message="Book Service unreachable",
                correlation_id=correlation.uuid,
            )
        return await self._adjust(book_id, 1, correlation)


@pytest.fixture
def catalog() -> FakeBookCatalog:
    return FakeBookCatalog()


@pytest.fixture
def notifications() -> AsyncMock:
    return AsyncMock(spec=LoanNotificationPublisherProtocol)


@pytest.fixture
def reconciler() -> MagicMock:
    return MagicMock(spec=StockReconcilerProtocol)


@pytest.fixture
def repository(engine: AsyncEngine) -> LoanRepositoryImpl:
    return LoanRepositoryImpl(engine, "loan_service")


@pytest.fixture
def handler(
    repository: LoanRepositoryImpl,
    catalog: FakeBookCatalog,
    notifications: AsyncMock,
    reconciler: MagicMock,
) -> LoanHandler:
    return LoanHandler(repository, catalog, notifications, reconciler, "loan_service")


def borrow(user_id: UUID, book_id: UUID) -> CreateLoanRequest:
    return CreateLoanRequest(user_id=user_id, email=EMAIL, book_id=book_id)


class TestCreateLoan:
    async def test_borrow_decrements_stock_and_notifies(
        self,
        handler: LoanHandler,
        catalog: FakeBookCatalog,
        notifications: AsyncMock,
        correlation: CorrelationContext,
    ) -> None:
        book = catalog.add(stock=2)

        loan = await handler.create_loan(borrow(uuid4(), book.id), correlation)

        assert loan.status == LoanStatus.BORROWED
        assert loan.return_date is None
        assert loan.due_date - loan.loan_date == timedelta(days=7)
        assert catalog.books[book.id].stock == 1
        notifications.publish_loan.assert_awaited_once_with(
            EMAIL, book.title, loan.due_date, correlation
        )

    async def test_second_borrow_of_same_book_is_rejected(
        self, handler: LoanHandler, catalog: FakeBookCatalog, correlation: CorrelationContext
    ) -> None:
        book = catalog.add(stock=5)
        user_id = uuid4()
        await handler.create_loan(borrow(user_id, book.id), correlation)

        with pytest.raises(LibraryError) as exc_info:
            await handler.create_loan(borrow(user_id, book.id), correlation)

        assert exc_info.value.error_code == "ACTIVE_LOAN_EXISTS"
        assert catalog.decrement_calls == 1
        assert catalog.books[book.id].stock == 4

    async def test_out_of_stock_book_is_not_decremented(
        self, handler: LoanHandler, catalog: FakeBookCatalog, correlation: CorrelationContext
    ) -> None:
        book = catalog.add(stock=0)

        with pytest.raises(LibraryError) as exc_info:
            await handler.create_loan(borrow(uuid4(), book.id), correlation)

        assert exc_info.value.error_code == "STOCK_EXHAUSTED"
        assert catalog.decrement_calls == 0

    async def test_unknown_book_is_reference_not_found(
        self, handler: LoanHandler, correlation: CorrelationContext
    ) -> None:
        with pytest.raises(LibraryError) as exc_info:
            await handler.create_loan(borrow(uuid4(), uuid4()), correlation)

        assert exc_info.value.error_code == "REFERENCE_NOT_FOUND"

    async def test_failed_insert_is_compensated(
        self,
        handler: LoanHandler,
        repository: LoanRepositoryImpl,
        catalog: FakeBookCatalog,
        notifications: AsyncMock,
        reconciler: MagicMock,
        correlation: CorrelationContext,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        book = catalog.add(stock=1)

        async def failing_create(*args, **kwargs):
            raise_database_error(
                service="loan_service",
                operation="CreateLoan",
                message="insert failed",
                correlation_id=correlation.uuid,
            )

        monkeypatch.setattr(repository, "create", failing_create)

        with pytest.raises(LibraryError) as exc_info:
            await handler.create_loan(borrow(uuid4(), book.id), correlation)

        assert exc_info.value.error_code == "DATABASE_ERROR"
        assert catalog.books[book.id].stock == 1
        reconciler.schedule_increment.assert_not_called()
        notifications.publish_loan.assert_not_awaited()

    async def test_failed_compensation_goes_to_reconciler(
        self,
        handler: LoanHandler,
        repository: LoanRepositoryImpl,
        catalog: FakeBookCatalog,
        reconciler: MagicMock,
        correlation: CorrelationContext,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        book = catalog.add(stock=1)
        catalog.fail_increments = True

        async def failing_create(*args, **kwargs):
            raise_database_error(
                service="loan_service",
                operation="CreateLoan",
                message="insert failed",
                correlation_id=correlation.uuid,
            )

        monkeypatch.setattr(repository, "create", failing_create)

        with pytest.raises(LibraryError) as exc_info:
            await handler.create_loan(borrow(uuid4(), book.id), correlation)

        assert exc_info.value.error_code == "DATABASE_ERROR"
        reconciler.schedule_increment.assert_called_once_with(book.id, correlation)

    async def test_transport_failure_in_compensation_keeps_insert_error(
        self,
        handler: LoanHandler,
        repository: LoanRepositoryImpl,
        catalog: FakeBookCatalog,
        reconciler: MagicMock,
        correlation: CorrelationContext,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        book = catalog.add(stock=1)
        catalog.increment_error = aiohttp.ClientConnectionError("connection reset")

        async def failing_create(*args, **kwargs):
            raise_database_error(
                service="loan_service",
                operation="CreateLoan",
                message="insert failed",
                correlation_id=correlation.uuid,
            )

        monkeypatch.setattr(repository, "create", failing_create)

        with pytest.raises(LibraryError) as exc_info:
            await handler.create_loan(borrow(uuid4(), book.id), correlation)

        assert exc_info.value.error_code == "DATABASE_ERROR"
        reconciler.schedule_increment.assert_called_once_with(book.id, correlation)

    async def test_publish_failure_does_not_fail_the_loan(
        self,
        handler: LoanHandler,
        catalog: FakeBookCatalog,
        notifications: AsyncMock,
        correlation: CorrelationContext,
    ) -> None:
        book = catalog.add(stock=1)
        notifications.publish_loan.side_effect = RuntimeError("broker down")

        loan = await handler.create_loan(borrow(uuid4(), book.id), correlation)

        assert loan.status == LoanStatus.BORROWED

    async def test_concurrent_borrow_of_last_copy(
        self, handler: LoanHandler, catalog: FakeBookCatalog, correlation: CorrelationContext
    ) -> None:
        book = catalog.add(stock=1)

        results = await asyncio.gather(
            handler.create_loan(borrow(uuid4(), book.id), correlation),
            handler.create_loan(borrow(uuid4(), book.id), correlation),
            return_exceptions=True,
        )

        failures = [r for r in results if isinstance(r, LibraryError)]
        assert len(failures) == 1
        assert failures[0].error_code == "STOCK_EXHAUSTED"
        assert catalog.books[book.id].stock == 0


class TestReturnLoan:
    async def test_return_restores_stock_and_notifies(
        self,
        handler: LoanHandler,
        catalog: FakeBookCatalog,
        notifications: AsyncMock,
        correlation: CorrelationContext,
    ) -> None:
        book = catalog.add(stock=1)
        user_id = uuid4()
        loan = await handler.create_loan(borrow(user_id, book.id), correlation)

        returned = await handler.return_loan(
            ReturnLoanRequest(loan_id=loan.id, user_id=user_id, email=EMAIL), correlation
        )

        assert returned.status == LoanStatus.RETURNED
        assert returned.return_date is not None
        assert returned.version == loan.version + 1
        assert catalog.books[book.id].stock == 1
        notifications.publish_return.assert_awaited_once_with(EMAIL, book.title, correlation)

    async def test_other_users_loan_is_forbidden(
        self, handler: LoanHandler, catalog: FakeBookCatalog, correlation: CorrelationContext
    ) -> None:
        book = catalog.add(stock=1)
        loan = await handler.create_loan(borrow(uuid4(), book.id), correlation)

        with pytest.raises(LibraryError) as exc_info:
            await handler.return_loan(
                ReturnLoanRequest(loan_id=loan.id, user_id=uuid4(), email=EMAIL), correlation
            )

        assert exc_info.value.error_code == "AUTHORIZATION_ERROR"
        assert catalog.books[book.id].stock == 0

    async def test_admin_may_return_any_loan(
        self, handler: LoanHandler, catalog: FakeBookCatalog, correlation: CorrelationContext
    ) -> None:
        book = catalog.add(stock=1)
        loan = await handler.create_loan(borrow(uuid4(), book.id), correlation)

        returned = await handler.return_loan(
            ReturnLoanRequest(loan_id=loan.id, user_id=uuid4(), email=EMAIL, role=UserRole.ADMIN),
            correlation,
        )

        assert returned.status == LoanStatus.RETURNED

    async def test_second_return_is_invalid_transition(
        self, handler: LoanHandler, catalog: FakeBookCatalog, correlation: CorrelationContext
    ) -> None:
        book = catalog.add(stock=1)
        user_id = uuid4()
        loan = await handler.create_loan(borrow(user_id, book.id), correlation)
        request = ReturnLoanRequest(loan_id=loan.id, user_id=user_id, email=EMAIL)
        await handler.return_loan(request, correlation)

        with pytest.raises(LibraryError) as exc_info:
            await handler.return_loan(request, correlation)

        assert exc_info.value.error_code == "INVALID_STATE_TRANSITION"
        assert catalog.books[book.id].stock == 1

    async def test_failed_increment_keeps_return_and_reconciles(
        self,
        handler: LoanHandler,
        catalog: FakeBookCatalog,
        reconciler: MagicMock,
        correlation: CorrelationContext,
    ) -> None:
        book = catalog.add(stock=1)
        user_id = uuid4()
        loan = await handler.create_loan(borrow(user_id, book.id), correlation)
        catalog.fail_increments = True

        returned = await handler.return_loan(
            ReturnLoanRequest(loan_id=loan.id, user_id=user_id, email=EMAIL), correlation
        )

        assert returned.status == LoanStatus.RETURNED
        reconciler.schedule_increment.assert_called_once_with(book.id, correlation)

    async def test_transport_failure_on_increment_keeps_return(
        self,
        handler: LoanHandler,
        catalog: FakeBookCatalog,
        notifications: AsyncMock,
        reconciler: MagicMock,
        correlation: CorrelationContext,
    ) -> None:
        book = catalog.add(stock=1)
        user_id = uuid4()
        loan = await handler.create_loan(borrow(user_id, book.id), correlation)
        catalog.increment_error = aiohttp.ClientConnectionError("connection reset")

        returned = await handler.return_loan(
            ReturnLoanRequest(loan_id=loan.id, user_id=user_id, email=EMAIL), correlation
        )

        assert returned.status == LoanStatus.RETURNED
        assert catalog.books[book.id].stock == 0
        reconciler.schedule_increment.assert_called_once_with(book.id, correlation)
        notifications.publish_return.assert_awaited_once_with(EMAIL, book.title, correlation)

    async def test_terminal_loan_of_another_user_is_invalid_transition(
        self, handler: LoanHandler, catalog: FakeBookCatalog, correlation: CorrelationContext
    ) -> None:
        book = catalog.add(stock=1)
        loan = await handler.create_loan(borrow(uuid4(), book.id), correlation)
        await handler.update_loan_status(
            UpdateLoanStatusRequest(loan_id=loan.id, status=LoanStatus.LOST), correlation
        )

        with pytest.raises(LibraryError) as exc_info:
            await handler.return_loan(
                ReturnLoanRequest(loan_id=loan.id, user_id=uuid4(), email=EMAIL), correlation
            )

        assert exc_info.value.error_code == "INVALID_STATE_TRANSITION"

    async def test_return_racing_lost_has_single_winner(
        self, handler: LoanHandler, catalog: FakeBookCatalog, correlation: CorrelationContext
    ) -> None:
        book = catalog.add(stock=1)
        user_id = uuid4()
        loan = await handler.create_loan(borrow(user_id, book.id), correlation)

        results = await asyncio.gather(
            handler.return_loan(
                ReturnLoanRequest(loan_id=loan.id, user_id=user_id, email=EMAIL), correlation
            ),
            handler.update_loan_status(
                UpdateLoanStatusRequest(loan_id=loan.id, status=LoanStatus.LOST), correlation
            ),
            return_exceptions=True,
        )

        winners = [r for r in results if not isinstance(r, BaseException)]
        losers = [r for r in results if isinstance(r, LibraryError)]
        assert len(winners) == 1
        assert len(losers) == 1
        assert losers[0].error_code == "INVALID_STATE_TRANSITION"

        stored = await handler.get_loan(
            GetLoanRequest(loan_id=loan.id, user_id=user_id), correlation
        )
        expected_stock = 1 if stored.status == LoanStatus.RETURNED else 0
        assert catalog.books[book.id].stock == expected_stock
        assert stored.return_date is not None


class TestUpdateLoanStatus:
    async def test_lost_keeps_decrement(
        self, handler: LoanHandler, catalog: FakeBookCatalog, correlation: CorrelationContext
    ) -> None:
        book = catalog.add(stock=1)
        loan = await handler.create_loan(borrow(uuid4(), book.id), correlation)

        lost = await handler.update_loan_status(
            UpdateLoanStatusRequest(loan_id=loan.id, status=LoanStatus.LOST), correlation
        )

        assert lost.status == LoanStatus.LOST
        assert lost.return_date is not None
        assert catalog.books[book.id].stock == 0
        assert catalog.increment_calls == 0

    async def test_overdue_then_admin_return_restores_stock(
        self, handler: LoanHandler, catalog: FakeBookCatalog, correlation: CorrelationContext
    ) -> None:
        book = catalog.add(stock=1)
        loan = await handler.create_loan(borrow(uuid4(), book.id), correlation)

        overdue = await handler.update_loan_status(
            UpdateLoanStatusRequest(loan_id=loan.id, status=LoanStatus.OVERDUE), correlation
        )
        returned = await handler.update_loan_status(
            UpdateLoanStatusRequest(loan_id=loan.id, status=LoanStatus.RETURNED), correlation
        )

        assert overdue.return_date is None
        assert returned.status == LoanStatus.RETURNED
        assert catalog.books[book.id].stock == 1

    async def test_admin_return_survives_unexpected_increment_error(
        self,
        handler: LoanHandler,
        catalog: FakeBookCatalog,
        reconciler: MagicMock,
        correlation: CorrelationContext,
    ) -> None:
        book = catalog.add(stock=1)
        loan = await handler.create_loan(borrow(uuid4(), book.id), correlation)
        catalog.increment_error = ValueError("malformed book payload")

        returned = await handler.update_loan_status(
            UpdateLoanStatusRequest(loan_id=loan.id, status=LoanStatus.RETURNED), correlation
        )

        assert returned.status == LoanStatus.RETURNED
        reconciler.schedule_increment.assert_called_once_with(book.id, correlation)

    async def test_lost_loan_cannot_be_returned(
        self, handler: LoanHandler, catalog: FakeBookCatalog, correlation: CorrelationContext
    ) -> None:
        book = catalog.add(stock=1)
        loan = await handler.create_loan(borrow(uuid4(), book.id), correlation)
        await handler.update_loan_status(
            UpdateLoanStatusRequest(loan_id=loan.id, status=LoanStatus.LOST), correlation
        )

        with pytest.raises(LibraryError) as exc_info:
            await handler.update_loan_status(
                UpdateLoanStatusRequest(loan_id=loan.id, status=LoanStatus.RETURNED), correlation
            )

        assert exc_info.value.error_code == "INVALID_STATE_TRANSITION"


class TestReads:
    async def test_get_loan_owner_admin_and_stranger(
        self, handler: LoanHandler, catalog: FakeBookCatalog, correlation: CorrelationContext
    ) -> None:
        book = catalog.add(stock=1)
        owner = uuid4()
        loan = await handler.create_loan(borrow(owner, book.id), correlation)

        owner_view = await handler.get_loan(
            GetLoanRequest(loan_id=loan.id, user_id=owner), correlation
        )
        assert owner_view.id == loan.id
        admin_view = await handler.get_loan(
            GetLoanRequest(loan_id=loan.id, user_id=uuid4(), role=UserRole.ADMIN), correlation
        )
        assert admin_view.id == loan.id
        with pytest.raises(LibraryError) as exc_info:
            await handler.get_loan(GetLoanRequest(loan_id=loan.id, user_id=uuid4()), correlation)
        assert exc_info.value.error_code == "AUTHORIZATION_ERROR"

    async def test_list_user_loans_filters_by_status(
        self, handler: LoanHandler, catalog: FakeBookCatalog, correlation: CorrelationContext
    ) -> None:
        user_id = uuid4()
        first = await handler.create_loan(borrow(user_id, catalog.add(stock=1).id), correlation)
        await handler.create_loan(borrow(user_id, catalog.add(stock=1).id), correlation)
        await handler.create_loan(borrow(uuid4(), catalog.add(stock=1).id), correlation)
        await handler.return_loan(
            ReturnLoanRequest(loan_id=first.id, user_id=user_id, email=EMAIL), correlation
        )

        everything = await handler.list_user_loans(
            ListUserLoansRequest(user_id=user_id), correlation
        )
        borrowed = await handler.list_user_loans(
            ListUserLoansRequest(user_id=user_id, status=LoanStatus.BORROWED), correlation
        )

        assert everything.pagination.total_items == 2
        assert borrowed.pagination.total_items == 1
        assert borrowed.loans[0].status == LoanStatus.BORROWED
