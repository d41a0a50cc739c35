"""
Loan transaction coordinator.

Borrowing spans two services without a distributed transaction:

    decrement stock (Book Service) -> insert loan -> publish notification

If the insert fails, the decrement is compensated with an increment; a
failed compensation is handed to the background reconciler. Returning runs
the other way: the loan is closed first and the stock restored afterwards,
so a returned loan is never rolled back because of a stock failure.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import UUID

from library_core.domain_enums import LoanStatus, UserRole
from library_core.pagination import PageInfo
from library_service_libs.error_handling import (
    CorrelationContext,
    raise_active_loan_exists,
    raise_authorization_error,
    raise_stock_exhausted,
)
from library_service_libs.logging_utils import create_service_logger

from services.loan_service.api.schemas import (
    CreateLoanRequest,
    GetLoanRequest,
    ListLoansRequest,
    ListLoansResponse,
    ListUserLoansRequest,
    LoanResponse,
    ReturnLoanRequest,
    UpdateLoanStatusRequest,
)
from services.loan_service.loan_state import (
    RETURNABLE_STATES,
    ensure_transition,
    transition_changes,
)
from services.loan_service.metrics import get_metrics
from services.loan_service.models_db import Loan
from services.loan_service.protocols import (
    BookCatalogClientProtocol,
    LoanNotificationPublisherProtocol,
    LoanRepositoryProtocol,
    StockReconcilerProtocol,
)

logger = create_service_logger("loan_service.loan_handler")


def _utcnow() -> datetime:
    return datetime.now(UTC)


class LoanHandler:
    def __init__(
        self,
        repository: LoanRepositoryProtocol,
        book_client: BookCatalogClientProtocol,
        notifications: LoanNotificationPublisherProtocol,
        reconciler: StockReconcilerProtocol,
        service_name: str,
        loan_period: timedelta = timedelta(days=7),
    ) -> None:
        self._repository = repository
        self._books = book_client
        self._notifications = notifications
        self._reconciler = reconciler
        self._service_name = service_name
        self._loan_period = loan_period
        self._operations = get_metrics()["loan_operations_total"]

    async def create_loan(
        self, request: CreateLoanRequest, correlation: CorrelationContext
    ) -> LoanResponse:
        operation = "CreateLoan"

        active = await self._repository.find_active(
            request.user_id, request.book_id, correlation.uuid
        )
        if active is not None:
            raise_active_loan_exists(
                service=self._service_name,
                operation=operation,
                user_id=str(request.user_id),
                book_id=str(request.book_id),
                correlation_id=correlation.uuid,
                loan_id=str(active.id),
            )

        book = await self._books.get_book(request.book_id, correlation, operation)
        if book.stock <= 0:
            raise_stock_exhausted(
                service=self._service_name,
                operation=operation,
                book_id=str(book.id),
                correlation_id=correlation.uuid,
            )

        await self._books.decrement_stock(book.id, book.version, correlation)

        now = _utcnow()
        try:
            loan = await self._repository.create(
                request.user_id, book.id, now, now + self._loan_period, correlation.uuid
            )
        except Exception as insert_error:
            logger.error(
                "Loan insert failed after stock decrement, compensating",
                book_id=str(book.id),
                user_id=str(request.user_id),
                error=str(insert_error),
            )
            await self._restore_stock(book.id, correlation, operation)
            raise

        self._operations.labels(operation=operation).inc()
        logger.info(
            "Loan created",
            loan_id=str(loan.id),
            book_id=str(book.id),
            user_id=str(request.user_id),
        )

        await self._publish_safely(
            "loan",
            lambda: self._notifications.publish_loan(
                request.email, book.title, loan.due_date, correlation
            ),
        )
        return LoanResponse.model_validate(loan)

    async def return_loan(
        self, request: ReturnLoanRequest, correlation: CorrelationContext
    ) -> LoanResponse:
        operation = "ReturnLoan"

        loan = await self._repository.get(request.loan_id, correlation.uuid)
        # State is checked before ownership: a terminal loan reports the transition error.
        ensure_transition(
            loan.id,
            loan.status,
            LoanStatus.RETURNED,
            service=self._service_name,
            operation=operation,
            correlation_id=correlation.uuid,
        )
        self._ensure_access(loan, request.user_id, request.role, correlation, operation)

        returned = await self._transition(loan.id, LoanStatus.RETURNED, correlation, operation)
        await self._restore_stock(returned.book_id, correlation, operation)
        self._operations.labels(operation=operation).inc()

        await self._publish_safely(
            "return",
            lambda: self._publish_return(request.email, returned.book_id, correlation),
        )
        return LoanResponse.model_validate(returned)

    async def update_loan_status(
        self, request: UpdateLoanStatusRequest, correlation: CorrelationContext
    ) -> LoanResponse:
        operation = "UpdateLoanStatus"

        loan = await self._transition(request.loan_id, request.status, correlation, operation)
        if request.status == LoanStatus.RETURNED:
            await self._restore_stock(loan.book_id, correlation, operation)

        self._operations.labels(operation=operation).inc()
        logger.info("Loan status updated", loan_id=str(loan.id), status=loan.status.value)
        return LoanResponse.model_validate(loan)

    async def get_loan(
        self, request: GetLoanRequest, correlation: CorrelationContext
    ) -> LoanResponse:
        loan = await self._repository.get(request.loan_id, correlation.uuid)
        self._ensure_access(loan, request.user_id, request.role, correlation, "GetLoan")
        return LoanResponse.model_validate(loan)

    async def list_user_loans(
        self, request: ListUserLoansRequest, correlation: CorrelationContext
    ) -> ListLoansResponse:
        loans, total = await self._repository.list(
            request.page,
            request.page_size,
            correlation.uuid,
            user_id=request.user_id,
            status=request.status,
        )
        return self._page(loans, total, request)

    async def list_loans(
        self, request: ListLoansRequest, correlation: CorrelationContext
    ) -> ListLoansResponse:
        loans, total = await self._repository.list(
            request.page, request.page_size, correlation.uuid, status=request.status
        )
        return self._page(loans, total, request)

    @staticmethod
    def _page(loans: list[Loan], total: int, request: ListLoansRequest) -> ListLoansResponse:
        return ListLoansResponse(
            loans=[LoanResponse.model_validate(loan) for loan in loans],
            pagination=PageInfo.build(request.page, request.page_size, total),
        )

    def _ensure_access(
        self,
        loan: Loan,
        user_id: UUID,
        role: UserRole,
        correlation: CorrelationContext,
        operation: str,
    ) -> None:
        if loan.user_id != user_id and role != UserRole.ADMIN:
            raise_authorization_error(
                service=self._service_name,
                operation=operation,
                message="Loan belongs to another user",
                correlation_id=correlation.uuid,
                loan_id=str(loan.id),
            )

    async def _transition(
        self,
        loan_id: UUID,
        target: LoanStatus,
        correlation: CorrelationContext,
        operation: str,
    ) -> Loan:
        def mutator(current: Loan) -> Mapping[str, Any]:
            ensure_transition(
                current.id,
                current.status,
                target,
                service=self._service_name,
                operation=operation,
                correlation_id=correlation.uuid,
            )
            return transition_changes(target, _utcnow())

        return await self._repository.mutate(loan_id, mutator, correlation.uuid, operation)

    async def _restore_stock(
        self, book_id: UUID, correlation: CorrelationContext, operation: str
    ) -> None:
        try:
            await self._books.increment_stock(book_id, correlation)
        except Exception as e:
            logger.error(
                "Stock increment failed, scheduling reconciliation",
                book_id=str(book_id),
                operation=operation,
                error=str(e),
                error_type=e.__class__.__name__,
                error_code=getattr(e, "error_code", None),
            )
            self._reconciler.schedule_increment(book_id, correlation)

    async def _publish_return(
        self, email: str, book_id: UUID, correlation: CorrelationContext
    ) -> None:
        book = await self._books.get_book(book_id, correlation, "ReturnLoan")
        await self._notifications.publish_return(email, book.title, correlation)

    async def _publish_safely(
        self, kind: str, publish: Callable[[], Awaitable[None]]
    ) -> None:
        try:
            await publish()
        except Exception as e:
            logger.warning(
                f"Failed to publish {kind} notification",
                error=str(e),
                error_type=e.__class__.__name__,
            )
