"""Protocols for the Loan Service."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any, Protocol
from uuid import UUID

from library_core.domain_enums import LoanStatus
from library_service_libs.error_handling import CorrelationContext
from pydantic import BaseModel

from services.loan_service.models_db import Loan

LoanMutator = Callable[[Loan], Mapping[str, Any]]


class BookSnapshot(BaseModel):
    """The fields of a book the loan flow needs."""

    id: UUID
    title: str
    stock: int
    version: int


class LoanRepositoryProtocol(Protocol):
    async def create(
        self,
        user_id: UUID,
        book_id: UUID,
        loan_date: datetime,
        due_date: datetime,
        correlation_id: UUID,
    ) -> Loan: ...

    async def get(self, loan_id: UUID, correlation_id: UUID) -> Loan: ...

    async def find_active(
        self, user_id: UUID, book_id: UUID, correlation_id: UUID
    ) -> Loan | None: ...

    async def mutate(
        self, loan_id: UUID, mutator: LoanMutator, correlation_id: UUID, operation: str
    ) -> Loan: ...

    async def list(
        self,
        page: int,
        page_size: int,
        correlation_id: UUID,
        user_id: UUID | None = None,
        status: LoanStatus | None = None,
    ) -> tuple[list[Loan], int]: ...


class BookCatalogClientProtocol(Protocol):
    async def get_book(
        self, book_id: UUID, correlation: CorrelationContext, operation: str
    ) -> BookSnapshot: ...

    async def decrement_stock(
        self, book_id: UUID, version: int | None, correlation: CorrelationContext
    ) -> BookSnapshot: ...

    async def increment_stock(
        self, book_id: UUID, correlation: CorrelationContext
    ) -> BookSnapshot: ...


class LoanNotificationPublisherProtocol(Protocol):
    async def publish_loan(
        self, email: str, book_title: str, due: datetime, correlation: CorrelationContext
    ) -> None: ...

    async def publish_return(
        self, email: str, book_title: str, correlation: CorrelationContext
    ) -> None: ...


class StockReconcilerProtocol(Protocol):
    def schedule_increment(self, book_id: UUID, correlation: CorrelationContext) -> None: ...

    async def shutdown(self) -> None: ...
