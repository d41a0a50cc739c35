from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from library_core.domain_enums import LoanStatus
from library_service_libs.versioned_repository import VersionedRepository
from sqlalchemy.ext.asyncio import AsyncEngine

from services.loan_service.models_db import Loan
from services.loan_service.protocols import LoanMutator


class LoanRepositoryImpl:
    def __init__(self, engine: AsyncEngine, service_name: str) -> None:
        self.store = VersionedRepository(
            engine, Loan, service_name=service_name, resource_type="Loan"
        )

    async def create(
        self,
        user_id: UUID,
        book_id: UUID,
        loan_date: datetime,
        due_date: datetime,
        correlation_id: UUID,
    ) -> Loan:
        return await self.store.insert(
            {
                "user_id": user_id,
                "book_id": book_id,
                "loan_date": loan_date,
                "due_date": due_date,
                "return_date": None,
                "status": LoanStatus.BORROWED,
            },
            correlation_id,
            operation="CreateLoan",
        )

    async def get(self, loan_id: UUID, correlation_id: UUID) -> Loan:
        return await self.store.read(loan_id, correlation_id, operation="GetLoan")

    async def find_active(self, user_id: UUID, book_id: UUID, correlation_id: UUID) -> Loan | None:
        return await self.store.find_one(
            Loan.user_id == user_id,
            Loan.book_id == book_id,
            Loan.status == LoanStatus.BORROWED,
            correlation_id=correlation_id,
            operation="CreateLoan",
        )

    async def mutate(
        self, loan_id: UUID, mutator: LoanMutator, correlation_id: UUID, operation: str
    ) -> Loan:
        return await self.store.update(loan_id, None, mutator, correlation_id, operation)

    async def list(
        self,
        page: int,
        page_size: int,
        correlation_id: UUID,
        user_id: UUID | None = None,
        status: LoanStatus | None = None,
    ) -> tuple[list[Loan], int]:
        conditions: list[Any] = []
        if user_id is not None:
            conditions.append(Loan.user_id == user_id)
        if status is not None:
            conditions.append(Loan.status == status)
        return await self.store.list(
            *conditions,
            correlation_id=correlation_id,
            page=page,
            page_size=page_size,
            order_by=[Loan.loan_date.desc(), Loan.id],
            operation="ListUserLoans" if user_id is not None else "ListLoans",
        )
