"""Request and response models for the Loan Service RPC surface."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from library_core.domain_enums import LoanStatus, UserRole
from library_core.pagination import DEFAULT_PAGE, DEFAULT_PAGE_SIZE, PageInfo
from pydantic import UUID4, BaseModel, ConfigDict, EmailStr, Field


class CreateLoanRequest(BaseModel):
    user_id: UUID4
    email: EmailStr
    book_id: UUID4


class ReturnLoanRequest(BaseModel):
    loan_id: UUID4
    user_id: UUID4
    email: EmailStr
    role: UserRole = UserRole.USER


class UpdateLoanStatusRequest(BaseModel):
    loan_id: UUID4
    status: LoanStatus


class GetLoanRequest(BaseModel):
    loan_id: UUID4
    user_id: UUID4
    role: UserRole = UserRole.USER


class ListLoansRequest(BaseModel):
    status: LoanStatus | None = None
    page: int = Field(default=DEFAULT_PAGE, ge=1)
    page_size: int = Field(default=DEFAULT_PAGE_SIZE, ge=1, le=100)


class ListUserLoansRequest(ListLoansRequest):
    user_id: UUID4


class LoanResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    book_id: UUID
    loan_date: datetime
    due_date: datetime
    return_date: datetime | None
    status: LoanStatus
    version: int
    created_at: datetime
    updated_at: datetime


class ListLoansResponse(BaseModel):
    loans: list[LoanResponse]
    pagination: PageInfo
