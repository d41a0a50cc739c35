"""SQLAlchemy models for the Loan Service."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from library_core.domain_enums import LoanStatus
from library_service_libs.versioned_repository import VersionedMixin, version_check
from sqlalchemy import CheckConstraint, DateTime, Enum, Index, Uuid
from sqlalchemy.ext.asyncio import AsyncAttrs
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(AsyncAttrs, DeclarativeBase):
    pass


class Loan(VersionedMixin, Base):
    __tablename__ = "loans"
    __table_args__ = (
        version_check("loans"),
        # return_date is set exactly when the loan reached a terminal state
        CheckConstraint(
            "(status IN ('RETURNED', 'LOST')) = (return_date IS NOT NULL)",
            name="ck_loans_return_date_terminal",
        ),
        Index("ix_loans_user_id_status", "user_id", "status"),
        Index("ix_loans_book_id", "book_id"),
    )

    user_id: Mapped[UUID] = mapped_column(Uuid, nullable=False)
    book_id: Mapped[UUID] = mapped_column(Uuid, nullable=False)
    loan_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    due_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    return_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    status: Mapped[LoanStatus] = mapped_column(
        Enum(LoanStatus, native_enum=False, length=16, name="loan_status"),
        nullable=False,
        default=LoanStatus.BORROWED,
    )
