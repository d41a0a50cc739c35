"""SQLAlchemy models for the Book Service.

``author_id`` and ``category_id`` reference rows owned by other services and
are checked over RPC, so they carry no database foreign keys.
"""

from __future__ import annotations

from uuid import UUID

from library_service_libs.versioned_repository import VersionedMixin, version_check
from sqlalchemy import CheckConstraint, Index, Integer, String, Uuid
from sqlalchemy.ext.asyncio import AsyncAttrs
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(AsyncAttrs, DeclarativeBase):
    pass


class Book(VersionedMixin, Base):
    __tablename__ = "books"
    __table_args__ = (
        version_check("books"),
        CheckConstraint("stock >= 0", name="ck_books_stock_non_negative"),
        Index("ix_books_author_id", "author_id"),
        Index("ix_books_category_id", "category_id"),
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    author_id: Mapped[UUID] = mapped_column(Uuid, nullable=False)
    category_id: Mapped[UUID] = mapped_column(Uuid, nullable=False)
    stock: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
