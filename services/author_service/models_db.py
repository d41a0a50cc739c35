"""SQLAlchemy models for the Author Service."""

from __future__ import annotations

from library_service_libs.versioned_repository import VersionedMixin, version_check
from sqlalchemy import Index, String, Text
from sqlalchemy.ext.asyncio import AsyncAttrs
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(AsyncAttrs, DeclarativeBase):
    pass


class Author(VersionedMixin, Base):
    __tablename__ = "authors"
    __table_args__ = (
        version_check("authors"),
        Index("ix_authors_created_at", "created_at"),
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    biography: Mapped[str] = mapped_column(Text, nullable=False)
