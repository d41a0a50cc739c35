"""SQLAlchemy models for the Category Service."""

from __future__ import annotations

from library_service_libs.versioned_repository import VersionedMixin, version_check
from sqlalchemy import CheckConstraint, String
from sqlalchemy.ext.asyncio import AsyncAttrs
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(AsyncAttrs, DeclarativeBase):
    pass


class Category(VersionedMixin, Base):
    __tablename__ = "categories"
    __table_args__ = (
        version_check("categories"),
        CheckConstraint("length(name) >= 3", name="ck_categories_name_length"),
    )

    name: Mapped[str] = mapped_column(String(100), nullable=False)
