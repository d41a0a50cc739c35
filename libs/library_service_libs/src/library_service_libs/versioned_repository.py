"""
Optimistic-concurrency repository shared by the catalog and loan services.

Every versioned row carries ``version``. Mutations are conditional on it:

    UPDATE t SET ..., version = version + 1, updated_at = now
    WHERE id = :id AND version = :expected
    RETURNING *

Zero affected rows means either the row is gone (not found) or someone else
won the race (version conflict). ``update`` retries conflicts by re-reading
the row and re-applying the caller's mutator to the fresh value; the
mutator is the only place domain checks live, so they are re-evaluated
against every fresh read.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Callable, Mapping, Sequence
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any, Generic, NoReturn, TypeVar
from uuid import UUID, uuid4

from library_core.pagination import page_offset
from sqlalchemy import CheckConstraint, ColumnElement, DateTime, Integer, Uuid, func, select, update
from sqlalchemy import delete as sql_delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import Mapped, mapped_column

from .error_handling import (
    raise_database_error,
    raise_resource_not_found,
    raise_validation_error,
    raise_version_conflict,
)
from .logging_utils import create_service_logger
from .rpc.metadata import deadline_exceeded

logger = create_service_logger("library.versioned_repository")

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_BACKOFF_SECONDS = 0.1


def utcnow() -> datetime:
    return datetime.now(UTC)


class VersionedMixin:
    """Columns every versioned entity shares."""

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )


def version_check(tablename: str) -> CheckConstraint:
    return CheckConstraint("version >= 1", name=f"ck_{tablename}_version_positive")


ModelT = TypeVar("ModelT", bound=VersionedMixin)

Mutator = Callable[[ModelT], Mapping[str, Any]]


class VersionedRepository(Generic[ModelT]):
    def __init__(
        self,
        engine: AsyncEngine,
        model: type[ModelT],
        *,
        service_name: str,
        resource_type: str,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        backoff_seconds: float = DEFAULT_BACKOFF_SECONDS,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.engine = engine
        self.model = model
        self.service_name = service_name
        self.resource_type = resource_type
        self.max_attempts = max_attempts
        self.backoff_seconds = backoff_seconds
        self.async_session_maker = async_sessionmaker(engine, expire_on_commit=False)

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        async with self.async_session_maker() as session:
            yield session

    def _database_failure(self, error: SQLAlchemyError, operation: str, correlation_id: UUID) -> NoReturn:
        logger.error(
            f"Database error during {operation}: {error}",
            resource_type=self.resource_type,
            operation=operation,
        )
        raise_database_error(
            service=self.service_name,
            operation=operation,
            message=f"Database operation failed for {self.resource_type}",
            correlation_id=correlation_id,
            error_type=error.__class__.__name__,
        )

    def _not_found(self, record_id: UUID, operation: str, correlation_id: UUID) -> NoReturn:
        raise_resource_not_found(
            service=self.service_name,
            operation=operation,
            resource_type=self.resource_type,
            resource_id=str(record_id),
            correlation_id=correlation_id,
        )

    async def get(self, record_id: UUID, correlation_id: UUID, operation: str = "read") -> ModelT | None:
        try:
            async with self.session() as session:
                return await session.get(self.model, record_id)
        except SQLAlchemyError as e:
            self._database_failure(e, operation, correlation_id)

    async def read(self, record_id: UUID, correlation_id: UUID, operation: str = "read") -> ModelT:
        record = await self.get(record_id, correlation_id, operation)
        if record is None:
            self._not_found(record_id, operation, correlation_id)
        return record

    async def find_one(
        self, *conditions: ColumnElement[bool], correlation_id: UUID, operation: str = "find"
    ) -> ModelT | None:
        try:
            async with self.session() as session:
                result = await session.execute(select(self.model).where(*conditions).limit(1))
                return result.scalars().first()
        except SQLAlchemyError as e:
            self._database_failure(e, operation, correlation_id)

    async def insert(
        self, values: Mapping[str, Any], correlation_id: UUID, operation: str = "insert"
    ) -> ModelT:
        now = utcnow()
        record = self.model(**{"created_at": now, "updated_at": now, **values, "version": 1})
        try:
            async with self.session() as session:
                session.add(record)
                await session.commit()
        except SQLAlchemyError as e:
            self._database_failure(e, operation, correlation_id)
        return record

    async def _conditional_update(
        self, record_id: UUID, expected_version: int, changes: Mapping[str, Any]
    ) -> ModelT | None:
        model: Any = self.model
        stmt = (
            update(self.model)
            .where(model.id == record_id, model.version == expected_version)
            .values(**changes, version=model.version + 1, updated_at=utcnow())
            .returning(self.model)
            .execution_options(synchronize_session=False)
        )
        async with self.session() as session:
            result = await session.execute(stmt)
            updated = result.scalars().first()
            await session.commit()
            return updated

    async def update(
        self,
        record_id: UUID,
        version: int | None,
        mutator: Mutator[ModelT],
        correlation_id: UUID,
        operation: str = "update",
    ) -> ModelT:
        """
        Apply ``mutator`` under optimistic concurrency.

        The first attempt is conditional on the caller's ``version`` (or the
        current one when ``version`` is None); later attempts use the
        version of a fresh read. A mutator that raises aborts immediately.
        """
        for attempt in range(1, self.max_attempts + 1):
            current = await self.read(record_id, correlation_id, operation)
            expected = version if attempt == 1 and version is not None else current.version
            changes = dict(mutator(current))

            try:
                updated = await self._conditional_update(record_id, expected, changes)
            except SQLAlchemyError as e:
                self._database_failure(e, operation, correlation_id)

            if updated is not None:
                return updated

            if await self.get(record_id, correlation_id, operation) is None:
                self._not_found(record_id, operation, correlation_id)

            logger.info(
                "Version conflict, retrying with fresh read",
                resource_type=self.resource_type,
                resource_id=str(record_id),
                expected_version=expected,
                attempt=attempt,
            )
            if attempt == self.max_attempts or deadline_exceeded():
                break
            await asyncio.sleep(self.backoff_seconds * attempt)

        raise_version_conflict(
            service=self.service_name,
            operation=operation,
            resource_type=self.resource_type,
            resource_id=str(record_id),
            expected_version=version,
            correlation_id=correlation_id,
            attempts=self.max_attempts,
        )

    async def delete(
        self, record_id: UUID, version: int, correlation_id: UUID, operation: str = "delete"
    ) -> None:
        model: Any = self.model
        try:
            async with self.session() as session:
                result = await session.execute(
                    sql_delete(self.model).where(model.id == record_id, model.version == version)
                )
                await session.commit()
                deleted = result.rowcount
        except SQLAlchemyError as e:
            self._database_failure(e, operation, correlation_id)

        if deleted:
            return
        if await self.get(record_id, correlation_id, operation) is None:
            self._not_found(record_id, operation, correlation_id)
        raise_version_conflict(
            service=self.service_name,
            operation=operation,
            resource_type=self.resource_type,
            resource_id=str(record_id),
            expected_version=version,
            correlation_id=correlation_id,
        )

    async def list(
        self,
        *conditions: ColumnElement[bool],
        correlation_id: UUID,
        page: int,
        page_size: int,
        order_by: Sequence[Any] | None = None,
        operation: str = "list",
    ) -> tuple[list[ModelT], int]:
        if page < 1:
            raise_validation_error(
                service=self.service_name,
                operation=operation,
                field="page",
                message="page must be at least 1",
                correlation_id=correlation_id,
                value=page,
            )
        if page_size < 1:
            raise_validation_error(
                service=self.service_name,
                operation=operation,
                field="page_size",
                message="page_size must be at least 1",
                correlation_id=correlation_id,
                value=page_size,
            )

        model: Any = self.model
        ordering = list(order_by) if order_by is not None else [model.created_at, model.id]
        try:
            async with self.session() as session:
                total = await session.scalar(
                    select(func.count()).select_from(self.model).where(*conditions)
                )
                result = await session.execute(
                    select(self.model)
                    .where(*conditions)
                    .order_by(*ordering)
                    .offset(page_offset(page, page_size))
                    .limit(page_size)
                )
                return list(result.scalars().all()), int(total or 0)
        except SQLAlchemyError as e:
            self._database_failure(e, operation, correlation_id)
