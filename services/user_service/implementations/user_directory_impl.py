from __future__ import annotations

from typing import NoReturn
from uuid import UUID

from library_core.pagination import page_offset
from library_service_libs.error_handling import raise_database_error
from library_service_libs.logging_utils import create_service_logger
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker

from services.user_service.models_db import UserProfile
from services.user_service.protocols import UserDirectoryProtocol

logger = create_service_logger("user_service.user_directory")


class SqlAlchemyUserDirectory(UserDirectoryProtocol):
    def __init__(self, engine: AsyncEngine, service_name: str) -> None:
        self._session_factory = async_sessionmaker(engine, expire_on_commit=False)
        self._service_name = service_name

    def _failed(self, error: SQLAlchemyError, operation: str, correlation_id: UUID) -> NoReturn:
        logger.error(f"Database error during {operation}: {error}")
        raise_database_error(
            service=self._service_name,
            operation=operation,
            message="Failed to read users",
            correlation_id=correlation_id,
            error_type=error.__class__.__name__,
        )

    async def get_by_id(self, user_id: UUID, correlation_id: UUID) -> UserProfile | None:
        try:
            async with self._session_factory() as session:
                return await session.get(UserProfile, user_id)
        except SQLAlchemyError as e:
            self._failed(e, "GetUserById", correlation_id)

    async def get_by_email(self, email: str, correlation_id: UUID) -> UserProfile | None:
        try:
            async with self._session_factory() as session:
                res = await session.execute(
                    select(UserProfile).where(UserProfile.email == email.lower())
                )
                return res.scalar_one_or_none()
        except SQLAlchemyError as e:
            self._failed(e, "GetUserByEmail", correlation_id)

    async def list(
        self, page: int, page_size: int, correlation_id: UUID
    ) -> tuple[list[UserProfile], int]:
        try:
            async with self._session_factory() as session:
                total = await session.scalar(select(func.count()).select_from(UserProfile))
                res = await session.execute(
                    select(UserProfile)
                    .order_by(UserProfile.created_at, UserProfile.id)
                    .offset(page_offset(page, page_size))
                    .limit(page_size)
                )
                return list(res.scalars().all()), int(total or 0)
        except SQLAlchemyError as e:
            self._failed(e, "ListUsers", correlation_id)
