from __future__ import annotations

from datetime import UTC, datetime
from uuid import UUID

from library_service_libs.error_handling import raise_already_exists, raise_database_error
from library_service_libs.logging_utils import create_service_logger
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker

from services.auth_service.models_db import User
from services.auth_service.protocols import UserRepositoryProtocol

logger = create_service_logger("auth_service.user_repository")


class SqlAlchemyUserRepo(UserRepositoryProtocol):
    def __init__(self, engine: AsyncEngine, service_name: str) -> None:
        self._session_factory = async_sessionmaker(engine, expire_on_commit=False)
        self._service_name = service_name

    async def create_user(
        self, email: str, username: str, password_hash: str, correlation_id: UUID
    ) -> User:
        now = datetime.now(UTC)
        user = User(
            email=email.lower(),
            username=username,
            password_hash=password_hash,
            verified=False,
            created_at=now,
            updated_at=now,
        )
        try:
            async with self._session_factory() as session:
                session.add(user)
                await session.commit()
        except IntegrityError:
            # Lost a registration race on the unique email index
            raise_already_exists(
                service=self._service_name,
                operation="Register",
                resource_type="User",
                identifier=email.lower(),
                correlation_id=correlation_id,
            )
        except SQLAlchemyError as e:
            logger.error(f"Database error creating user: {e}")
            raise_database_error(
                service=self._service_name,
                operation="Register",
                message="Failed to create user",
                correlation_id=correlation_id,
                error_type=e.__class__.__name__,
            )
        return user

    async def get_by_email(self, email: str) -> User | None:
        async with self._session_factory() as session:
            res = await session.execute(select(User).where(User.email == email.lower()))
            return res.scalar_one_or_none()

    async def get_by_id(self, user_id: UUID) -> User | None:
        async with self._session_factory() as session:
            return await session.get(User, user_id)

    async def mark_verified(self, user_id: UUID) -> None:
        await self._update(user_id, verified=True)

    async def record_login(
        self, user_id: UUID, refresh_token: str, login_at: datetime | None = None
    ) -> None:
        await self._update(
            user_id, refresh_token=refresh_token, last_login_at=login_at or datetime.now(UTC)
        )

    async def set_refresh_token(self, user_id: UUID, refresh_token: str | None) -> None:
        await self._update(user_id, refresh_token=refresh_token)

    async def _update(self, user_id: UUID, **values: object) -> None:
        async with self._session_factory() as session:
            stmt = (
                update(User)
                .where(User.id == user_id)
                .values(**values, updated_at=datetime.now(UTC))
                .execution_options(synchronize_session=False)
            )
            await session.execute(stmt)
            await session.commit()
