from __future__ import annotations

from typing import Protocol
from uuid import UUID

from services.user_service.models_db import UserProfile


class UserDirectoryProtocol(Protocol):
    async def get_by_id(self, user_id: UUID, correlation_id: UUID) -> UserProfile | None: ...

    async def get_by_email(self, email: str, correlation_id: UUID) -> UserProfile | None: ...

    async def list(
        self, page: int, page_size: int, correlation_id: UUID
    ) -> tuple[list[UserProfile], int]: ...
