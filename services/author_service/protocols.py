"""Protocols for the Author Service."""

from __future__ import annotations

from typing import Protocol
from uuid import UUID

from services.author_service.models_db import Author


class AuthorRepositoryProtocol(Protocol):
    async def create(self, name: str, biography: str, correlation_id: UUID) -> Author: ...

    async def get(self, author_id: UUID, correlation_id: UUID) -> Author: ...

    async def update(
        self, author_id: UUID, version: int, name: str, biography: str, correlation_id: UUID
    ) -> Author: ...

    async def delete(self, author_id: UUID, version: int, correlation_id: UUID) -> None: ...

    async def list(
        self, page: int, page_size: int, correlation_id: UUID
    ) -> tuple[list[Author], int]: ...
