"""Protocols for the Category Service."""

from __future__ import annotations

from typing import Protocol
from uuid import UUID

from services.category_service.models_db import Category


class CategoryRepositoryProtocol(Protocol):
    async def create(self, name: str, correlation_id: UUID) -> Category: ...

    async def get(self, category_id: UUID, correlation_id: UUID) -> Category: ...

    async def rename(
        self, category_id: UUID, version: int, name: str, correlation_id: UUID
    ) -> Category: ...

    async def delete(self, category_id: UUID, version: int, correlation_id: UUID) -> None: ...

    async def list(
        self, page: int, page_size: int, correlation_id: UUID
    ) -> tuple[list[Category], int]: ...
