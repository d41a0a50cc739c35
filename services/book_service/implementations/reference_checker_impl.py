"""Referential integrity checks against the Author and Category services."""

from __future__ import annotations

from uuid import UUID

from library_core.error_enums import ErrorCode
from library_service_libs.error_handling import (
    CorrelationContext,
    LibraryError,
    raise_reference_not_found,
)
from library_service_libs.logging_utils import create_service_logger
from library_service_libs.rpc import RpcClient

logger = create_service_logger("book_service.reference_checker")


class RpcReferenceChecker:
    def __init__(
        self, author_client: RpcClient, category_client: RpcClient, service_name: str
    ) -> None:
        self.author_client = author_client
        self.category_client = category_client
        self.service_name = service_name

    async def _ensure_exists(
        self,
        client: RpcClient,
        method: str,
        reference_type: str,
        reference_id: UUID,
        correlation: CorrelationContext,
        operation: str,
    ) -> None:
        try:
            await client.call(method, {"id": str(reference_id)}, correlation)
        except LibraryError as e:
            if e.error_code != ErrorCode.RESOURCE_NOT_FOUND.value:
                raise
            logger.info(
                f"{reference_type} reference does not exist",
                reference_id=str(reference_id),
                operation=operation,
            )
            raise_reference_not_found(
                service=self.service_name,
                operation=operation,
                reference_type=reference_type,
                reference_id=str(reference_id),
                correlation_id=correlation.uuid,
            )

    async def ensure_author_exists(
        self, author_id: UUID, correlation: CorrelationContext, operation: str
    ) -> None:
        await self._ensure_exists(
            self.author_client, "GetAuthor", "Author", author_id, correlation, operation
        )

    async def ensure_category_exists(
        self, category_id: UUID, correlation: CorrelationContext, operation: str
    ) -> None:
        await self._ensure_exists(
            self.category_client, "GetCategory", "Category", category_id, correlation, operation
        )
