"""Book Service client used by the loan flow."""

from __future__ import annotations

from uuid import UUID

from library_core.error_enums import ErrorCode
from library_service_libs.error_handling import (
    CorrelationContext,
    LibraryError,
    raise_reference_not_found,
)
from library_service_libs.rpc import RpcClient

from services.loan_service.protocols import BookSnapshot


class RpcBookCatalogClient:
    def __init__(self, client: RpcClient, service_name: str) -> None:
        self.client = client
        self.service_name = service_name

    async def get_book(
        self, book_id: UUID, correlation: CorrelationContext, operation: str
    ) -> BookSnapshot:
        try:
            body = await self.client.call("GetBook", {"id": str(book_id)}, correlation)
        except LibraryError as e:
            if e.error_code != ErrorCode.RESOURCE_NOT_FOUND.value:
                raise
            raise_reference_not_found(
                service=self.service_name,
                operation=operation,
                reference_type="Book",
                reference_id=str(book_id),
                correlation_id=correlation.uuid,
            )
        return BookSnapshot.model_validate(body)

    async def decrement_stock(
        self, book_id: UUID, version: int | None, correlation: CorrelationContext
    ) -> BookSnapshot:
        body = await self.client.call(
            "DecrementBookStock", {"id": str(book_id), "version": version}, correlation
        )
        return BookSnapshot.model_validate(body)

    async def increment_stock(
        self, book_id: UUID, correlation: CorrelationContext
    ) -> BookSnapshot:
        body = await self.client.call("IncrementBookStock", {"id": str(book_id)}, correlation)
        return BookSnapshot.model_validate(body)
