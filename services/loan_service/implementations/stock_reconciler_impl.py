"""
Background reconciler for compensating stock increments.

When a loan insert fails after the stock was decremented, or a return
cannot restore stock, the increment is handed here and retried with
exponential backoff until it lands or the attempts run out.
"""

from __future__ import annotations

import asyncio
from uuid import UUID

from library_service_libs.error_handling import CorrelationContext, LibraryError
from library_service_libs.logging_utils import bind_correlation_id, create_service_logger
from library_service_libs.rpc.metadata import set_deadline
from tenacity import (
    AsyncRetrying,
    RetryError,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from services.loan_service.metrics import get_metrics
from services.loan_service.protocols import BookCatalogClientProtocol

logger = create_service_logger("loan_service.stock_reconciler")


class StockReconciler:
    def __init__(
        self,
        book_client: BookCatalogClientProtocol,
        max_attempts: int = 8,
        initial_backoff_seconds: float = 0.5,
        max_backoff_seconds: float = 30.0,
    ) -> None:
        self.book_client = book_client
        self.max_attempts = max_attempts
        self.initial_backoff_seconds = initial_backoff_seconds
        self.max_backoff_seconds = max_backoff_seconds
        self._tasks: set[asyncio.Task[None]] = set()
        self._counter = get_metrics()["stock_reconciliation_total"]

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def schedule_increment(self, book_id: UUID, correlation: CorrelationContext) -> None:
        self._counter.labels(outcome="scheduled").inc()
        task = asyncio.create_task(self._reconcile(book_id, correlation))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _reconcile(self, book_id: UUID, correlation: CorrelationContext) -> None:
        # The task inherits the request context; it must outlive the request deadline
        set_deadline(None)
        bind_correlation_id(correlation.original)

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(
                multiplier=self.initial_backoff_seconds, max=self.max_backoff_seconds
            ),
            retry=retry_if_exception_type(LibraryError),
        )
        try:
            async for attempt in retrying:
                with attempt:
                    await self.book_client.increment_stock(book_id, correlation)
        except RetryError as e:
            self._counter.labels(outcome="abandoned").inc()
            logger.error(
                "Stock reconciliation abandoned",
                book_id=str(book_id),
                attempts=self.max_attempts,
                error=str(e.last_attempt.exception()),
            )
            return

        self._counter.labels(outcome="reconciled").inc()
        logger.info("Stock reconciled", book_id=str(book_id))

    async def drain(self) -> None:
        """Wait for all scheduled reconciliations to finish."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def shutdown(self) -> None:
        if self._tasks:
            logger.warning("Cancelling pending stock reconciliations", pending=len(self._tasks))
        for task in list(self._tasks):
            task.cancel()
        await self.drain()
