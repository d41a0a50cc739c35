"""Tests for the background stock reconciler."""

from __future__ import annotations

import time
from unittest.mock import AsyncMock
from uuid import uuid4

from library_service_libs.error_handling import (
    CorrelationContext,
    LibraryError,
    raise_connection_error,
)
from library_service_libs.rpc.metadata import current_deadline, set_deadline

from services.loan_service.implementations.stock_reconciler_impl import StockReconciler
from services.loan_service.metrics import get_metrics
from services.loan_service.protocols import BookCatalogClientProtocol


def outcome_count(outcome: str) -> float:
    counter = get_metrics()["stock_reconciliation_total"]
    return counter.labels(outcome=outcome)._value.get()


def unreachable(correlation: CorrelationContext) -> LibraryError:
    try:
        raise_connection_error(
            service="loan_service",
            operation="IncrementBookStock",
            target="book",
            message="Book Service unreachable",
            correlation_id=correlation.uuid,
        )
    except LibraryError as e:
        return e


class TestStockReconciler:
    async def test_retries_until_increment_lands(self, correlation: CorrelationContext) -> None:
        client = AsyncMock(spec=BookCatalogClientProtocol)
        fail = unreachable(correlation)
        client.increment_stock.side_effect = [fail, fail, None]
        reconciler = StockReconciler(client, max_attempts=5, initial_backoff_seconds=0.001)
        before = outcome_count("reconciled")
        book_id = uuid4()

        reconciler.schedule_increment(book_id, correlation)
        await reconciler.drain()

        assert client.increment_stock.await_count == 3
        client.increment_stock.assert_awaited_with(book_id, correlation)
        assert outcome_count("reconciled") == before + 1
        assert reconciler.pending == 0

    async def test_gives_up_after_max_attempts(self, correlation: CorrelationContext) -> None:
        client = AsyncMock(spec=BookCatalogClientProtocol)
        client.increment_stock.side_effect = unreachable(correlation)
        reconciler = StockReconciler(client, max_attempts=3, initial_backoff_seconds=0.001)
        before = outcome_count("abandoned")

        reconciler.schedule_increment(uuid4(), correlation)
        await reconciler.drain()

        assert client.increment_stock.await_count == 3
        assert outcome_count("abandoned") == before + 1

    async def test_ignores_the_scheduling_request_deadline(
        self, correlation: CorrelationContext
    ) -> None:
        client = AsyncMock(spec=BookCatalogClientProtocol)
        reconciler = StockReconciler(client, max_attempts=2, initial_backoff_seconds=0.001)
        seen_deadlines: list[float | None] = []

        async def record(*args, **kwargs):
            seen_deadlines.append(current_deadline())

        client.increment_stock.side_effect = record
        set_deadline(time.time() - 1)
        try:
            reconciler.schedule_increment(uuid4(), correlation)
        finally:
            set_deadline(None)
        await reconciler.drain()

        assert seen_deadlines == [None]

    async def test_shutdown_cancels_pending_work(self, correlation: CorrelationContext) -> None:
        client = AsyncMock(spec=BookCatalogClientProtocol)
        client.increment_stock.side_effect = unreachable(correlation)
        reconciler = StockReconciler(
            client, max_attempts=100, initial_backoff_seconds=10, max_backoff_seconds=10
        )

        reconciler.schedule_increment(uuid4(), correlation)
        await reconciler.shutdown()

        assert reconciler.pending == 0
