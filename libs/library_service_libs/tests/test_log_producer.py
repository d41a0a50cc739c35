"""
Tests for the non-blocking broker log producer.
"""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from library_core.broker_topology import Exchange, QueueName
from library_core.config_enums import LogWorkerMode
from library_core.domain_enums import LogLevel
from library_core.messages import LogRecordV1
from library_service_libs.log_producer import BrokerLogProducer, worker_count_for


class FakePublisher:
    def __init__(self, delay: float = 0.0, fail: bool = False) -> None:
        self.published: list[tuple[Exchange, QueueName, LogRecordV1]] = []
        self.delay = delay
        self.fail = fail
        self.flush = AsyncMock()

    async def publish(self, exchange, routing_key, message, key=None) -> None:
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise ConnectionError("broker unreachable")
        self.published.append((exchange, routing_key, message))


@pytest.fixture
def drop_counter() -> MagicMock:
    return MagicMock()


def _log(producer: BrokerLogProducer, index: int) -> bool:
    return producer.log_message(
        caller="handler.py:10",
        correlation_id=f"corr-{index}",
        level=LogLevel.INFO,
        message=f"message {index}",
    )


class TestOverflow:
    async def test_full_channel_drops_excess_records(self, drop_counter: MagicMock) -> None:
        publisher = FakePublisher()
        producer = BrokerLogProducer(
            publisher, "book_service", buffer_size=10, drop_counter=drop_counter
        )

        accepted = [_log(producer, i) for i in range(100)]

        assert accepted.count(True) == 10
        assert producer.dropped_count == 90
        assert producer.pending == 10
        assert drop_counter.labels.return_value.inc.call_count == 90
        drop_counter.labels.assert_called_with(service="book_service")

    async def test_log_message_never_blocks_on_slow_broker(
        self, drop_counter: MagicMock
    ) -> None:
        publisher = FakePublisher(delay=0.05)
        producer = BrokerLogProducer(
            publisher, "book_service", buffer_size=5, drop_counter=drop_counter
        )
        producer.start()

        loop = asyncio.get_running_loop()
        started = loop.time()
        for i in range(50):
            _log(producer, i)
        elapsed = loop.time() - started

        assert elapsed < 0.05
        assert producer.dropped_count > 0
        await producer.stop()


class TestDelivery:
    async def test_records_reach_log_exchange(self, drop_counter: MagicMock) -> None:
        publisher = FakePublisher()
        producer = BrokerLogProducer(publisher, "loan_service", drop_counter=drop_counter)
        producer.start()

        _log(producer, 1)
        await producer.stop()

        assert len(publisher.published) == 1
        exchange, routing_key, record = publisher.published[0]
        assert exchange is Exchange.LOG
        assert routing_key is QueueName.LOG_QUEUE
        assert record.service == "loan_service"
        assert record.correlation_id == "corr-1"
        assert record.caller == "handler.py:10"

    async def test_multi_worker_mode_delivers_everything(self, drop_counter: MagicMock) -> None:
        publisher = FakePublisher(delay=0.001)
        producer = BrokerLogProducer(
            publisher,
            "loan_service",
            buffer_size=100,
            worker_count=worker_count_for(LogWorkerMode.MULTI, 4),
            drop_counter=drop_counter,
        )
        producer.start()

        for i in range(40):
            assert _log(producer, i)
        await producer.stop()

        assert len(publisher.published) == 40
        assert producer.dropped_count == 0

    async def test_stop_drains_then_flushes(self, drop_counter: MagicMock) -> None:
        publisher = FakePublisher(delay=0.001)
        producer = BrokerLogProducer(
            publisher, "auth_service", buffer_size=20, drop_counter=drop_counter
        )
        producer.start()
        for i in range(20):
            _log(producer, i)

        await producer.stop()

        assert producer.pending == 0
        assert len(publisher.published) == 20
        publisher.flush.assert_awaited_once()

    async def test_closed_producer_rejects_and_counts(self, drop_counter: MagicMock) -> None:
        producer = BrokerLogProducer(FakePublisher(), "auth_service", drop_counter=drop_counter)
        producer.start()
        await producer.stop()

        assert _log(producer, 1) is False
        assert producer.dropped_count == 1

    async def test_publish_failures_do_not_kill_workers(self, drop_counter: MagicMock) -> None:
        publisher = FakePublisher(fail=True)
        producer = BrokerLogProducer(publisher, "auth_service", drop_counter=drop_counter)
        producer.start()

        _log(producer, 1)
        _log(producer, 2)
        await producer.stop()

        assert producer.pending == 0
        assert publisher.published == []


class TestWorkerCount:
    @pytest.mark.parametrize(
        "mode, requested, expected",
        [
            (LogWorkerMode.SINGLE, 8, 1),
            (LogWorkerMode.MULTI, 8, 8),
            (LogWorkerMode.MULTI, 0, 1),
        ],
    )
    def test_worker_count_for_mode(
        self, mode: LogWorkerMode, requested: int, expected: int
    ) -> None:
        assert worker_count_for(mode, requested) == expected
