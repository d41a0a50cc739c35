"""Ack/nack decisions of the log_queue consumer."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
from aiokafka import ConsumerRecord, TopicPartition
from library_core.domain_enums import LogLevel
from library_core.messages import LogRecordV1
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker

from services.logger_service.implementations.file_sink_impl import RotatingJsonFileSink
from services.logger_service.implementations.log_store_impl import SqlAlchemyLogStore
from services.logger_service.kafka_consumer import LogQueueConsumer
from services.logger_service.metrics import get_metrics
from services.logger_service.models_db import LogDocument

TOPIC = "log_exchange.log_queue"


def make_record(value: bytes, offset: int = 0) -> ConsumerRecord:
    return ConsumerRecord(
        topic=TOPIC,
        partition=0,
        offset=offset,
        timestamp=0,
        timestamp_type=0,
        key=None,
        value=value,
        checksum=None,
        serialized_key_size=0,
        serialized_value_size=len(value),
        headers=[("content-type", b"application/json")],
    )


def log_payload(level: LogLevel = LogLevel.INFO, message: str = "Book created") -> bytes:
    record = LogRecordV1(
        correlation_id="0b7c6f9e-8f51-4d43-9a43-5a1f0f5d3c11",
        service="book_service",
        level=level,
        caller="book_handler.py:42",
        message=message,
        extra={"book_id": "b-1"},
    )
    return json.dumps(record.to_wire()).encode()


@pytest.fixture
def sink(tmp_path: Path) -> RotatingJsonFileSink:
    sink = RotatingJsonFileSink(str(tmp_path / "records.log"))
    yield sink
    sink.close()


def build_consumer(store, sink) -> LogQueueConsumer:
    consumer = LogQueueConsumer(
        store=store,
        file_sink=sink,
        bootstrap_servers="kafka:9092",
        group_id="logger_service",
        requeue_delay_seconds=0,
    )
    consumer.consumer = MagicMock()
    consumer.consumer.commit = AsyncMock()
    return consumer


def file_lines(sink: RotatingJsonFileSink) -> list[dict]:
    path = Path(sink.handler.baseFilename)
    if not path.exists():
        return []
    return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]


class TestLogQueueConsumer:
    async def test_record_is_stored_written_and_acked(
        self, engine: AsyncEngine, sink: RotatingJsonFileSink
    ) -> None:
        consumer = build_consumer(SqlAlchemyLogStore(engine), sink)

        acked = await consumer.handle_record(make_record(log_payload(), offset=9))

        assert acked is True
        consumer.consumer.commit.assert_awaited_once_with({TopicPartition(TOPIC, 0): 10})

        async with async_sessionmaker(engine)() as session:
            docs = (await session.execute(select(LogDocument))).scalars().all()
        assert len(docs) == 1
        assert docs[0].service == "book_service"
        assert docs[0].level == "info"
        assert docs[0].document["X-Correlation-ID"] == "0b7c6f9e-8f51-4d43-9a43-5a1f0f5d3c11"
        assert docs[0].document["extra"] == {"book_id": "b-1"}

        lines = file_lines(sink)
        assert [line["message"] for line in lines] == ["Book created"]

    async def test_unparseable_record_is_requeued(self, sink: RotatingJsonFileSink) -> None:
        store = AsyncMock()
        consumer = build_consumer(store, sink)
        parse_errors = get_metrics()["log_records_consumed_total"].labels(outcome="parse_error")
        before = parse_errors._value.get()

        acked = await consumer.handle_record(make_record(b"not json", offset=3))

        assert acked is False
        consumer.consumer.seek.assert_called_once_with(TopicPartition(TOPIC, 0), 3)
        store.insert.assert_not_awaited()
        assert parse_errors._value.get() == before + 1

    async def test_store_failure_requeues_without_file_write(
        self, sink: RotatingJsonFileSink
    ) -> None:
        store = AsyncMock()
        store.insert.side_effect = ConnectionError("database down")
        consumer = build_consumer(store, sink)

        acked = await consumer.handle_record(make_record(log_payload(LogLevel.ERROR)))

        assert acked is False
        assert file_lines(sink) == []

    @pytest.mark.parametrize("level", [LogLevel.PANIC, LogLevel.FATAL])
    async def test_urgent_record_reaches_file_when_store_fails(
        self, sink: RotatingJsonFileSink, level: LogLevel
    ) -> None:
        store = AsyncMock()
        store.insert.side_effect = ConnectionError("database down")
        consumer = build_consumer(store, sink)

        acked = await consumer.handle_record(make_record(log_payload(level, "Out of disk")))

        assert acked is False
        assert [line["level"] for line in file_lines(sink)] == [level.value]

    async def test_file_failure_requeues(self, engine: AsyncEngine) -> None:
        sink = AsyncMock()
        sink.write.side_effect = OSError("disk full")
        consumer = build_consumer(SqlAlchemyLogStore(engine), sink)

        acked = await consumer.handle_record(make_record(log_payload()))

        assert acked is False
        consumer.consumer.commit.assert_not_awaited()
