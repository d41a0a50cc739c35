"""
Non-blocking log producer feeding the broker log pipeline.

Records go into a bounded in-process queue and are published to
``log_exchange`` / ``log_queue`` by one (single mode) or several (multi
mode) worker tasks. A full queue never blocks the caller: the record is
dropped and counted.
"""

from __future__ import annotations

import asyncio
from typing import Any

from library_core.broker_topology import Exchange, QueueName
from library_core.config_enums import LogWorkerMode
from library_core.domain_enums import LogLevel
from library_core.messages import LogRecordV1
from prometheus_client import Counter

from .logging_utils import create_service_logger
from .protocols import MessagePublisherProtocol

# Never forwarded into the pipeline it reports on (see logging_utils.NON_FORWARDED_LOGGERS)
logger = create_service_logger("library.log_producer")

LOG_RECORDS_DROPPED = Counter(
    "log_records_dropped_total",
    "Log records dropped because the producer queue was full or closed",
    ["service"],
)


def worker_count_for(mode: LogWorkerMode, count: int) -> int:
    if mode == LogWorkerMode.SINGLE:
        return 1
    return max(1, count)


class BrokerLogProducer:
    def __init__(
        self,
        publisher: MessagePublisherProtocol,
        service_name: str,
        buffer_size: int = 100,
        worker_count: int = 1,
        drop_counter: Counter | None = None,
    ) -> None:
        if buffer_size < 1:
            raise ValueError("buffer_size must be at least 1")
        if worker_count < 1:
            raise ValueError("worker_count must be at least 1")
        self.publisher = publisher
        self.service_name = service_name
        self.worker_count = worker_count
        self._queue: asyncio.Queue[LogRecordV1 | None] = asyncio.Queue(maxsize=buffer_size)
        self._drop_counter = drop_counter if drop_counter is not None else LOG_RECORDS_DROPPED
        self._workers: list[asyncio.Task[None]] = []
        self._dropped = 0
        self._closed = False

    @property
    def dropped_count(self) -> int:
        return self._dropped

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    @property
    def closed(self) -> bool:
        return self._closed

    def start(self) -> None:
        if self._workers:
            return
        self._workers = [
            asyncio.create_task(self._worker(index), name=f"log-producer-{index}")
            for index in range(self.worker_count)
        ]
        logger.info(
            "Log producer started",
            service=self.service_name,
            workers=self.worker_count,
            buffer_size=self._queue.maxsize,
        )

    def log_message(
        self,
        caller: str,
        correlation_id: str,
        level: LogLevel,
        message: str,
        extra: dict[str, Any] | None = None,
        error: str | None = None,
    ) -> bool:
        """Enqueue one record. Returns False when it was dropped."""
        record = LogRecordV1(
            correlation_id=correlation_id,
            service=self.service_name,
            level=level,
            caller=caller,
            message=message,
            error=error,
            extra=extra or {},
        )
        return self.submit(record)

    def submit(self, record: LogRecordV1) -> bool:
        if self._closed:
            self._record_drop()
            return False
        try:
            self._queue.put_nowait(record)
        except asyncio.QueueFull:
            self._record_drop()
            return False
        return True

    def _record_drop(self) -> None:
        self._dropped += 1
        self._drop_counter.labels(service=self.service_name).inc()

    async def _worker(self, index: int) -> None:
        while True:
            record = await self._queue.get()
            try:
                if record is None:
                    return
                await self.publisher.publish(Exchange.LOG, QueueName.LOG_QUEUE, record)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(
                    f"Failed to publish log record: {e}",
                    worker=index,
                    service=self.service_name,
                )
            finally:
                self._queue.task_done()

    async def stop(self) -> None:
        """Reject new records, drain the queue, join the workers and flush."""
        self._closed = True
        if self._workers:
            await self._queue.join()
            for _ in self._workers:
                await self._queue.put(None)
            await asyncio.gather(*self._workers, return_exceptions=True)
            self._workers = []
        try:
            await self.publisher.flush()
        except Exception as e:
            logger.error(f"Failed to flush log publisher: {e}", service=self.service_name)
        logger.info(
            "Log producer stopped",
            service=self.service_name,
            dropped=self._dropped,
        )
