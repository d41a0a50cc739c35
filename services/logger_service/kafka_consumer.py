"""
Consumer for ``log_queue``.

A record is acked only when both the document store and the file sink took
it; any failure requeues it. Panic and fatal records still reach the file
when the store write fails, so they are never lost to a database outage.
"""

from __future__ import annotations

from aiokafka import ConsumerRecord
from library_core.broker_topology import Exchange, QueueName
from library_core.domain_enums import LogLevel
from library_core.messages import LogRecordV1
from library_service_libs.logging_utils import create_service_logger
from library_service_libs.queue_consumer import QueueConsumer
from pydantic import ValidationError

from services.logger_service.metrics import get_metrics
from services.logger_service.protocols import LogFileSinkProtocol, LogStoreProtocol

logger = create_service_logger("logger_service.kafka_consumer")

URGENT_LEVELS = frozenset({LogLevel.PANIC, LogLevel.FATAL})


class LogQueueConsumer(QueueConsumer):
    def __init__(
        self,
        *,
        store: LogStoreProtocol,
        file_sink: LogFileSinkProtocol,
        bootstrap_servers: str,
        group_id: str,
        requeue_delay_seconds: float = 1.0,
    ) -> None:
        super().__init__(
            exchange=Exchange.LOG,
            queue=QueueName.LOG_QUEUE,
            bootstrap_servers=bootstrap_servers,
            group_id=group_id,
            requeue_delay_seconds=requeue_delay_seconds,
        )
        self.store = store
        self.file_sink = file_sink
        self.consumed = get_metrics()["log_records_consumed_total"]

    async def _process_message(self, msg: ConsumerRecord) -> bool:
        try:
            record = LogRecordV1.model_validate_json(msg.value)
        except ValidationError as e:
            self.consumed.labels(outcome="parse_error").inc()
            logger.error("Failed to parse log record", offset=msg.offset, error=str(e))
            return False

        try:
            await self.store.insert(record)
        except Exception as e:
            self.consumed.labels(outcome="store_error").inc()
            logger.error(
                "Failed to store log record",
                service=record.service,
                correlation_id=record.correlation_id,
                error=str(e),
            )
            if record.level in URGENT_LEVELS:
                await self._write_file(record)
            return False

        if not await self._write_file(record):
            return False

        self.consumed.labels(outcome="stored").inc()
        return True

    async def _write_file(self, record: LogRecordV1) -> bool:
        try:
            await self.file_sink.write(record)
        except Exception as e:
            self.consumed.labels(outcome="file_error").inc()
            logger.error(
                "Failed to write log record to file",
                service=record.service,
                correlation_id=record.correlation_id,
                error=str(e),
            )
            return False
        return True
