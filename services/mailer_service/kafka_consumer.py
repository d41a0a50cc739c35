"""Consumers for the email_exchange queues, one per queue."""

from __future__ import annotations

from aiokafka import ConsumerRecord
from library_core.broker_topology import Exchange, QueueName
from library_service_libs.queue_consumer import QueueConsumer

from services.mailer_service.notification_processor import NotificationProcessor


class MailQueueConsumer(QueueConsumer):
    def __init__(
        self,
        *,
        queue: QueueName,
        processor: NotificationProcessor,
        bootstrap_servers: str,
        group_id: str,
        requeue_delay_seconds: float = 5.0,
    ) -> None:
        super().__init__(
            exchange=Exchange.EMAIL,
            queue=queue,
            bootstrap_servers=bootstrap_servers,
            group_id=group_id,
            requeue_delay_seconds=requeue_delay_seconds,
        )
        self.processor = processor

    async def _process_message(self, msg: ConsumerRecord) -> bool:
        return await self.processor.process(self.queue, msg.value)
