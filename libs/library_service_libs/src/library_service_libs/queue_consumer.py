"""
Manual-ack queue consumer on top of aiokafka.

A queue is the topic of one (exchange, routing key) binding. Processing a
message yields ack or nack: ack commits the offset past the message, nack
seeks back to it so the same message is delivered again (requeue).
Delivery is therefore at-least-once.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod

from aiokafka import AIOKafkaConsumer, ConsumerRecord, TopicPartition
from aiokafka.errors import KafkaConnectionError
from library_core.broker_topology import Exchange, QueueName, topic_name

from .logging_utils import create_service_logger

logger = create_service_logger("library.queue_consumer")


class QueueConsumer(ABC):
    """Consumes one queue, one message at a time, with explicit ack/nack."""

    def __init__(
        self,
        *,
        exchange: Exchange,
        queue: QueueName,
        bootstrap_servers: str,
        group_id: str,
        requeue_delay_seconds: float = 1.0,
    ) -> None:
        self.exchange = exchange
        self.queue = queue
        self.topic = topic_name(exchange, queue)
        self.bootstrap_servers = bootstrap_servers
        self.group_id = group_id
        self.requeue_delay_seconds = requeue_delay_seconds
        self.consumer: AIOKafkaConsumer | None = None
        self.should_stop = False

    @abstractmethod
    async def _process_message(self, msg: ConsumerRecord) -> bool:
        """Handle one record; True acknowledges it, False requeues it."""

    def _create_consumer(self) -> AIOKafkaConsumer:
        return AIOKafkaConsumer(
            self.topic,
            bootstrap_servers=self.bootstrap_servers,
            group_id=self.group_id,
            auto_offset_reset="earliest",
            enable_auto_commit=False,
            max_poll_records=1,
            session_timeout_ms=45000,
        )

    async def start_consumer(self) -> None:
        logger.info("Starting queue consumer", topic=self.topic, group_id=self.group_id)
        self.consumer = self._create_consumer()
        try:
            await self.consumer.start()
            logger.info("Queue consumer started", topic=self.topic)
            await self._consume_loop()
        except asyncio.CancelledError:
            logger.info("Queue consumer task cancelled", topic=self.topic)
            raise
        finally:
            await self.stop_consumer()

    async def stop_consumer(self) -> None:
        self.should_stop = True
        if self.consumer:
            try:
                await self.consumer.stop()
                logger.info("Queue consumer stopped", topic=self.topic)
            except Exception as e:
                logger.error(f"Error stopping queue consumer: {e}", topic=self.topic)
            finally:
                self.consumer = None

    async def _consume_loop(self) -> None:
        while not self.should_stop and self.consumer is not None:
            try:
                async for msg in self.consumer:
                    if self.should_stop:
                        break
                    await self.handle_record(msg)
            except KafkaConnectionError as kce:
                logger.error(f"Kafka connection error: {kce}", topic=self.topic)
                if self.should_stop:
                    break
                await asyncio.sleep(5)

        logger.info("Queue consumer loop has finished", topic=self.topic)

    async def handle_record(self, msg: ConsumerRecord) -> bool:
        """Process ``msg`` and ack or nack it. Returns whether it was acked."""
        try:
            ok = await self._process_message(msg)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(
                f"Unexpected error processing message: {e}",
                topic=msg.topic,
                offset=msg.offset,
                exc_info=True,
            )
            ok = False

        if ok:
            await self.ack(msg)
        else:
            await self.nack(msg)
        return ok

    async def ack(self, msg: ConsumerRecord) -> None:
        if self.consumer is None:
            return
        tp = TopicPartition(msg.topic, msg.partition)
        await self.consumer.commit({tp: msg.offset + 1})
        logger.debug("Message acked", topic=msg.topic, partition=msg.partition, offset=msg.offset)

    async def nack(self, msg: ConsumerRecord) -> None:
        if self.consumer is None:
            return
        tp = TopicPartition(msg.topic, msg.partition)
        self.consumer.seek(tp, msg.offset)
        logger.warning(
            "Message nacked, requeued for redelivery",
            topic=msg.topic,
            partition=msg.partition,
            offset=msg.offset,
        )
        await asyncio.sleep(self.requeue_delay_seconds)
