"""
Thin Kafka wrapper using aiokafka for library platform services.

Messages are addressed by (exchange, routing key) and land on the topic that
binding resolves to. Values are bare JSON objects tagged with a
``content-type`` header.
"""

from __future__ import annotations

import json
import os

from aiokafka import AIOKafkaProducer
from aiokafka.admin import AIOKafkaAdminClient, NewTopic
from aiokafka.errors import KafkaConnectionError, KafkaTimeoutError, TopicAlreadyExistsError
from library_core.broker_topology import (
    CONTENT_TYPE_HEADER,
    JSON_CONTENT_TYPE,
    Exchange,
    QueueName,
    exchange_topics,
    topic_name,
)
from library_core.messages import BrokerMessage

from .logging_utils import create_service_logger

# Never forwarded into the broker log pipeline (see logging_utils.NON_FORWARDED_LOGGERS)
logger = create_service_logger("library.kafka_client")

KAFKA_BOOTSTRAP_SERVERS = os.getenv("KAFKA_BOOTSTRAP_SERVERS", "kafka:9092")

_JSON_HEADERS = [(CONTENT_TYPE_HEADER, JSON_CONTENT_TYPE.encode("utf-8"))]


class KafkaBus:
    def __init__(self, *, client_id: str, bootstrap_servers: str = KAFKA_BOOTSTRAP_SERVERS):
        self.bootstrap_servers = bootstrap_servers
        self.client_id = client_id
        self.producer = AIOKafkaProducer(
            bootstrap_servers=self.bootstrap_servers,
            client_id=self.client_id,
            value_serializer=lambda v: json.dumps(v).encode("utf-8"),
            acks="all",
            enable_idempotence=True,
        )
        self._started = False

    async def start(self) -> None:
        if not self._started:
            try:
                await self.producer.start()
                self._started = True
                logger.info(f"KafkaProducer '{self.client_id}' started successfully.")
            except KafkaConnectionError as e:
                logger.error(f"KafkaProducer '{self.client_id}' failed to start: {e}")
                raise

    async def stop(self) -> None:
        try:
            await self.producer.stop()
            self._started = False
            logger.info(f"KafkaProducer '{self.client_id}' stopped.")
        except Exception as e:
            logger.error(
                f"Error stopping KafkaProducer '{self.client_id}': {e}",
                exc_info=True,
            )

    async def flush(self) -> None:
        if self._started:
            await self.producer.flush()

    async def publish(
        self,
        exchange: Exchange,
        routing_key: QueueName,
        message: BrokerMessage,
        key: str | None = None,
    ) -> None:
        topic = topic_name(exchange, routing_key)
        if not self._started:
            logger.warning(f"KafkaProducer '{self.client_id}' not started. Attempting to start.")
            await self.start()
            if not self._started:
                raise RuntimeError(f"KafkaProducer '{self.client_id}' is not running.")
        try:
            key_bytes = key.encode("utf-8") if key else None
            record_metadata = await self.producer.send_and_wait(
                topic,
                value=message.to_wire(),
                key=key_bytes,
                headers=_JSON_HEADERS,
            )
            logger.debug(
                f"Message published by '{self.client_id}' to {topic} "
                f"[partition:{record_metadata.partition}, offset:{record_metadata.offset}] "
                f"correlation_id='{message.correlation_id}'",
            )
        except KafkaTimeoutError:
            logger.error(f"Timeout publishing message by '{self.client_id}' to topic '{topic}'.")
            raise
        except Exception as e:
            logger.error(
                f"Error publishing message by '{self.client_id}' to topic '{topic}': {e}",
                exc_info=True,
            )
            raise


async def declare_topology(
    bootstrap_servers: str,
    *exchanges: Exchange,
    num_partitions: int = 1,
    replication_factor: int = 1,
) -> list[str]:
    """Create the topics backing ``exchanges``; existing topics are left as they are."""
    topics = [topic for exchange in exchanges for topic in exchange_topics(exchange)]
    admin = AIOKafkaAdminClient(bootstrap_servers=bootstrap_servers)
    await admin.start()
    try:
        existing = set(await admin.list_topics())
        missing = [topic for topic in topics if topic not in existing]
        if missing:
            try:
                await admin.create_topics(
                    [
                        NewTopic(
                            name=topic,
                            num_partitions=num_partitions,
                            replication_factor=replication_factor,
                        )
                        for topic in missing
                    ]
                )
                logger.info("Declared broker topics", topics=missing)
            except TopicAlreadyExistsError:
                logger.debug("Broker topics already declared", topics=missing)
    finally:
        await admin.close()
    return topics
