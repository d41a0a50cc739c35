"""
Dishka provider wiring a service into the broker log pipeline.

Provides the service's ``KafkaBus`` and a started ``BrokerLogProducer``
installed as the structlog forwarding sink. Closing the container stops
the producer (drain, join, flush) and then the bus.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

from dishka import Provider, Scope, provide
from library_core.config_enums import LogWorkerMode

from .config.service_settings import LibraryServiceSettings
from .kafka_client import KafkaBus
from .log_producer import BrokerLogProducer, worker_count_for
from .logging_utils import install_log_sink, remove_log_sink
from .protocols import MessagePublisherProtocol


class LogPipelineProvider(Provider):
    def __init__(
        self,
        *,
        service_name: str,
        bootstrap_servers: str,
        buffer_size: int = 100,
        worker_mode: LogWorkerMode = LogWorkerMode.SINGLE,
        worker_count: int = 1,
    ) -> None:
        super().__init__()
        self.service_name = service_name
        self.bootstrap_servers = bootstrap_servers
        self.buffer_size = buffer_size
        self.worker_mode = worker_mode
        self.worker_count = worker_count

    @classmethod
    def from_settings(cls, settings: LibraryServiceSettings) -> LogPipelineProvider:
        return cls(
            service_name=settings.SERVICE_NAME,
            bootstrap_servers=settings.KAFKA_BOOTSTRAP_SERVERS,
            buffer_size=settings.LOG_BUFFER_SIZE,
            worker_mode=settings.LOG_WORKER_MODE,
            worker_count=settings.LOG_WORKER_COUNT,
        )

    @provide(scope=Scope.APP)
    async def provide_kafka_bus(self) -> AsyncIterator[KafkaBus]:
        bus = KafkaBus(
            client_id=f"{self.service_name}-producer",
            bootstrap_servers=self.bootstrap_servers,
        )
        await bus.start()
        try:
            yield bus
        finally:
            await bus.stop()

    @provide(scope=Scope.APP)
    def provide_message_publisher(self, bus: KafkaBus) -> MessagePublisherProtocol:
        return bus

    @provide(scope=Scope.APP)
    async def provide_log_producer(self, bus: KafkaBus) -> AsyncIterator[BrokerLogProducer]:
        producer = BrokerLogProducer(
            publisher=bus,
            service_name=self.service_name,
            buffer_size=self.buffer_size,
            worker_count=worker_count_for(self.worker_mode, self.worker_count),
        )
        producer.start()
        install_log_sink(producer)
        try:
            yield producer
        finally:
            remove_log_sink(producer)
            await producer.stop()
