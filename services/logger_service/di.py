"""Dishka DI configuration for the Logger Service worker."""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterator

from dishka import Provider, Scope, provide
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from services.logger_service.config import Settings, settings
from services.logger_service.implementations.file_sink_impl import RotatingJsonFileSink
from services.logger_service.implementations.log_store_impl import SqlAlchemyLogStore
from services.logger_service.kafka_consumer import LogQueueConsumer
from services.logger_service.protocols import LogFileSinkProtocol, LogStoreProtocol


class LoggerServiceProvider(Provider):
    @provide(scope=Scope.APP)
    def provide_settings(self) -> Settings:
        return settings

    @provide(scope=Scope.APP)
    async def provide_database_engine(self, settings: Settings) -> AsyncIterator[AsyncEngine]:
        engine = create_async_engine(settings.DATABASE_URL, echo=False, pool_pre_ping=True)
        yield engine
        await engine.dispose()

    @provide(scope=Scope.APP)
    def provide_log_store(self, engine: AsyncEngine) -> LogStoreProtocol:
        return SqlAlchemyLogStore(engine)

    @provide(scope=Scope.APP)
    def provide_file_sink(self, settings: Settings) -> Iterator[LogFileSinkProtocol]:
        sink = RotatingJsonFileSink(
            settings.RECORD_FILE_PATH,
            max_bytes=settings.RECORD_FILE_MAX_BYTES,
            backup_count=settings.RECORD_FILE_BACKUP_COUNT,
            max_age_days=settings.RECORD_FILE_MAX_AGE_DAYS,
        )
        yield sink
        sink.close()

    @provide(scope=Scope.APP)
    def provide_consumer(
        self, store: LogStoreProtocol, file_sink: LogFileSinkProtocol, settings: Settings
    ) -> LogQueueConsumer:
        return LogQueueConsumer(
            store=store,
            file_sink=file_sink,
            bootstrap_servers=settings.KAFKA_BOOTSTRAP_SERVERS,
            group_id=settings.CONSUMER_GROUP_ID,
            requeue_delay_seconds=settings.REQUEUE_DELAY_SECONDS,
        )
