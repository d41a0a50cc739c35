from __future__ import annotations

from datetime import UTC, datetime

from library_core.messages import LogRecordV1
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker

from services.logger_service.models_db import LogDocument
from services.logger_service.protocols import LogStoreProtocol


class SqlAlchemyLogStore(LogStoreProtocol):
    def __init__(self, engine: AsyncEngine) -> None:
        self._session_factory = async_sessionmaker(engine, expire_on_commit=False)

    async def insert(self, record: LogRecordV1) -> None:
        async with self._session_factory() as session:
            session.add(
                LogDocument(
                    timestamp=record.timestamp,
                    service=record.service,
                    level=record.level.value,
                    correlation_id=record.correlation_id,
                    document=record.to_wire(),
                    received_at=datetime.now(UTC),
                )
            )
            await session.commit()
