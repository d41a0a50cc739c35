from __future__ import annotations

from typing import Protocol

from library_core.messages import LogRecordV1


class LogStoreProtocol(Protocol):
    async def insert(self, record: LogRecordV1) -> None: ...


class LogFileSinkProtocol(Protocol):
    async def write(self, record: LogRecordV1) -> None: ...

    def close(self) -> None: ...
