from __future__ import annotations

from collections.abc import Iterator
from typing import Any
from uuid import UUID, uuid4

import pytest
from library_core.domain_enums import LogLevel
from library_service_libs.logging_utils import install_log_sink, remove_log_sink


class RecordingSink:
    """Collects forwarded log records instead of publishing them."""

    def __init__(self) -> None:
        self.records: list[dict[str, Any]] = []

    def log_message(
        self,
        caller: str,
        correlation_id: str,
        level: LogLevel,
        message: str,
        extra: dict[str, Any] | None = None,
        error: str | None = None,
    ) -> bool:
        self.records.append(
            {
                "caller": caller,
                "correlation_id": correlation_id,
                "level": level,
                "message": message,
                "extra": extra or {},
                "error": error,
            }
        )
        return True


@pytest.fixture
def recording_sink() -> Iterator[RecordingSink]:
    sink = RecordingSink()
    install_log_sink(sink)
    yield sink
    remove_log_sink(sink)


@pytest.fixture
def correlation_id() -> UUID:
    return uuid4()
