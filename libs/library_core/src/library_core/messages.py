"""
Broker message contracts.

Payloads are published as bare JSON objects. The correlation id is carried
under the ``X-Correlation-ID`` key in every message.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from library_core.domain_enums import LogLevel

CORRELATION_ID_KEY = "X-Correlation-ID"


class BrokerMessage(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    correlation_id: str = Field(default="", alias=CORRELATION_ID_KEY)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class LogRecordV1(BrokerMessage):
    """One log record routed through ``log_exchange`` to the logger service."""

    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    service: str
    level: LogLevel
    caller: str = ""
    message: str
    error: str | None = None
    extra: dict[str, Any] = Field(default_factory=dict)


class OtpNotificationV1(BrokerMessage):
    email: str
    otp: str


class LoanNotificationV1(BrokerMessage):
    email: str
    book_title: str = Field(alias="book")
    due: datetime


class ReturnNotificationV1(BrokerMessage):
    email: str
    book_title: str = Field(alias="book")
