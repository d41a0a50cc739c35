"""
Correlation context carried through a request.

``original`` is the exact string received (or generated at the edge) and is
what travels in headers and log records. ``uuid`` is the canonical UUID used
in ``ErrorDetail``; a non-UUID original maps to a stable uuid5 of it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING
from uuid import NAMESPACE_URL, UUID, uuid4, uuid5

if TYPE_CHECKING:
    from quart import Request

REQUEST_ID_HEADER = "request-id"
CORRELATION_HEADER = "X-Correlation-ID"


@dataclass(frozen=True)
class CorrelationContext:
    original: str
    uuid: UUID
    source: str


def correlation_from_value(value: str | None, source: str) -> CorrelationContext:
    if not value:
        generated = uuid4()
        return CorrelationContext(original=str(generated), uuid=generated, source="generated")
    try:
        canonical = UUID(value)
    except ValueError:
        canonical = uuid5(NAMESPACE_URL, value)
    return CorrelationContext(original=value, uuid=canonical, source=source)


def extract_correlation_context_from_request(request: Request) -> CorrelationContext:
    """Read the correlation id from RPC metadata, falling back to the edge header."""
    value = request.headers.get(REQUEST_ID_HEADER)
    if value:
        return correlation_from_value(value, source=REQUEST_ID_HEADER)
    value = request.headers.get(CORRELATION_HEADER)
    if value:
        return correlation_from_value(value, source=CORRELATION_HEADER)
    return correlation_from_value(None, source="generated")
