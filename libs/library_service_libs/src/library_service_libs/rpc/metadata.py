"""
Request metadata that travels with every RPC.

``request-id`` carries the correlation id; ``request-deadline`` carries the
absolute deadline of the originating request as epoch seconds. The deadline
of the current request is held in a context variable so repositories and
outbound clients can honour it without threading it through every call.
"""

from __future__ import annotations

import time
from contextvars import ContextVar, Token

REQUEST_ID_HEADER = "request-id"
REQUEST_DEADLINE_HEADER = "request-deadline"

_deadline: ContextVar[float | None] = ContextVar("rpc_deadline", default=None)


def parse_deadline(value: str | None) -> float | None:
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        return None


def set_deadline(deadline: float | None) -> Token[float | None]:
    return _deadline.set(deadline)


def current_deadline() -> float | None:
    return _deadline.get()


def remaining_time() -> float | None:
    """Seconds left before the current deadline, or None when there is none."""
    deadline = _deadline.get()
    if deadline is None:
        return None
    return deadline - time.time()


def deadline_exceeded() -> bool:
    remaining = remaining_time()
    return remaining is not None and remaining <= 0
