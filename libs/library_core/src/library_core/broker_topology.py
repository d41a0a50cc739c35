"""
library_core.broker_topology - Exchanges, queues and their topic contracts.

Both exchanges are direct exchanges: a message reaches exactly the queue
whose name equals its routing key. On Kafka every (exchange, queue) binding
is one topic, so routing a message means resolving that topic.
"""

from __future__ import annotations

from enum import Enum

CONTENT_TYPE_HEADER = "content-type"
JSON_CONTENT_TYPE = "application/json"


class Exchange(str, Enum):
    LOG = "log_exchange"
    EMAIL = "email_exchange"


class QueueName(str, Enum):
    LOG_QUEUE = "log_queue"
    OTP_CODE = "otp_code"
    LOAN_NOTIFICATION = "loan_notification"
    RETURN_NOTIFICATION = "return_notification"


BINDINGS: dict[Exchange, tuple[QueueName, ...]] = {
    Exchange.LOG: (QueueName.LOG_QUEUE,),
    Exchange.EMAIL: (
        QueueName.OTP_CODE,
        QueueName.LOAN_NOTIFICATION,
        QueueName.RETURN_NOTIFICATION,
    ),
}


def topic_name(exchange: Exchange, routing_key: QueueName) -> str:
    """
    Resolve the Kafka topic for a message published to ``exchange`` with ``routing_key``.
    """
    bound = BINDINGS.get(exchange, ())
    if routing_key not in bound:
        bound_summary = ", ".join(q.value for q in bound) or "<none>"
        raise ValueError(
            f"Routing key '{routing_key.value}' is not bound to exchange '{exchange.value}'. "
            f"Bound queues: {bound_summary}",
        )
    return f"{exchange.value}.{routing_key.value}"


def exchange_topics(exchange: Exchange) -> list[str]:
    """All topics that must exist for ``exchange`` to route its bound queues."""
    return [topic_name(exchange, queue) for queue in BINDINGS[exchange]]
