"""
Unit tests for the direct-exchange topic contracts.
"""

from __future__ import annotations

import pytest

from library_core.broker_topology import (
    BINDINGS,
    Exchange,
    QueueName,
    exchange_topics,
    topic_name,
)


class TestTopicName:
    def test_log_queue_topic(self) -> None:
        assert topic_name(Exchange.LOG, QueueName.LOG_QUEUE) == "log_exchange.log_queue"

    @pytest.mark.parametrize(
        "queue",
        [QueueName.OTP_CODE, QueueName.LOAN_NOTIFICATION, QueueName.RETURN_NOTIFICATION],
    )
    def test_email_queues_are_bound_by_name(self, queue: QueueName) -> None:
        assert topic_name(Exchange.EMAIL, queue) == f"email_exchange.{queue.value}"

    def test_unbound_routing_key_is_rejected(self) -> None:
        with pytest.raises(ValueError, match="not bound"):
            topic_name(Exchange.LOG, QueueName.OTP_CODE)

    def test_exchange_topics_cover_all_bindings(self) -> None:
        assert len(exchange_topics(Exchange.EMAIL)) == len(BINDINGS[Exchange.EMAIL]) == 3
