from __future__ import annotations

from datetime import datetime

from library_core.broker_topology import Exchange, QueueName
from library_core.messages import LoanNotificationV1, ReturnNotificationV1
from library_service_libs.error_handling import CorrelationContext
from library_service_libs.protocols import MessagePublisherProtocol


class LoanNotificationPublisher:
    """Publishes loan and return mails to ``email_exchange``."""

    def __init__(self, publisher: MessagePublisherProtocol) -> None:
        self.publisher = publisher

    async def publish_loan(
        self, email: str, book_title: str, due: datetime, correlation: CorrelationContext
    ) -> None:
        message = LoanNotificationV1(
            correlation_id=correlation.original, email=email, book_title=book_title, due=due
        )
        await self.publisher.publish(
            Exchange.EMAIL, QueueName.LOAN_NOTIFICATION, message, key=email
        )

    async def publish_return(
        self, email: str, book_title: str, correlation: CorrelationContext
    ) -> None:
        message = ReturnNotificationV1(
            correlation_id=correlation.original, email=email, book_title=book_title
        )
        await self.publisher.publish(
            Exchange.EMAIL, QueueName.RETURN_NOTIFICATION, message, key=email
        )
