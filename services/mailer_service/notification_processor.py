"""Turns an email_exchange message into a sent email.

Each queue has its own message model and template; the template id is the
queue name. ``process`` never raises: it reports success so the consumer can
decide between ack and requeue.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any, NamedTuple

from library_core.broker_topology import QueueName
from library_core.messages import (
    BrokerMessage,
    LoanNotificationV1,
    OtpNotificationV1,
    ReturnNotificationV1,
)
from library_service_libs.error_handling import LibraryError, correlation_from_value
from library_service_libs.logging_utils import create_service_logger
from pydantic import ValidationError

from services.mailer_service.metrics import get_metrics
from services.mailer_service.protocols import EmailProvider, TemplateRenderer

logger = create_service_logger("mailer_service.notification_processor")


class MailRoute(NamedTuple):
    model: type[BrokerMessage]
    variables: Callable[[Any], dict[str, Any]]


ROUTES: dict[QueueName, MailRoute] = {
    QueueName.OTP_CODE: MailRoute(
        OtpNotificationV1,
        lambda m: {"otp": m.otp, "year": datetime.now(UTC).year},
    ),
    QueueName.LOAN_NOTIFICATION: MailRoute(
        LoanNotificationV1,
        lambda m: {"book": m.book_title, "due": m.due},
    ),
    QueueName.RETURN_NOTIFICATION: MailRoute(
        ReturnNotificationV1,
        lambda m: {"book": m.book_title},
    ),
}


def template_ids() -> list[str]:
    return [queue.value for queue in ROUTES]


class NotificationProcessor:
    def __init__(self, renderer: TemplateRenderer, provider: EmailProvider) -> None:
        self.renderer = renderer
        self.provider = provider
        self.emails = get_metrics()["emails_sent_total"]

    async def process(self, queue: QueueName, raw: bytes) -> bool:
        route = ROUTES[queue]
        try:
            message = route.model.model_validate_json(raw)
        except ValidationError as e:
            self.emails.labels(queue=queue.value, outcome="parse_error").inc()
            logger.error("Failed to parse mail message", queue=queue.value, error=str(e))
            return False

        correlation = correlation_from_value(message.correlation_id, source="broker")
        recipient: str = message.email  # type: ignore[attr-defined]

        try:
            rendered = await self.renderer.render(
                queue.value, route.variables(message), correlation.uuid
            )
        except LibraryError as e:
            self.emails.labels(queue=queue.value, outcome="render_error").inc()
            logger.error(
                "Failed to render mail",
                queue=queue.value,
                correlation_id=correlation.original,
                error=str(e),
            )
            return False

        result = await self.provider.send_email(
            to=recipient,
            subject=rendered.subject,
            html_content=rendered.html_content,
            text_content=rendered.text_content,
        )
        if not result.success:
            self.emails.labels(queue=queue.value, outcome="send_error").inc()
            logger.error(
                "Failed to send mail",
                queue=queue.value,
                correlation_id=correlation.original,
                error=result.error_message,
            )
            return False

        self.emails.labels(queue=queue.value, outcome="sent").inc()
        logger.info("Mail sent", queue=queue.value, correlation_id=correlation.original)
        return True
