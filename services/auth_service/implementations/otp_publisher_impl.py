from __future__ import annotations

from library_core.broker_topology import Exchange, QueueName
from library_core.messages import OtpNotificationV1
from library_service_libs.protocols import MessagePublisherProtocol

from services.auth_service.protocols import OtpNotificationPublisherProtocol


class OtpNotificationPublisher(OtpNotificationPublisherProtocol):
    def __init__(self, publisher: MessagePublisherProtocol) -> None:
        self.publisher = publisher

    async def publish_otp(self, email: str, otp: str, correlation_id: str) -> None:
        message = OtpNotificationV1(correlation_id=correlation_id, email=email, otp=otp)
        await self.publisher.publish(Exchange.EMAIL, QueueName.OTP_CODE, message, key=email)
