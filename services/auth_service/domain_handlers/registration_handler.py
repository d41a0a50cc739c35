"""Registration domain handler for the Auth Service.

Covers account creation and email verification by one-time code:

- Register creates an unverified user
- SendOTP stores a six digit code in Redis and mails it through the broker
- VerifyEmail consumes the code and marks the user verified
"""

from __future__ import annotations

import hmac
import secrets

from library_service_libs.error_handling import (
    CorrelationContext,
    LibraryError,
    raise_already_exists,
    raise_email_already_verified,
    raise_invalid_otp,
    raise_kafka_publish_error,
    raise_resource_not_found,
)
from library_service_libs.logging_utils import create_service_logger

from services.auth_service.api.schemas import (
    RegisterRequest,
    SendOtpRequest,
    StatusResponse,
    UserResponse,
    VerifyEmailRequest,
)
from services.auth_service.metrics import get_metrics
from services.auth_service.models_db import User
from services.auth_service.protocols import (
    OtpNotificationPublisherProtocol,
    OtpStoreProtocol,
    PasswordHasherProtocol,
    UserRepositoryProtocol,
)

logger = create_service_logger("auth_service.domain_handlers.registration")

OTP_DIGITS = 6


def generate_otp() -> str:
    return f"{secrets.randbelow(10**OTP_DIGITS):0{OTP_DIGITS}d}"


class RegistrationHandler:
    def __init__(
        self,
        user_repo: UserRepositoryProtocol,
        password_hasher: PasswordHasherProtocol,
        otp_store: OtpStoreProtocol,
        otp_publisher: OtpNotificationPublisherProtocol,
        service_name: str,
    ) -> None:
        self._user_repo = user_repo
        self._password_hasher = password_hasher
        self._otp_store = otp_store
        self._otp_publisher = otp_publisher
        self._service_name = service_name
        self._operations = get_metrics()["auth_operations_total"]

    async def register(
        self, request: RegisterRequest, correlation: CorrelationContext
    ) -> UserResponse:
        email = request.email.lower()
        if await self._user_repo.get_by_email(email) is not None:
            self._operations.labels(operation="Register", outcome="duplicate").inc()
            raise_already_exists(
                service=self._service_name,
                operation="Register",
                resource_type="User",
                identifier=email,
                correlation_id=correlation.uuid,
            )

        password_hash = self._password_hasher.hash(request.password)
        user = await self._user_repo.create_user(
            email, request.username, password_hash, correlation.uuid
        )

        self._operations.labels(operation="Register", outcome="success").inc()
        logger.info("User registered", user_id=str(user.id), email=user.email)
        return UserResponse.model_validate(user)

    async def send_otp(
        self, request: SendOtpRequest, correlation: CorrelationContext
    ) -> StatusResponse:
        operation = "SendOTP"
        user = await self._require_user(request.email, correlation, operation)
        if user.verified:
            raise_email_already_verified(
                service=self._service_name,
                operation=operation,
                email=user.email,
                correlation_id=correlation.uuid,
            )

        otp = generate_otp()
        await self._otp_store.save(user.email, otp)

        try:
            await self._otp_publisher.publish_otp(user.email, otp, correlation.original)
        except LibraryError:
            raise
        except Exception as e:
            # The code is useless if it never reaches the mailbox
            await self._otp_store.discard(user.email)
            logger.error("Failed to publish OTP notification", email=user.email, error=str(e))
            raise_kafka_publish_error(
                service=self._service_name,
                operation=operation,
                topic="email_exchange.otp_code",
                message=f"Failed to publish OTP notification: {e}",
                correlation_id=correlation.uuid,
            )

        self._operations.labels(operation=operation, outcome="success").inc()
        logger.info("OTP issued", email=user.email)
        return StatusResponse(message=f"Verification code sent to {user.email}")

    async def verify_email(
        self, request: VerifyEmailRequest, correlation: CorrelationContext
    ) -> StatusResponse:
        operation = "VerifyEmail"
        user = await self._require_user(request.email, correlation, operation)
        if user.verified:
            raise_email_already_verified(
                service=self._service_name,
                operation=operation,
                email=user.email,
                correlation_id=correlation.uuid,
            )

        stored = await self._otp_store.load(user.email)
        if stored is None or not hmac.compare_digest(stored, request.otp):
            self._operations.labels(operation=operation, outcome="invalid_otp").inc()
            raise_invalid_otp(
                service=self._service_name,
                operation=operation,
                email=user.email,
                correlation_id=correlation.uuid,
            )

        await self._user_repo.mark_verified(user.id)
        await self._otp_store.discard(user.email)

        self._operations.labels(operation=operation, outcome="success").inc()
        logger.info("Email verified", user_id=str(user.id))
        return StatusResponse(message="Email verified")

    async def _require_user(
        self, email: str, correlation: CorrelationContext, operation: str
    ) -> User:
        user = await self._user_repo.get_by_email(email)
        if user is None:
            raise_resource_not_found(
                service=self._service_name,
                operation=operation,
                resource_type="User",
                resource_id=email.lower(),
                correlation_id=correlation.uuid,
            )
        return user
