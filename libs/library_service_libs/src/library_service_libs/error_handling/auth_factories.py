"""
Error factories for registration, email verification and token handling.
"""

from __future__ import annotations

from typing import Any, NoReturn
from uuid import UUID

from library_core.error_enums import AuthErrorCode

from .factories import raise_error


def raise_invalid_otp(
    service: str, operation: str, email: str, correlation_id: UUID, **additional_context: Any
) -> NoReturn:
    raise_error(
        AuthErrorCode.INVALID_OTP,
        service,
        operation,
        "Invalid or expired OTP code",
        correlation_id,
        email=email,
        **additional_context,
    )


def raise_invalid_token(
    service: str, operation: str, reason: str, correlation_id: UUID, **additional_context: Any
) -> NoReturn:
    raise_error(
        AuthErrorCode.INVALID_TOKEN,
        service,
        operation,
        "Invalid or expired token",
        correlation_id,
        reason=reason,
        **additional_context,
    )


def raise_password_mismatch(
    service: str, operation: str, correlation_id: UUID, **additional_context: Any
) -> NoReturn:
    raise_error(
        AuthErrorCode.PASSWORD_MISMATCH,
        service,
        operation,
        "Invalid email or password",
        correlation_id,
        **additional_context,
    )


def raise_email_not_verified(
    service: str, operation: str, email: str, correlation_id: UUID, **additional_context: Any
) -> NoReturn:
    raise_error(
        AuthErrorCode.EMAIL_NOT_VERIFIED,
        service,
        operation,
        "User email not verified",
        correlation_id,
        email=email,
        **additional_context,
    )


def raise_email_already_verified(
    service: str, operation: str, email: str, correlation_id: UUID, **additional_context: Any
) -> NoReturn:
    raise_error(
        AuthErrorCode.EMAIL_ALREADY_VERIFIED,
        service,
        operation,
        "Email already verified",
        correlation_id,
        email=email,
        **additional_context,
    )
