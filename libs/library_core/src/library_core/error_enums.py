"""
library_core.error_enums - Centralized error code definitions.
"""

from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    ALREADY_EXISTS = "ALREADY_EXISTS"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    EXTERNAL_SERVICE_ERROR = "EXTERNAL_SERVICE_ERROR"
    KAFKA_PUBLISH_ERROR = "KAFKA_PUBLISH_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"
    PARSING_ERROR = "PARSING_ERROR"
    PROCESSING_ERROR = "PROCESSING_ERROR"  # Internal processing failures

    # Generic transport errors (can be used by any service)
    TIMEOUT = "TIMEOUT"
    CANCELLED = "CANCELLED"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    RATE_LIMIT = "RATE_LIMIT"
    AUTHENTICATION_ERROR = "AUTHENTICATION_ERROR"
    AUTHORIZATION_ERROR = "AUTHORIZATION_ERROR"  # Access denied / permission denied


class CatalogErrorCode(str, Enum):
    """
    Business error codes for the versioned catalog and loan services.
    """

    VERSION_CONFLICT = "VERSION_CONFLICT"
    STOCK_EXHAUSTED = "STOCK_EXHAUSTED"
    INVALID_STATE_TRANSITION = "INVALID_STATE_TRANSITION"
    REFERENCE_NOT_FOUND = "REFERENCE_NOT_FOUND"
    ACTIVE_LOAN_EXISTS = "ACTIVE_LOAN_EXISTS"


class AuthErrorCode(str, Enum):
    """
    Business error codes for registration, verification and token handling.
    """

    INVALID_OTP = "INVALID_OTP"
    INVALID_TOKEN = "INVALID_TOKEN"
    PASSWORD_MISMATCH = "PASSWORD_MISMATCH"
    EMAIL_NOT_VERIFIED = "EMAIL_NOT_VERIFIED"
    EMAIL_ALREADY_VERIFIED = "EMAIL_ALREADY_VERIFIED"


AnyErrorCode = ErrorCode | CatalogErrorCode | AuthErrorCode


def parse_error_code(value: str) -> AnyErrorCode:
    """Resolve a serialized error code back to its enum member.

    Unknown values collapse to ``ErrorCode.UNKNOWN_ERROR`` so that a newer
    peer never breaks an older client.
    """
    for enum_cls in (ErrorCode, CatalogErrorCode, AuthErrorCode):
        try:
            return enum_cls(value)
        except ValueError:
            continue
    return ErrorCode.UNKNOWN_ERROR
