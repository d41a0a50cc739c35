"""
library_core.rpc_status - RPC status codes and their deterministic mappings.

Back-end services report failures as an ``RpcStatus``; the gateway re-maps
that status to an HTTP status. Both tables live here so every hop agrees.
"""

from __future__ import annotations

from enum import Enum

from library_core.error_enums import AnyErrorCode, AuthErrorCode, CatalogErrorCode, ErrorCode


class RpcStatus(str, Enum):
    OK = "OK"
    CANCELLED = "CANCELLED"
    UNKNOWN = "UNKNOWN"
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    DEADLINE_EXCEEDED = "DEADLINE_EXCEEDED"
    NOT_FOUND = "NOT_FOUND"
    ALREADY_EXISTS = "ALREADY_EXISTS"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    RESOURCE_EXHAUSTED = "RESOURCE_EXHAUSTED"
    FAILED_PRECONDITION = "FAILED_PRECONDITION"
    ABORTED = "ABORTED"
    UNIMPLEMENTED = "UNIMPLEMENTED"
    INTERNAL = "INTERNAL"
    UNAVAILABLE = "UNAVAILABLE"
    UNAUTHENTICATED = "UNAUTHENTICATED"


_ERROR_CODE_TO_RPC_STATUS: dict[AnyErrorCode, RpcStatus] = {
    ErrorCode.VALIDATION_ERROR: RpcStatus.INVALID_ARGUMENT,
    ErrorCode.RESOURCE_NOT_FOUND: RpcStatus.NOT_FOUND,
    ErrorCode.ALREADY_EXISTS: RpcStatus.ALREADY_EXISTS,
    ErrorCode.TIMEOUT: RpcStatus.DEADLINE_EXCEEDED,
    ErrorCode.CANCELLED: RpcStatus.CANCELLED,
    ErrorCode.CONNECTION_ERROR: RpcStatus.UNAVAILABLE,
    ErrorCode.SERVICE_UNAVAILABLE: RpcStatus.UNAVAILABLE,
    ErrorCode.EXTERNAL_SERVICE_ERROR: RpcStatus.UNAVAILABLE,
    ErrorCode.RATE_LIMIT: RpcStatus.RESOURCE_EXHAUSTED,
    ErrorCode.AUTHENTICATION_ERROR: RpcStatus.UNAUTHENTICATED,
    ErrorCode.AUTHORIZATION_ERROR: RpcStatus.PERMISSION_DENIED,
    CatalogErrorCode.VERSION_CONFLICT: RpcStatus.ABORTED,
    CatalogErrorCode.STOCK_EXHAUSTED: RpcStatus.FAILED_PRECONDITION,
    CatalogErrorCode.INVALID_STATE_TRANSITION: RpcStatus.FAILED_PRECONDITION,
    CatalogErrorCode.ACTIVE_LOAN_EXISTS: RpcStatus.FAILED_PRECONDITION,
    CatalogErrorCode.REFERENCE_NOT_FOUND: RpcStatus.NOT_FOUND,
    AuthErrorCode.INVALID_OTP: RpcStatus.INVALID_ARGUMENT,
    AuthErrorCode.INVALID_TOKEN: RpcStatus.UNAUTHENTICATED,
    AuthErrorCode.PASSWORD_MISMATCH: RpcStatus.UNAUTHENTICATED,
    AuthErrorCode.EMAIL_NOT_VERIFIED: RpcStatus.PERMISSION_DENIED,
    AuthErrorCode.EMAIL_ALREADY_VERIFIED: RpcStatus.ALREADY_EXISTS,
}

_RPC_STATUS_TO_HTTP: dict[RpcStatus, int] = {
    RpcStatus.OK: 200,
    RpcStatus.CANCELLED: 408,
    RpcStatus.UNKNOWN: 500,
    RpcStatus.INVALID_ARGUMENT: 400,
    RpcStatus.DEADLINE_EXCEEDED: 504,
    RpcStatus.NOT_FOUND: 404,
    RpcStatus.ALREADY_EXISTS: 409,
    RpcStatus.PERMISSION_DENIED: 403,
    RpcStatus.RESOURCE_EXHAUSTED: 429,
    RpcStatus.FAILED_PRECONDITION: 409,
    RpcStatus.ABORTED: 409,
    RpcStatus.UNIMPLEMENTED: 501,
    RpcStatus.INTERNAL: 500,
    RpcStatus.UNAVAILABLE: 503,
    RpcStatus.UNAUTHENTICATED: 401,
}


def rpc_status_for(error_code: AnyErrorCode) -> RpcStatus:
    """Map a domain error code to its RPC status; unmapped codes are INTERNAL."""
    return _ERROR_CODE_TO_RPC_STATUS.get(error_code, RpcStatus.INTERNAL)


def http_status_for(status: RpcStatus) -> int:
    return _RPC_STATUS_TO_HTTP.get(status, 500)


def rpc_status_from_name(value: str | None) -> RpcStatus:
    if not value:
        return RpcStatus.UNKNOWN
    try:
        return RpcStatus(value)
    except ValueError:
        return RpcStatus.UNKNOWN
