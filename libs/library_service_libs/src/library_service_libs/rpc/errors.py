"""Rebuild a ``LibraryError`` from an RPC error response body."""

from __future__ import annotations

from typing import Any
from uuid import UUID

from library_core.error_enums import ErrorCode, parse_error_code
from library_core.models.error_models import ErrorDetail
from pydantic import ValidationError

from ..error_handling.error_detail_factory import create_error_detail_with_context
from ..error_handling.library_error import LibraryError

_FALLBACK_BY_HTTP_STATUS: dict[int, ErrorCode] = {
    400: ErrorCode.VALIDATION_ERROR,
    401: ErrorCode.AUTHENTICATION_ERROR,
    403: ErrorCode.AUTHORIZATION_ERROR,
    404: ErrorCode.RESOURCE_NOT_FOUND,
    408: ErrorCode.CANCELLED,
    429: ErrorCode.RATE_LIMIT,
    503: ErrorCode.SERVICE_UNAVAILABLE,
    504: ErrorCode.TIMEOUT,
}


def error_from_rpc_response(
    status_code: int,
    body: Any,
    *,
    service: str,
    operation: str,
    correlation_id: UUID,
) -> LibraryError:
    """
    Turn an error response into the ``LibraryError`` the remote side raised.

    A well-formed body keeps its domain error code and details. Anything
    else becomes an error derived from the HTTP status alone.
    """
    raw_detail = body.get("error") if isinstance(body, dict) else None
    if isinstance(raw_detail, dict):
        try:
            detail = ErrorDetail.model_validate(
                {
                    **raw_detail,
                    "error_code": parse_error_code(str(raw_detail.get("error_code", ""))),
                }
            )
            return LibraryError(detail)
        except ValidationError:
            pass

    error_code = _FALLBACK_BY_HTTP_STATUS.get(status_code, ErrorCode.EXTERNAL_SERVICE_ERROR)
    return LibraryError(
        create_error_detail_with_context(
            error_code=error_code,
            message=f"Remote call failed with HTTP {status_code}",
            service=service,
            operation=operation,
            correlation_id=correlation_id,
            details={"status_code": status_code},
        )
    )
