"""
Quart error handlers for the RPC boundary.

Every failure leaves a back-end as ``{"error": ErrorDetail, "status": RpcStatus}``
with the HTTP status derived from the RPC status, so callers can rebuild the
original ``LibraryError`` on their side of the hop.
"""

from __future__ import annotations

from typing import Any

from library_core.error_enums import ErrorCode
from library_core.models.error_models import ErrorDetail
from library_core.rpc_status import RpcStatus, http_status_for, rpc_status_for
from pydantic import ValidationError
from quart import Quart, g
from werkzeug.exceptions import HTTPException

from ..logging_utils import create_service_logger
from .correlation import CorrelationContext
from .error_detail_factory import create_error_detail_with_context
from .library_error import LibraryError

logger = create_service_logger("library.error_handling.quart")


def create_error_response(
    error_detail: ErrorDetail, status: RpcStatus | None = None
) -> tuple[dict[str, Any], int]:
    rpc_status = status or rpc_status_for(error_detail.error_code)
    body = {"error": error_detail.model_dump(mode="json"), "status": rpc_status.value}
    return body, http_status_for(rpc_status)


def _current_correlation() -> CorrelationContext | None:
    ctx = getattr(g, "correlation_context", None)
    return ctx if isinstance(ctx, CorrelationContext) else None


def _operation_name() -> str:
    return getattr(g, "rpc_method", None) or "request_processing"


def register_error_handlers(app: Quart, service_name: str | None = None) -> None:
    service = service_name or app.name

    @app.errorhandler(LibraryError)
    async def handle_library_error(error: LibraryError) -> tuple[dict[str, Any], int]:
        if error.status_code >= 500:
            logger.error(
                "RPC failed with server error",
                error_code=error.error_code,
                operation=error.operation,
                error=str(error),
            )
        else:
            logger.info(
                "RPC rejected",
                error_code=error.error_code,
                operation=error.operation,
            )
        return create_error_response(error.error_detail)

    @app.errorhandler(ValidationError)
    async def handle_validation_error(error: ValidationError) -> tuple[dict[str, Any], int]:
        corr = _current_correlation()
        field_errors = [
            {
                "field": ".".join(str(part) for part in err["loc"]),
                "message": err["msg"],
                "type": err["type"],
            }
            for err in error.errors()
        ]
        detail = create_error_detail_with_context(
            error_code=ErrorCode.VALIDATION_ERROR,
            message="Request validation failed",
            service=service,
            operation=_operation_name(),
            correlation_id=corr.uuid if corr else None,
            details={"errors": field_errors},
        )
        return create_error_response(detail)

    @app.errorhandler(HTTPException)
    async def handle_http_exception(error: HTTPException) -> tuple[dict[str, Any], int]:
        corr = _current_correlation()
        status = RpcStatus.UNIMPLEMENTED if error.code in (404, 405) else RpcStatus.UNKNOWN
        detail = create_error_detail_with_context(
            error_code=ErrorCode.UNKNOWN_ERROR,
            message=error.description or error.name,
            service=service,
            operation=_operation_name(),
            correlation_id=corr.uuid if corr else None,
            details={"http_status": error.code},
        )
        return create_error_response(detail, status)

    @app.errorhandler(Exception)
    async def handle_unexpected_error(error: Exception) -> tuple[dict[str, Any], int]:
        corr = _current_correlation()
        logger.error(
            "Unhandled exception in RPC handler",
            broker_level="panic",
            operation=_operation_name(),
            exc_info=error,
        )
        detail = create_error_detail_with_context(
            error_code=ErrorCode.PROCESSING_ERROR,
            message="An unexpected error occurred during request processing",
            service=service,
            operation=_operation_name(),
            correlation_id=corr.uuid if corr else None,
            details={"error_type": error.__class__.__name__},
            capture_stack=True,
        )
        return create_error_response(detail, RpcStatus.INTERNAL)
