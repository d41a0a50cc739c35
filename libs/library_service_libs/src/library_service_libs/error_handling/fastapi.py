"""
FastAPI error handlers producing the edge response envelope.

Every error leaving the gateway has the shape
``{"success": false, "message": str, "errors": ...}``.
"""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..logging_utils import create_service_logger
from .library_error import LibraryError

logger = create_service_logger("library.error_handling.fastapi")

VALIDATION_MESSAGE = "Validation failed"


def envelope(
    success: bool,
    message: str,
    data: Any = None,
    errors: Any = None,
) -> dict[str, Any]:
    body: dict[str, Any] = {"success": success, "message": message}
    if data is not None:
        body["data"] = data
    if errors is not None:
        body["errors"] = errors
    return body


def error_response(
    status_code: int,
    message: str,
    errors: Any = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=envelope(False, message, errors=errors),
        headers=headers,
    )


def _correlation_headers(request: Request) -> dict[str, str]:
    correlation_id = getattr(request.state, "correlation_id", None)
    return {"X-Correlation-ID": str(correlation_id)} if correlation_id else {}


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(LibraryError)
    async def handle_library_error(request: Request, exc: LibraryError) -> JSONResponse:
        detail = exc.error_detail
        if exc.status_code >= 500:
            logger.error(
                "Upstream call failed",
                error_code=exc.error_code,
                service=detail.service,
                operation=detail.operation,
                path=request.url.path,
            )
        errors: dict[str, Any] = {"code": exc.error_code, "status": exc.rpc_status.value}
        if detail.details:
            errors["details"] = detail.details
        return error_response(
            exc.status_code, detail.message, errors, headers=_correlation_headers(request)
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        field_errors: dict[str, str] = {}
        for err in exc.errors():
            loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
            field_errors[".".join(loc) or "request"] = err.get("msg", "invalid value")
        logger.info("Request validation failed", path=request.url.path, errors=field_errors)
        return error_response(
            400, VALIDATION_MESSAGE, field_errors, headers=_correlation_headers(request)
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        message = exc.detail if isinstance(exc.detail, str) else "Request failed"
        headers = {**_correlation_headers(request), **(exc.headers or {})}
        return error_response(exc.status_code, message, message, headers=headers)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "Unhandled exception in gateway",
            broker_level="panic",
            path=request.url.path,
            exc_info=exc,
        )
        return error_response(
            500,
            "Internal server error",
            "An unexpected error occurred",
            headers=_correlation_headers(request),
        )
