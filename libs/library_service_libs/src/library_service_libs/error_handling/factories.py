"""
Generic error factories.

Every factory builds an ``ErrorDetail`` and raises ``LibraryError``. Extra
keyword arguments land in ``ErrorDetail.details``.
"""

from __future__ import annotations

from typing import Any, NoReturn
from uuid import UUID

from library_core.error_enums import AnyErrorCode, ErrorCode

from .error_detail_factory import create_error_detail_with_context
from .library_error import LibraryError


def raise_error(
    error_code: AnyErrorCode,
    service: str,
    operation: str,
    message: str,
    correlation_id: UUID,
    **additional_context: Any,
) -> NoReturn:
    error_detail = create_error_detail_with_context(
        error_code=error_code,
        message=message,
        service=service,
        operation=operation,
        correlation_id=correlation_id,
        details=additional_context,
    )
    raise LibraryError(error_detail)


def raise_unknown_error(
    service: str, operation: str, message: str, correlation_id: UUID, **additional_context: Any
) -> NoReturn:
    raise_error(
        ErrorCode.UNKNOWN_ERROR, service, operation, message, correlation_id, **additional_context
    )


def raise_validation_error(
    service: str,
    operation: str,
    field: str,
    message: str,
    correlation_id: UUID,
    value: Any = None,
    **additional_context: Any,
) -> NoReturn:
    details: dict[str, Any] = {"field": field, **additional_context}
    if value is not None:
        details["value"] = value
    raise_error(ErrorCode.VALIDATION_ERROR, service, operation, message, correlation_id, **details)


def raise_resource_not_found(
    service: str,
    operation: str,
    resource_type: str,
    resource_id: str,
    correlation_id: UUID,
    **additional_context: Any,
) -> NoReturn:
    raise_error(
        ErrorCode.RESOURCE_NOT_FOUND,
        service,
        operation,
        f"{resource_type} '{resource_id}' not found",
        correlation_id,
        resource_type=resource_type,
        resource_id=resource_id,
        **additional_context,
    )


def raise_already_exists(
    service: str,
    operation: str,
    resource_type: str,
    identifier: str,
    correlation_id: UUID,
    **additional_context: Any,
) -> NoReturn:
    raise_error(
        ErrorCode.ALREADY_EXISTS,
        service,
        operation,
        f"{resource_type} '{identifier}' already exists",
        correlation_id,
        resource_type=resource_type,
        identifier=identifier,
        **additional_context,
    )


def raise_configuration_error(
    service: str,
    operation: str,
    config_key: str,
    message: str,
    correlation_id: UUID,
    **additional_context: Any,
) -> NoReturn:
    raise_error(
        ErrorCode.CONFIGURATION_ERROR,
        service,
        operation,
        message,
        correlation_id,
        config_key=config_key,
        **additional_context,
    )


def raise_external_service_error(
    service: str,
    operation: str,
    external_service: str,
    message: str,
    correlation_id: UUID,
    **additional_context: Any,
) -> NoReturn:
    raise_error(
        ErrorCode.EXTERNAL_SERVICE_ERROR,
        service,
        operation,
        message,
        correlation_id,
        external_service=external_service,
        **additional_context,
    )


def raise_connection_error(
    service: str,
    operation: str,
    target: str,
    message: str,
    correlation_id: UUID,
    **additional_context: Any,
) -> NoReturn:
    raise_error(
        ErrorCode.CONNECTION_ERROR,
        service,
        operation,
        message,
        correlation_id,
        target=target,
        **additional_context,
    )


def raise_timeout_error(
    service: str,
    operation: str,
    timeout_seconds: float,
    message: str,
    correlation_id: UUID,
    **additional_context: Any,
) -> NoReturn:
    raise_error(
        ErrorCode.TIMEOUT,
        service,
        operation,
        message,
        correlation_id,
        timeout_seconds=timeout_seconds,
        **additional_context,
    )


def raise_cancelled(
    service: str, operation: str, message: str, correlation_id: UUID, **additional_context: Any
) -> NoReturn:
    raise_error(
        ErrorCode.CANCELLED, service, operation, message, correlation_id, **additional_context
    )


def raise_kafka_publish_error(
    service: str,
    operation: str,
    topic: str,
    message: str,
    correlation_id: UUID,
    **additional_context: Any,
) -> NoReturn:
    raise_error(
        ErrorCode.KAFKA_PUBLISH_ERROR,
        service,
        operation,
        message,
        correlation_id,
        topic=topic,
        **additional_context,
    )


def raise_database_error(
    service: str, operation: str, message: str, correlation_id: UUID, **additional_context: Any
) -> NoReturn:
    raise_error(
        ErrorCode.DATABASE_ERROR, service, operation, message, correlation_id, **additional_context
    )


def raise_parsing_error(
    service: str,
    operation: str,
    parse_target: str,
    message: str,
    correlation_id: UUID,
    **additional_context: Any,
) -> NoReturn:
    raise_error(
        ErrorCode.PARSING_ERROR,
        service,
        operation,
        message,
        correlation_id,
        parse_target=parse_target,
        **additional_context,
    )


def raise_processing_error(
    service: str, operation: str, message: str, correlation_id: UUID, **additional_context: Any
) -> NoReturn:
    raise_error(
        ErrorCode.PROCESSING_ERROR,
        service,
        operation,
        message,
        correlation_id,
        **additional_context,
    )


def raise_rate_limit_error(
    service: str,
    operation: str,
    limit: str,
    message: str,
    correlation_id: UUID,
    **additional_context: Any,
) -> NoReturn:
    raise_error(
        ErrorCode.RATE_LIMIT, service, operation, message, correlation_id, limit=limit,
        **additional_context,
    )


def raise_authentication_error(
    service: str, operation: str, message: str, correlation_id: UUID, **additional_context: Any
) -> NoReturn:
    raise_error(
        ErrorCode.AUTHENTICATION_ERROR,
        service,
        operation,
        message,
        correlation_id,
        **additional_context,
    )


def raise_authorization_error(
    service: str, operation: str, message: str, correlation_id: UUID, **additional_context: Any
) -> NoReturn:
    raise_error(
        ErrorCode.AUTHORIZATION_ERROR,
        service,
        operation,
        message,
        correlation_id,
        **additional_context,
    )
