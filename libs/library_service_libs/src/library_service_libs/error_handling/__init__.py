"""
Structured error handling for library platform services.

Errors are raised through the factory functions and travel as
``LibraryError`` wrapping an immutable ``ErrorDetail``.
"""

from .auth_factories import (
    raise_email_already_verified,
    raise_email_not_verified,
    raise_invalid_otp,
    raise_invalid_token,
    raise_password_mismatch,
)
from .catalog_factories import (
    raise_active_loan_exists,
    raise_invalid_state_transition,
    raise_reference_not_found,
    raise_stock_exhausted,
    raise_version_conflict,
)
from .correlation import CorrelationContext, correlation_from_value
from .error_detail_factory import create_error_detail_with_context
from .factories import (
    raise_already_exists,
    raise_authentication_error,
    raise_authorization_error,
    raise_cancelled,
    raise_configuration_error,
    raise_connection_error,
    raise_database_error,
    raise_error,
    raise_external_service_error,
    raise_kafka_publish_error,
    raise_parsing_error,
    raise_processing_error,
    raise_rate_limit_error,
    raise_resource_not_found,
    raise_timeout_error,
    raise_unknown_error,
    raise_validation_error,
)
from .library_error import LibraryError

__all__ = [
    "CorrelationContext",
    "LibraryError",
    "correlation_from_value",
    "create_error_detail_with_context",
    "raise_active_loan_exists",
    "raise_already_exists",
    "raise_authentication_error",
    "raise_authorization_error",
    "raise_cancelled",
    "raise_configuration_error",
    "raise_connection_error",
    "raise_database_error",
    "raise_email_already_verified",
    "raise_email_not_verified",
    "raise_error",
    "raise_external_service_error",
    "raise_invalid_otp",
    "raise_invalid_state_transition",
    "raise_invalid_token",
    "raise_kafka_publish_error",
    "raise_parsing_error",
    "raise_password_mismatch",
    "raise_processing_error",
    "raise_rate_limit_error",
    "raise_reference_not_found",
    "raise_resource_not_found",
    "raise_stock_exhausted",
    "raise_timeout_error",
    "raise_unknown_error",
    "raise_validation_error",
    "raise_version_conflict",
]
