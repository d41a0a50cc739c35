"""
Error factories for the versioned catalog and the loan workflow.
"""

from __future__ import annotations

from typing import Any, NoReturn
from uuid import UUID

from library_core.error_enums import CatalogErrorCode

from .factories import raise_error


def raise_version_conflict(
    service: str,
    operation: str,
    resource_type: str,
    resource_id: str,
    expected_version: int | None,
    correlation_id: UUID,
    **additional_context: Any,
) -> NoReturn:
    raise_error(
        CatalogErrorCode.VERSION_CONFLICT,
        service,
        operation,
        f"{resource_type} '{resource_id}' was modified concurrently",
        correlation_id,
        resource_type=resource_type,
        resource_id=resource_id,
        expected_version=expected_version,
        **additional_context,
    )


def raise_stock_exhausted(
    service: str, operation: str, book_id: str, correlation_id: UUID, **additional_context: Any
) -> NoReturn:
    raise_error(
        CatalogErrorCode.STOCK_EXHAUSTED,
        service,
        operation,
        f"Book '{book_id}' is out of stock",
        correlation_id,
        book_id=book_id,
        **additional_context,
    )


def raise_invalid_state_transition(
    service: str,
    operation: str,
    resource_id: str,
    from_state: str,
    to_state: str,
    correlation_id: UUID,
    **additional_context: Any,
) -> NoReturn:
    raise_error(
        CatalogErrorCode.INVALID_STATE_TRANSITION,
        service,
        operation,
        f"Cannot transition '{resource_id}' from {from_state} to {to_state}",
        correlation_id,
        resource_id=resource_id,
        from_state=from_state,
        to_state=to_state,
        **additional_context,
    )


def raise_reference_not_found(
    service: str,
    operation: str,
    reference_type: str,
    reference_id: str,
    correlation_id: UUID,
    **additional_context: Any,
) -> NoReturn:
    raise_error(
        CatalogErrorCode.REFERENCE_NOT_FOUND,
        service,
        operation,
        f"Referenced {reference_type} '{reference_id}' not found",
        correlation_id,
        reference_type=reference_type,
        reference_id=reference_id,
        **additional_context,
    )


def raise_active_loan_exists(
    service: str,
    operation: str,
    user_id: str,
    book_id: str,
    correlation_id: UUID,
    **additional_context: Any,
) -> NoReturn:
    raise_error(
        CatalogErrorCode.ACTIVE_LOAN_EXISTS,
        service,
        operation,
        "User must return the borrowed book before borrowing it again",
        correlation_id,
        user_id=user_id,
        book_id=book_id,
        **additional_context,
    )
