"""
Loan state machine.

    BORROWED -> RETURNED | LOST | OVERDUE
    OVERDUE  -> RETURNED | LOST

RETURNED and LOST are terminal and carry a return date.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from library_core.domain_enums import LoanStatus
from library_service_libs.error_handling import raise_invalid_state_transition

ALLOWED_TRANSITIONS: dict[LoanStatus, frozenset[LoanStatus]] = {
    LoanStatus.BORROWED: frozenset({LoanStatus.RETURNED, LoanStatus.LOST, LoanStatus.OVERDUE}),
    LoanStatus.OVERDUE: frozenset({LoanStatus.RETURNED, LoanStatus.LOST}),
    LoanStatus.RETURNED: frozenset(),
    LoanStatus.LOST: frozenset(),
}

RETURNABLE_STATES = frozenset({LoanStatus.BORROWED, LoanStatus.OVERDUE})


def can_transition(current: LoanStatus, target: LoanStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


def ensure_transition(
    loan_id: UUID,
    current: LoanStatus,
    target: LoanStatus,
    *,
    service: str,
    operation: str,
    correlation_id: UUID,
) -> None:
    if not can_transition(current, target):
        raise_invalid_state_transition(
            service=service,
            operation=operation,
            resource_id=str(loan_id),
            from_state=current.value,
            to_state=target.value,
            correlation_id=correlation_id,
        )


def transition_changes(target: LoanStatus, now: datetime) -> dict[str, Any]:
    """Column changes for moving a loan into ``target``."""
    return {
        "status": target,
        "return_date": now if target.is_terminal else None,
    }
