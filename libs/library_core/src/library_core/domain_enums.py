"""
library_core.domain_enums - Enums shared by the catalog, loan and auth services.
"""

from __future__ import annotations

from enum import Enum


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"


class TokenType(str, Enum):
    ACCESS = "access"
    REFRESH = "refresh"


class LoanStatus(str, Enum):
    """Loan lifecycle states. RETURNED and LOST are terminal."""

    BORROWED = "BORROWED"
    RETURNED = "RETURNED"
    OVERDUE = "OVERDUE"
    LOST = "LOST"

    @property
    def is_terminal(self) -> bool:
        return self in (LoanStatus.RETURNED, LoanStatus.LOST)


class LogLevel(str, Enum):
    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"
    PANIC = "panic"
    FATAL = "fatal"
