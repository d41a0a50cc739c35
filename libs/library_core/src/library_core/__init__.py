"""
Library Platform Common Core Package.

Shared contracts for every service: error codes, RPC status mapping,
broker topology, message schemas and pagination.
"""

from .broker_topology import Exchange, QueueName, topic_name
from .domain_enums import LoanStatus, LogLevel, TokenType, UserRole
from .error_enums import ErrorCode
from .rpc_status import RpcStatus, http_status_for, rpc_status_for

__all__ = [
    "ErrorCode",
    "Exchange",
    "LoanStatus",
    "LogLevel",
    "QueueName",
    "RpcStatus",
    "TokenType",
    "UserRole",
    "http_status_for",
    "rpc_status_for",
    "topic_name",
]
