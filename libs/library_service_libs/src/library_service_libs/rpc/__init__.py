"""RPC boundary between the gateway and the back-end services."""

from .client import RpcClient, rpc_path
from .errors import error_from_rpc_response
from .metadata import (
    REQUEST_DEADLINE_HEADER,
    REQUEST_ID_HEADER,
    deadline_exceeded,
    remaining_time,
)
from .server import (
    RpcRequestProvider,
    parse_rpc_request,
    rpc_blueprint,
    rpc_response,
    setup_rpc_metadata,
)

__all__ = [
    "REQUEST_DEADLINE_HEADER",
    "REQUEST_ID_HEADER",
    "RpcClient",
    "RpcRequestProvider",
    "deadline_exceeded",
    "error_from_rpc_response",
    "parse_rpc_request",
    "remaining_time",
    "rpc_blueprint",
    "rpc_path",
    "rpc_response",
    "setup_rpc_metadata",
]
