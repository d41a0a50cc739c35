"""
Server side of the RPC boundary for Quart back-ends.

Each RPC is a POST route on a blueprint mounted at
``/v1/rpc/<service>``. Request metadata is read once per request: the
correlation id is bound into the structlog context and the deadline into
the deadline context variable.
"""

from __future__ import annotations

from typing import Any, TypeVar

from dishka import Provider, Scope, provide
from pydantic import BaseModel
from quart import Blueprint, Quart, g, request

from ..error_handling.correlation import (
    CorrelationContext,
    extract_correlation_context_from_request,
)
from ..logging_utils import bind_correlation_id, clear_correlation_id
from .metadata import REQUEST_DEADLINE_HEADER, parse_deadline, set_deadline

ModelT = TypeVar("ModelT", bound=BaseModel)

RPC_URL_PREFIX = "/v1/rpc"


def rpc_blueprint(service_name: str) -> Blueprint:
    return Blueprint(f"{service_name}_rpc", __name__, url_prefix=f"{RPC_URL_PREFIX}/{service_name}")


def setup_rpc_metadata(app: Quart) -> None:
    @app.before_request
    async def bind_request_metadata() -> None:
        corr = extract_correlation_context_from_request(request)
        g.correlation_context = corr
        g.rpc_method = request.path.rsplit("/", 1)[-1]
        bind_correlation_id(corr.original)
        set_deadline(parse_deadline(request.headers.get(REQUEST_DEADLINE_HEADER)))

    @app.teardown_request
    async def release_request_metadata(exc: BaseException | None) -> None:
        set_deadline(None)
        clear_correlation_id()


async def parse_rpc_request(model_cls: type[ModelT]) -> ModelT:
    """Validate the JSON body; ``ValidationError`` reaches the error handlers."""
    data = await request.get_json(silent=True)
    return model_cls.model_validate(data if data is not None else {})


def rpc_response(model: BaseModel) -> tuple[dict[str, Any], int]:
    return model.model_dump(mode="json"), 200


class RpcRequestProvider(Provider):
    """Request-scoped metadata for RPC handlers."""

    @provide(scope=Scope.REQUEST)
    def provide_correlation_context(self) -> CorrelationContext:
        ctx = getattr(g, "correlation_context", None)
        if isinstance(ctx, CorrelationContext):
            return ctx
        return extract_correlation_context_from_request(request)
