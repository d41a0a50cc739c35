"""
Outbound RPC client used for service-to-service calls.

Calls are ``POST {base_url}/v1/rpc/{service}/{method}`` with a JSON body.
The correlation id and the remaining deadline travel as headers; the call
timeout is clamped to the caller's own deadline.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any

import aiohttp

from ..error_handling.correlation import CorrelationContext
from ..error_handling.factories import raise_connection_error, raise_timeout_error
from ..logging_utils import create_service_logger
from .errors import error_from_rpc_response
from .metadata import REQUEST_DEADLINE_HEADER, REQUEST_ID_HEADER, remaining_time

logger = create_service_logger("library.rpc.client")


def rpc_path(service_name: str, method: str) -> str:
    return f"/v1/rpc/{service_name}/{method}"


class RpcClient:
    def __init__(
        self,
        session: aiohttp.ClientSession,
        base_url: str,
        target_service: str,
        caller_service: str,
        timeout_seconds: float = 10.0,
    ) -> None:
        self.session = session
        self.base_url = base_url.rstrip("/")
        self.target_service = target_service
        self.caller_service = caller_service
        self.timeout_seconds = timeout_seconds

    def _effective_timeout(self, method: str, correlation: CorrelationContext) -> float:
        remaining = remaining_time()
        if remaining is None:
            return self.timeout_seconds
        if remaining <= 0:
            raise_timeout_error(
                service=self.caller_service,
                operation=method,
                timeout_seconds=0,
                message=f"Deadline exceeded before calling {self.target_service}.{method}",
                correlation_id=correlation.uuid,
            )
        return min(self.timeout_seconds, remaining)

    async def call(
        self, method: str, payload: dict[str, Any], correlation: CorrelationContext
    ) -> dict[str, Any]:
        timeout = self._effective_timeout(method, correlation)
        headers = {
            REQUEST_ID_HEADER: correlation.original,
            REQUEST_DEADLINE_HEADER: f"{time.time() + timeout:.6f}",
        }
        url = f"{self.base_url}{rpc_path(self.target_service, method)}"

        try:
            async with self.session.post(
                url,
                json=payload,
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=timeout),
            ) as response:
                try:
                    body = await response.json(content_type=None)
                except ValueError:
                    body = None
                status = response.status
        except asyncio.TimeoutError:
            raise_timeout_error(
                service=self.caller_service,
                operation=method,
                timeout_seconds=timeout,
                message=f"{self.target_service}.{method} timed out",
                correlation_id=correlation.uuid,
                target_service=self.target_service,
            )
        except aiohttp.ClientError as e:
            raise_connection_error(
                service=self.caller_service,
                operation=method,
                target=self.target_service,
                message=f"Failed to reach {self.target_service}: {e}",
                correlation_id=correlation.uuid,
            )

        if status == 200 and isinstance(body, dict):
            return body

        error = error_from_rpc_response(
            status,
            body,
            service=self.target_service,
            operation=method,
            correlation_id=correlation.uuid,
        )
        logger.debug(
            "RPC call returned error",
            target_service=self.target_service,
            method=method,
            error_code=error.error_code,
        )
        raise error
