"""
Shared protocol definitions for library_service_libs.

Contracts for the infrastructure components services depend on, so
implementations can be swapped for fakes in tests.
"""

from __future__ import annotations

from typing import Protocol

from library_core.broker_topology import Exchange, QueueName
from library_core.messages import BrokerMessage

__all__ = ["MessagePublisherProtocol", "RedisClientProtocol"]


class MessagePublisherProtocol(Protocol):
    """Publishes broker messages addressed by exchange and routing key."""

    async def publish(
        self,
        exchange: Exchange,
        routing_key: QueueName,
        message: BrokerMessage,
        key: str | None = None,
    ) -> None: ...

    async def flush(self) -> None: ...


class RedisClientProtocol(Protocol):
    """Protocol for the Redis operations used by the platform."""

    async def get(self, key: str) -> str | None:
        """
        Get string value from Redis.

        Returns:
            String value if key exists, None otherwise
        """
        ...

    async def setex(self, key: str, ttl_seconds: int, value: str) -> bool:
        """
        Set string value with TTL.

        Returns:
            True if the value was stored
        """
        ...

    async def delete_key(self, key: str) -> int:
        """
        Delete a key from Redis.

        Returns:
            Number of keys deleted (0 or 1)
        """
        ...
