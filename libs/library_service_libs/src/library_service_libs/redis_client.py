"""
Redis client with lifecycle management for short-lived key/value state.

Used by the auth service to hold OTP bindings with a TTL.
"""

from __future__ import annotations

import os

import redis.asyncio as aioredis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from .logging_utils import create_service_logger
from .protocols import RedisClientProtocol

logger = create_service_logger("library.redis_client")

REDIS_URL = os.getenv("REDIS_URL", "redis://redis:6379")


class RedisClient(RedisClientProtocol):
    def __init__(self, *, client_id: str, redis_url: str = REDIS_URL):
        self.redis_url = redis_url
        self.client_id = client_id
        self.client = aioredis.from_url(
            self.redis_url,
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5,
        )
        self._started = False

    async def start(self) -> None:
        """Connect and verify the server answers PING."""
        if not self._started:
            try:
                await self.client.ping()
                self._started = True
                logger.info(f"Redis client '{self.client_id}' connected to {self.redis_url}")
            except RedisConnectionError as e:
                logger.error(f"Redis client '{self.client_id}' failed to connect: {e}")
                raise

    async def stop(self) -> None:
        if self._started:
            try:
                await self.client.aclose()
                self._started = False
                logger.info(f"Redis client '{self.client_id}' disconnected")
            except Exception as e:
                logger.error(
                    f"Error stopping Redis client '{self.client_id}': {e}",
                    exc_info=True,
                )

    async def _ensure_started(self) -> None:
        if not self._started:
            logger.warning(f"Redis client '{self.client_id}' not started. Attempting to start.")
            await self.start()
            if not self._started:
                raise RuntimeError(f"Redis client '{self.client_id}' is not running.")

    async def get(self, key: str) -> str | None:
        await self._ensure_started()
        try:
            value = await self.client.get(key)
            logger.debug(
                f"Redis GET by '{self.client_id}': key='{key}' "
                f"result={'HIT' if value is not None else 'MISS'}",
            )
            return str(value) if value is not None else None
        except RedisTimeoutError:
            logger.error(f"Timeout on Redis GET by '{self.client_id}' for key '{key}'")
            raise

    async def setex(self, key: str, ttl_seconds: int, value: str) -> bool:
        await self._ensure_started()
        try:
            result = await self.client.setex(key, ttl_seconds, value)
            logger.debug(f"Redis SETEX by '{self.client_id}': key='{key}' ttl={ttl_seconds}s")
            return bool(result)
        except RedisTimeoutError:
            logger.error(f"Timeout on Redis SETEX by '{self.client_id}' for key '{key}'")
            raise

    async def delete_key(self, key: str) -> int:
        await self._ensure_started()
        deleted_count = await self.client.delete(key)
        logger.debug(f"Redis DELETE by '{self.client_id}': key='{key}' deleted={deleted_count}")
        return int(deleted_count)
