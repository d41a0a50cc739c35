from __future__ import annotations

from library_service_libs.protocols import RedisClientProtocol

from services.auth_service.protocols import OtpStoreProtocol

OTP_KEY_PREFIX = "otp:"


def otp_key(email: str) -> str:
    return f"{OTP_KEY_PREFIX}{email.lower()}"


class RedisOtpStore(OtpStoreProtocol):
    """One pending OTP per email, expiring after ``ttl_seconds``."""

    def __init__(self, redis: RedisClientProtocol, ttl_seconds: int) -> None:
        self._redis = redis
        self._ttl_seconds = ttl_seconds

    async def save(self, email: str, otp: str) -> None:
        await self._redis.setex(otp_key(email), self._ttl_seconds, otp)

    async def load(self, email: str) -> str | None:
        return await self._redis.get(otp_key(email))

    async def discard(self, email: str) -> None:
        await self._redis.delete_key(otp_key(email))
