from __future__ import annotations

from argon2 import PasswordHasher as Argon2Hasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

from services.auth_service.protocols import PasswordHasherProtocol


class Argon2idPasswordHasher(PasswordHasherProtocol):
    """Argon2id password hasher; only the time cost is tuned per deployment."""

    def __init__(self, time_cost: int = 3) -> None:
        self._hasher = Argon2Hasher(time_cost=time_cost)

    def hash(self, password: str) -> str:
        return self._hasher.hash(password)

    def verify(self, password_hash: str, password: str) -> bool:
        try:
            return self._hasher.verify(password_hash, password)
        except (VerifyMismatchError, InvalidHashError, VerificationError):
            return False
