from __future__ import annotations

import time
from typing import Any

import jwt
from library_core.domain_enums import TokenType

from services.auth_service.models_db import User
from services.auth_service.protocols import TokenIssuerProtocol

ALGORITHM = "HS256"


class JwtTokenIssuer(TokenIssuerProtocol):
    """HS256 access and refresh tokens sharing one claim layout.

    Claims: ``userId``, ``role``, ``email``, ``tokenType``, ``iss``, ``iat``, ``exp``.
    """

    def __init__(
        self,
        secret: str,
        issuer: str,
        access_ttl_seconds: int,
        refresh_ttl_seconds: int,
    ) -> None:
        self._secret = secret
        self._issuer = issuer
        self._ttls = {
            TokenType.ACCESS: access_ttl_seconds,
            TokenType.REFRESH: refresh_ttl_seconds,
        }

    @property
    def access_ttl_seconds(self) -> int:
        return self._ttls[TokenType.ACCESS]

    def issue(self, user: User, token_type: TokenType) -> str:
        now = int(time.time())
        payload = {
            "userId": str(user.id),
            "role": user.role.value,
            "email": user.email,
            "tokenType": token_type.value,
            "iss": self._issuer,
            "iat": now,
            "exp": now + self._ttls[token_type],
        }
        return jwt.encode(payload, self._secret, algorithm=ALGORITHM)

    def decode(self, token: str, expected_type: TokenType) -> dict[str, Any]:
        claims = jwt.decode(
            token,
            self._secret,
            algorithms=[ALGORITHM],
            issuer=self._issuer,
            options={"require": ["exp", "iat", "iss"]},
        )
        if claims.get("tokenType") != expected_type.value:
            raise jwt.InvalidTokenError(
                f"Expected {expected_type.value} token, got {claims.get('tokenType')!r}"
            )
        for claim in ("userId", "role", "email"):
            if not claims.get(claim):
                raise jwt.MissingRequiredClaimError(claim)
        return claims
