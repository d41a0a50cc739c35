"""Field types validated identically at the gateway and in the services."""

from __future__ import annotations

import re
from typing import Annotated

from pydantic import AfterValidator, Field

_PASSWORD_RULES = (
    (re.compile(r"[a-z]"), "a lowercase letter"),
    (re.compile(r"[A-Z]"), "an uppercase letter"),
    (re.compile(r"\d"), "a digit"),
    (re.compile(r"[^A-Za-z0-9]"), "a special character"),
)


def _check_password_strength(value: str) -> str:
    missing = [label for pattern, label in _PASSWORD_RULES if not pattern.search(value)]
    if missing:
        raise ValueError(f"password must contain {', '.join(missing)}")
    return value


Password = Annotated[
    str, Field(min_length=8, max_length=128), AfterValidator(_check_password_strength)
]
OtpCode = Annotated[str, Field(min_length=6, max_length=6, pattern=r"^\d{6}$")]
Username = Annotated[str, Field(min_length=3, max_length=50)]
BookTitle = Annotated[str, Field(min_length=3, max_length=255)]
