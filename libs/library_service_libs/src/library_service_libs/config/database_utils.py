"""Database URL construction shared by the persistence-backed services."""

from __future__ import annotations

import os
import re
from urllib.parse import quote_plus


def build_database_url(
    database_name: str,
    service_env_var_prefix: str,
    is_production: bool = False,
    dev_host: str = "localhost",
    dev_port: int = 5432,
) -> str:
    """
    Build an asyncpg connection URL.

    Production reads ``{PREFIX}_DB_HOST``/``{PREFIX}_DB_PORT`` and requires
    credentials; development falls back to local defaults. Credentials come
    from ``LIBRARY_DB_USER``/``LIBRARY_DB_PASSWORD``.
    """
    user = os.getenv("LIBRARY_DB_USER", "library")
    password = os.getenv("LIBRARY_DB_PASSWORD")

    if is_production:
        host = os.getenv(f"{service_env_var_prefix}_DB_HOST")
        port = os.getenv(f"{service_env_var_prefix}_DB_PORT", "5432")
        if not host or not password:
            raise ValueError(
                f"Production database configuration incomplete: set "
                f"{service_env_var_prefix}_DB_HOST and LIBRARY_DB_PASSWORD"
            )
    else:
        host = os.getenv(f"{service_env_var_prefix}_DB_HOST", dev_host)
        port = os.getenv(f"{service_env_var_prefix}_DB_PORT", str(dev_port))
        password = password or "library"

    return (
        f"postgresql+asyncpg://{quote_plus(user)}:{quote_plus(password)}"
        f"@{host}:{port}/{database_name}"
    )


def database_url_masked(url: str) -> str:
    """Replace the password component of a URL for logging."""
    return re.sub(r"(://[^:/@]+:)[^@]+@", r"\1***@", url)
