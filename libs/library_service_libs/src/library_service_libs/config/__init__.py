"""Configuration utilities for library platform services."""

from .database_utils import build_database_url, database_url_masked
from .service_settings import LibraryServiceSettings

__all__ = ["LibraryServiceSettings", "build_database_url", "database_url_masked"]
