"""Shared infrastructure for library platform services."""

from .kafka_client import KafkaBus
from .quart_app import LibraryServiceApp
from .redis_client import RedisClient

__all__ = ["KafkaBus", "LibraryServiceApp", "RedisClient"]
