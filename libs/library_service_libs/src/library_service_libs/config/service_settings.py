"""
Shared settings base for library platform services.

Service settings subclass ``LibraryServiceSettings`` and set their own
``env_prefix`` (e.g. ``BOOK_SERVICE_``).
"""

from __future__ import annotations

from library_core.config_enums import Environment, LogWorkerMode
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .database_utils import build_database_url, database_url_masked


class LibraryServiceSettings(BaseSettings):
    model_config = SettingsConfigDict(extra="ignore")

    SERVICE_NAME: str = "library_service"
    ENVIRONMENT: Environment = Field(
        default=Environment.DEVELOPMENT, validation_alias="ENVIRONMENT"
    )
    LOG_LEVEL: str = "INFO"

    HTTP_HOST: str = "0.0.0.0"
    HTTP_PORT: int = 8000

    KAFKA_BOOTSTRAP_SERVERS: str = "localhost:9092"

    # Broker log pipeline
    LOG_WORKER_MODE: LogWorkerMode = LogWorkerMode.SINGLE
    LOG_WORKER_COUNT: int = Field(default=4, ge=1)
    LOG_BUFFER_SIZE: int = Field(default=100, ge=1)

    RPC_TIMEOUT_SECONDS: float = 10.0

    # Persistence; DB_URL wins over the composed URL when set
    DB_URL: str | None = None
    DATABASE_NAME: str = "library"
    DB_ENV_PREFIX: str = "LIBRARY"
    DB_DEV_PORT: int = 5432

    def is_production(self) -> bool:
        return self.ENVIRONMENT == Environment.PRODUCTION

    def is_development(self) -> bool:
        return self.ENVIRONMENT == Environment.DEVELOPMENT

    @property
    def DATABASE_URL(self) -> str:
        if self.DB_URL:
            return self.DB_URL
        return build_database_url(
            database_name=self.DATABASE_NAME,
            service_env_var_prefix=self.DB_ENV_PREFIX,
            is_production=self.is_production(),
            dev_port=self.DB_DEV_PORT,
        )

    def get_database_url_masked(self) -> str:
        return database_url_masked(self.DATABASE_URL)

    def __str__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"service={self.SERVICE_NAME}, "
            f"environment={self.ENVIRONMENT.value}, "
            f"secrets=***MASKED***)"
        )

    def __repr__(self) -> str:
        return self.__str__()
