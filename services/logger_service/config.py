from __future__ import annotations

from dotenv import find_dotenv, load_dotenv
from library_service_libs.config import LibraryServiceSettings
from pydantic import Field
from pydantic_settings import SettingsConfigDict

# Load .env file from repository root
load_dotenv(find_dotenv(".env"))


class Settings(LibraryServiceSettings):
    model_config = SettingsConfigDict(env_prefix="LOGGER_SERVICE_", extra="ignore")

    SERVICE_NAME: str = "logger_service"
    # Serves /metrics only
    HTTP_PORT: int = 9101

    DATABASE_NAME: str = "library_logs"
    DB_ENV_PREFIX: str = "LOGGER_SERVICE"
    DB_DEV_PORT: int = 5437

    CONSUMER_GROUP_ID: str = "logger_service"
    REQUEUE_DELAY_SECONDS: float = 1.0

    # Rotating JSON-lines file sink
    RECORD_FILE_PATH: str = "logs/records.log"
    RECORD_FILE_MAX_BYTES: int = Field(default=10 * 1024 * 1024, ge=1)
    RECORD_FILE_BACKUP_COUNT: int = Field(default=5, ge=0)
    RECORD_FILE_MAX_AGE_DAYS: int = Field(default=30, ge=1)


settings = Settings()
