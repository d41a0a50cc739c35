from __future__ import annotations

from dotenv import find_dotenv, load_dotenv
from library_service_libs.config import LibraryServiceSettings
from pydantic import Field
from pydantic_settings import SettingsConfigDict

# Load .env file from repository root
load_dotenv(find_dotenv(".env"))


class Settings(LibraryServiceSettings):
    model_config = SettingsConfigDict(env_prefix="LOAN_SERVICE_", extra="ignore")

    SERVICE_NAME: str = "loan_service"
    HTTP_PORT: int = 50055

    DATABASE_NAME: str = "library_loan"
    DB_ENV_PREFIX: str = "LOAN_SERVICE"
    DB_DEV_PORT: int = 5436

    BOOK_SERVICE_URL: str = Field(default="http://localhost:50054")

    LOAN_PERIOD_DAYS: int = Field(default=7, ge=1)

    # Background retries of compensating stock increments
    RECONCILER_MAX_ATTEMPTS: int = Field(default=8, ge=1)
    RECONCILER_INITIAL_BACKOFF_SECONDS: float = 0.5
    RECONCILER_MAX_BACKOFF_SECONDS: float = 30.0


settings = Settings()
