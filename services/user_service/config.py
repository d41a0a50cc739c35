from __future__ import annotations

from dotenv import find_dotenv, load_dotenv
from library_service_libs.config import LibraryServiceSettings
from pydantic_settings import SettingsConfigDict

# Load .env file from repository root
load_dotenv(find_dotenv(".env"))


class Settings(LibraryServiceSettings):
    model_config = SettingsConfigDict(env_prefix="USER_SERVICE_", extra="ignore")

    SERVICE_NAME: str = "user_service"
    HTTP_PORT: int = 50056

    # Reads the identity database owned by the Auth Service
    DATABASE_NAME: str = "library_identity"
    DB_ENV_PREFIX: str = "IDENTITY"
    DB_DEV_PORT: int = 5432


settings = Settings()
