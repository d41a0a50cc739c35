from __future__ import annotations

from dotenv import find_dotenv, load_dotenv
from library_service_libs.config import LibraryServiceSettings
from pydantic_settings import SettingsConfigDict

# Load .env file from repository root
load_dotenv(find_dotenv(".env"))


class Settings(LibraryServiceSettings):
    model_config = SettingsConfigDict(env_prefix="AUTHOR_SERVICE_", extra="ignore")

    SERVICE_NAME: str = "author_service"
    HTTP_PORT: int = 50052

    DATABASE_NAME: str = "library_author"
    DB_ENV_PREFIX: str = "AUTHOR_SERVICE"
    DB_DEV_PORT: int = 5433


settings = Settings()
