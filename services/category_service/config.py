from __future__ import annotations

from dotenv import find_dotenv, load_dotenv
from library_service_libs.config import LibraryServiceSettings
from pydantic_settings import SettingsConfigDict

# Load .env file from repository root
load_dotenv(find_dotenv(".env"))


class Settings(LibraryServiceSettings):
    model_config = SettingsConfigDict(env_prefix="CATEGORY_SERVICE_", extra="ignore")

    SERVICE_NAME: str = "category_service"
    HTTP_PORT: int = 50053

    DATABASE_NAME: str = "library_category"
    DB_ENV_PREFIX: str = "CATEGORY_SERVICE"
    DB_DEV_PORT: int = 5434


settings = Settings()
