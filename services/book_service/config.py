from __future__ import annotations

from dotenv import find_dotenv, load_dotenv
from library_service_libs.config import LibraryServiceSettings
from pydantic import Field
from pydantic_settings import SettingsConfigDict

# Load .env file from repository root
load_dotenv(find_dotenv(".env"))


class Settings(LibraryServiceSettings):
    model_config = SettingsConfigDict(env_prefix="BOOK_SERVICE_", extra="ignore")

    SERVICE_NAME: str = "book_service"
    HTTP_PORT: int = 50054

    DATABASE_NAME: str = "library_book"
    DB_ENV_PREFIX: str = "BOOK_SERVICE"
    DB_DEV_PORT: int = 5435

    # Referential integrity checks
    AUTHOR_SERVICE_URL: str = Field(default="http://localhost:50052")
    CATEGORY_SERVICE_URL: str = Field(default="http://localhost:50053")


settings = Settings()
