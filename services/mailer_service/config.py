"""Configuration settings for the Mailer Service.

SMTP credentials are never passed as plain environment values; the settings
carry the paths of mounted secret files instead.
"""

from __future__ import annotations

from pathlib import Path

from dotenv import find_dotenv, load_dotenv
from library_service_libs.config import LibraryServiceSettings
from pydantic_settings import SettingsConfigDict

# Load .env file from repository root
load_dotenv(find_dotenv(".env"))


class Settings(LibraryServiceSettings):
    model_config = SettingsConfigDict(env_prefix="MAILER_SERVICE_", extra="ignore")

    SERVICE_NAME: str = "mailer_service"
    # Serves /metrics only
    HTTP_PORT: int = 9102

    CONSUMER_GROUP_ID: str = "mailer_service"
    REQUEUE_DELAY_SECONDS: float = 5.0

    # SMTP configuration
    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 587
    SMTP_USE_TLS: bool = True
    SMTP_TIMEOUT: int = 30
    SMTP_USERNAME_FILE: str = "/run/secrets/smtp_username"
    SMTP_PASSWORD_FILE: str = "/run/secrets/smtp_password"

    DEFAULT_FROM_NAME: str = "Library"

    TEMPLATE_DIR: str = str(Path(__file__).parent / "templates")


settings = Settings()
