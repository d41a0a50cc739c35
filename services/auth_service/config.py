from __future__ import annotations

from dotenv import find_dotenv, load_dotenv
from library_service_libs.config import LibraryServiceSettings
from pydantic import Field, SecretStr
from pydantic_settings import SettingsConfigDict

# Load .env file from repository root
load_dotenv(find_dotenv(".env"))


class Settings(LibraryServiceSettings):
    model_config = SettingsConfigDict(env_prefix="AUTH_SERVICE_", extra="ignore")

    SERVICE_NAME: str = "auth_service"
    HTTP_PORT: int = 50051

    # The identity database is shared read-only with the User Service
    DATABASE_NAME: str = "library_identity"
    DB_ENV_PREFIX: str = "IDENTITY"
    DB_DEV_PORT: int = 5432

    REDIS_URL: str = "redis://localhost:6379/0"

    # JWT configuration
    JWT_SECRET: SecretStr = Field(
        default=SecretStr("dev-secret-change-me"),
        description="HS256 signing secret for access and refresh tokens",
    )
    JWT_ISSUER: str = "library-auth-service"
    JWT_ACCESS_TOKEN_EXPIRES_SECONDS: int = 15 * 60
    JWT_REFRESH_TOKEN_EXPIRES_SECONDS: int = 60 * 60

    OTP_TTL_SECONDS: int = 600

    # Argon2id cost; lower it in tests
    PASSWORD_HASH_TIME_COST: int = Field(default=3, ge=1)


settings = Settings()
