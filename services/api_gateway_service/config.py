"""
Configuration for API Gateway Service.

Uses Pydantic settings for environment-based configuration. Back-end
service URLs point at each service's RPC listener.
"""

from __future__ import annotations

from dotenv import find_dotenv, load_dotenv
from library_service_libs.config import LibraryServiceSettings
from pydantic import AliasChoices, Field
from pydantic_settings import SettingsConfigDict

# Load .env file from repository root
load_dotenv(find_dotenv(".env"))


class Settings(LibraryServiceSettings):
    """Configuration settings for API Gateway Service."""

    model_config = SettingsConfigDict(
        env_prefix="API_GATEWAY_",
        case_sensitive=False,
        extra="ignore",
    )

    SERVICE_NAME: str = "api_gateway_service"
    HTTP_PORT: int = Field(default=8080, description="HTTP server port")

    # CORS configuration
    CORS_ORIGINS: list[str] = Field(
        default=["http://localhost:5173", "http://localhost:3000"],
        description="Allowed CORS origins",
    )
    CORS_ALLOW_CREDENTIALS: bool = True
    CORS_ALLOW_METHODS: list[str] = Field(
        default=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]
    )
    CORS_ALLOW_HEADERS: list[str] = Field(default=["*"])

    # Outbound RPC; RPC_TIMEOUT_SECONDS (10s) is also the request deadline
    HTTP_CLIENT_CONNECT_TIMEOUT_SECONDS: float = 5.0

    AUTH_SERVICE_URL: str = Field(
        default="http://localhost:50051",
        validation_alias=AliasChoices("API_GATEWAY_AUTH_SERVICE_URL", "AUTH_SERVICE_URL"),
    )
    AUTHOR_SERVICE_URL: str = Field(
        default="http://localhost:50052",
        validation_alias=AliasChoices("API_GATEWAY_AUTHOR_SERVICE_URL", "AUTHOR_SERVICE_URL"),
    )
    CATEGORY_SERVICE_URL: str = Field(
        default="http://localhost:50053",
        validation_alias=AliasChoices(
            "API_GATEWAY_CATEGORY_SERVICE_URL", "CATEGORY_SERVICE_URL"
        ),
    )
    BOOK_SERVICE_URL: str = Field(
        default="http://localhost:50054",
        validation_alias=AliasChoices("API_GATEWAY_BOOK_SERVICE_URL", "BOOK_SERVICE_URL"),
    )
    LOAN_SERVICE_URL: str = Field(
        default="http://localhost:50055",
        validation_alias=AliasChoices("API_GATEWAY_LOAN_SERVICE_URL", "LOAN_SERVICE_URL"),
    )
    USER_SERVICE_URL: str = Field(
        default="http://localhost:50056",
        validation_alias=AliasChoices("API_GATEWAY_USER_SERVICE_URL", "USER_SERVICE_URL"),
    )

    # Rate limiting: fixed one-minute window per client IP
    RATE_LIMIT_REQUESTS: int = Field(
        default=100, ge=1, description="Rate limit: requests per minute per client"
    )


# Global settings instance
settings = Settings()
