# bootcamp_api/core/config.py
# Settings are read from the environment (and an optional .env file) once at
# import time. Usage: from bootcamp_api.core.config import settings

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # -------------------------------------------------------------------------
    # MongoDB
    # -------------------------------------------------------------------------

    MONGO_URL: str = Field(
        default="mongodb://localhost:27017",
        description="MongoDB connection string"
    )

    MONGO_DB_NAME: str = Field(
        default="devcamper",
        description="Database holding the users, bootcamps, courses and reviews collections"
    )

    MONGO_TLS: bool = Field(
        default=False,
        description="Verify the server certificate against certifi's CA bundle"
    )

    MONGO_TRANSACTIONS: bool = Field(
        default=False,
        description="Run cascading deletes in a multi-document transaction (replica sets only)"
    )

    # -------------------------------------------------------------------------
    # Tokens
    # -------------------------------------------------------------------------

    JWT_SECRET_KEY: str = Field(
        default="dev-secret-key-change-in-production",
        min_length=16,
    )

    ALGORITHM: str = "HS256"

    JWT_EXPIRE_DAYS: int = Field(default=30, ge=1)

    JWT_COOKIE_EXPIRE_DAYS: int = Field(default=30, ge=1)

    # -------------------------------------------------------------------------
    # SMTP
    # -------------------------------------------------------------------------

    SMTP_SERVER: str = "smtp.mailtrap.io"
    SMTP_PORT: int = 465
    SMTP_USER: str = ""
    SMTP_PASSWORD: str = ""
    FROM_NAME: str = "DevCamper"
    FROM_EMAIL: str = "noreply@devcamper.io"

    # -------------------------------------------------------------------------
    # Geocoder (MapQuest geocoding API)
    # -------------------------------------------------------------------------

    GEOCODER_URL: str = "https://www.mapquestapi.com/geocoding/v1/address"
    GEOCODER_API_KEY: str = ""
    GEOCODER_TIMEOUT: float = 10.0

    # -------------------------------------------------------------------------
    # Uploads
    # -------------------------------------------------------------------------

    MAX_FILE_UPLOAD: int = Field(
        default=1_000_000,
        ge=1,
        description="Maximum photo size in bytes"
    )

    FILE_UPLOAD_PATH: str = Field(
        default="./public/uploads",
        description="Directory photos are written to and served from"
    )

    # -------------------------------------------------------------------------
    # Server
    # -------------------------------------------------------------------------

    ENVIRONMENT: Literal["development", "production", "test"] = "development"

    API_HOST: str = "0.0.0.0"

    API_PORT: int = Field(default=5000, ge=1, le=65535)

    CORS_ORIGINS: str = Field(
        default="http://localhost:3000",
        description="Allowed CORS origins (comma-separated)"
    )

    RATE_LIMIT: str = Field(
        default="100/10minutes",
        description="slowapi limit string applied to every route"
    )

    RATE_LIMIT_ENABLED: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=True,
        extra="ignore",
    )

    @property
    def cors_origins_list(self) -> list[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"


@lru_cache
def get_settings() -> Settings:
    """Parse and validate the environment once."""
    return Settings()


settings = get_settings()
