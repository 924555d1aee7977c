"""Configuration management using Pydantic settings."""

from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, PostgresDsn, computed_field, field_validator
import os


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    # API Settings
    API_PREFIX: str = "/api"
    PROJECT_NAME: str = "Franchise Comms"
    VERSION: str = "1.0.0"

    # Supabase Auth: access tokens are HS256 JWTs signed with the project secret
    SUPABASE_URL: str = Field(default="http://localhost:54321")
    SUPABASE_JWT_SECRET: str = Field(default="dev-jwt-secret-change-in-production")
    SUPABASE_JWT_AUDIENCE: str = Field(default="authenticated")
    SUPABASE_SERVICE_ROLE_KEY: str = Field(default="dev-service-role-key")
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_COOKIE: str = Field(default="sb-access-token")

    # Supabase Storage
    STORAGE_BUCKET: str = Field(default="attachments")
    STORAGE_TIMEOUT_SECONDS: float = Field(default=30.0)
    SIGNED_URL_TTL_SECONDS: int = Field(default=3600, ge=1, le=3600)

    # Uploads
    MAX_UPLOAD_SIZE: int = Field(default=50 * 1024 * 1024)  # 50 MB
    ALLOWED_UPLOAD_TYPES: list[str] = Field(
        default=[
            "application/pdf",
            "image/jpeg",
            "image/png",
            "image/gif",
            "image/webp",
            "text/plain",
            "application/msword",
            "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
            "application/vnd.ms-excel",
            "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            "application/vnd.openxmlformats-officedocument.presentationml.presentation",
        ]
    )

    # Shared secret presented by the virus scanner on scan-result callbacks.
    # Callbacks are rejected while this is unset.
    SCANNER_TOKEN: Optional[str] = Field(default=None)

    # CORS
    BACKEND_CORS_ORIGINS: list[str] = Field(
        default=[
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ]
    )
    FRONTEND_URL: str = Field(default="http://localhost:3000")

    # Database
    POSTGRES_SERVER: str = Field(default="localhost")
    POSTGRES_USER: str = Field(default="franchisecomms")
    POSTGRES_PASSWORD: str = Field(default="local_dev_password")
    POSTGRES_DB: str = Field(default="franchisecomms")
    POSTGRES_PORT: int = Field(default=5432)

    @computed_field
    @property
    def DATABASE_URL(self) -> PostgresDsn | str:
        """Construct database URL from components."""
        # SQLALCHEMY_DATABASE_URI wins (Unix socket paths fail DSN validation)
        sqlalchemy_uri = os.getenv("SQLALCHEMY_DATABASE_URI")
        if sqlalchemy_uri:
            return sqlalchemy_uri

        return PostgresDsn.build(
            scheme="postgresql+asyncpg",
            username=self.POSTGRES_USER,
            password=self.POSTGRES_PASSWORD,
            host=self.POSTGRES_SERVER,
            port=self.POSTGRES_PORT,
            path=self.POSTGRES_DB,
        )

    # Logging
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FORMAT: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    # Environment settings
    ENVIRONMENT: str = Field(default="development")

    # Performance
    MAX_CONNECTIONS_COUNT: int = Field(default=10)

    @field_validator("SUPABASE_URL")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @computed_field
    @property
    def STORAGE_URL(self) -> str:
        """Base URL of the Supabase Storage REST API."""
        return f"{self.SUPABASE_URL}/storage/v1"


def get_settings() -> Settings:
    """Get settings instance."""
    return Settings()


_settings = None


def get_cached_settings() -> Settings:
    """Get cached settings instance."""
    global _settings
    if _settings is None:
        _settings = get_settings()
    return _settings

