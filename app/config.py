# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import settings
#   print(settings.PORT)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
#
# Nothing here is required. A missing MONGODB_URI is reported when the
# database connection is attempted, not at startup.
# =============================================================================

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings are accessed via the global `settings` instance, or passed
    explicitly to `create_app()`.
    """

    # -------------------------------------------------------------------------
    # Server
    # -------------------------------------------------------------------------

    HOST: str = Field(
        default="0.0.0.0",
        description="Host to bind the API server to"
    )

    PORT: int = Field(
        default=3000,
        ge=1,
        le=65535,
        description="Port for the API server"
    )

    # -------------------------------------------------------------------------
    # CORS
    # -------------------------------------------------------------------------

    # Comma-separated string that gets parsed
    CORS_ORIGIN: str = Field(
        default="*",
        description="Allowed CORS origin(s), comma-separated"
    )

    # -------------------------------------------------------------------------
    # MongoDB
    # -------------------------------------------------------------------------

    MONGODB_URI: str | None = Field(
        default=None,
        description="MongoDB connection string (mongodb:// or mongodb+srv://)"
    )

    MONGODB_TIMEOUT_MS: int = Field(
        default=30000,
        ge=1,
        description="Server selection timeout for the startup ping"
    )

    # -------------------------------------------------------------------------
    # Filesystem
    # -------------------------------------------------------------------------

    UPLOADS_DIR: str = Field(
        default="uploads",
        description="Uploads directory, relative to the working directory"
    )

    PUBLIC_DIR: str = Field(
        default="public",
        description="Static files directory, relative to the working directory"
    )

    # -------------------------------------------------------------------------
    # Rate Limiting
    # -------------------------------------------------------------------------

    RATE_LIMIT_MAX: int = Field(
        default=100,
        ge=1,
        description="Max requests per window per client"
    )

    RATE_LIMIT_WINDOW_MINUTES: int = Field(
        default=15,
        ge=1,
        description="Length of the fixed rate-limit window"
    )

    RATE_LIMIT_IPV6_SUBNET: int = Field(
        default=56,
        ge=1,
        le=128,
        description="IPv6 prefix length used to group clients"
    )

    TRUST_PROXY_HOPS: int = Field(
        default=1,
        ge=0,
        description="Number of reverse proxies trusted in X-Forwarded-For"
    )

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------

    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Current environment"
    )

    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode (verbose logging)"
    )

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        # Empty values fall back to defaults (CORS_ORIGIN= means "*")
        env_ignore_empty=True,
        case_sensitive=True,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def cors_origins_list(self) -> list[str]:
        """
        Parse CORS_ORIGIN string into a list.

        Example: "http://localhost:5173, https://mindpath.app" -> ["http://localhost:5173", "https://mindpath.app"]
        """
        origins = [origin.strip() for origin in self.CORS_ORIGIN.split(",")]
        return [origin for origin in origins if origin] or ["*"]

    @property
    def uploads_path(self) -> Path:
        """Uploads directory resolved against the current working directory."""
        return Path.cwd() / self.UPLOADS_DIR

    @property
    def public_path(self) -> Path:
        """Static files directory resolved against the current working directory."""
        return Path.cwd() / self.PUBLIC_DIR

    @property
    def rate_limit_window_seconds(self) -> int:
        return self.RATE_LIMIT_WINDOW_MINUTES * 60


@lru_cache
def get_settings() -> Settings:
    """
    Get cached Settings instance.

    Parses .env and validates once per process.

    Returns:
        Settings: The application settings instance
    """
    return Settings()


# Global settings instance for easy importing
# Usage: from app.config import settings
settings = get_settings()
