# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import settings
#   print(settings.SUPABASE_URL)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
#
# The edge-function names (PROJECT_URL, SERVICE_ROLE_KEY) are accepted as
# aliases so the same .env works for both deployments.
# =============================================================================

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings are accessed via the global `settings` instance.
    """

    # -------------------------------------------------------------------------
    # Supabase Configuration
    # -------------------------------------------------------------------------
    # These are required - app won't start without them

    SUPABASE_URL: str = Field(
        ...,
        validation_alias=AliasChoices("SUPABASE_URL", "PROJECT_URL"),
        description="Supabase project URL (e.g., https://xxx.supabase.co)"
    )

    SUPABASE_SERVICE_KEY: str = Field(
        ...,
        validation_alias=AliasChoices("SUPABASE_SERVICE_KEY", "SERVICE_ROLE_KEY"),
        description="Supabase service_role key (bypasses RLS)"
    )

    UPLOADS_BUCKET: str = Field(
        default="user-uploads",
        description="Storage bucket holding source photos"
    )

    ANIMATIONS_BUCKET: str = Field(
        default="animations",
        description="Storage bucket holding generated videos"
    )

    SIGNED_URL_TTL_SECONDS: int = Field(
        default=60 * 60,
        ge=60,
        description="Lifetime of signed photo URLs handed to the provider"
    )

    # -------------------------------------------------------------------------
    # fal.ai Configuration
    # -------------------------------------------------------------------------

    FAL_KEY: str = Field(
        ...,
        description="fal.ai API key"
    )

    FAL_BASE_URL: str = Field(
        default="https://fal.run",
        description="fal.ai synchronous endpoint root"
    )

    FAL_MODEL_PATH: str = Field(
        default="fal-ai/kling-video/v1.6/pro/image-to-video",
        description="Image-to-video model route"
    )

    FAL_MODEL_VERSION: str = Field(
        default="v1.6",
        description="Model label stored on animation rows"
    )

    FAL_TIMEOUT_SECONDS: float = Field(
        default=60.0,
        gt=0,
        description="HTTP timeout for provider and video download requests"
    )

    # -------------------------------------------------------------------------
    # Animation Job Settings
    # -------------------------------------------------------------------------

    ANIMATION_PROMPT: str = Field(
        default="Realistic old portrait animation",
        description="Prompt sent with every animation job"
    )

    ANIMATION_DURATION: Literal["5", "10"] = Field(
        default="5",
        description="Clip length in seconds (provider expects a string)"
    )

    ANIMATION_ASPECT_RATIO: Literal["16:9", "9:16", "1:1"] = Field(
        default="16:9",
        description="Output aspect ratio"
    )

    # 4s x 100 attempts = ~400s ceiling
    POLL_INTERVAL_SECONDS: float = Field(
        default=4.0,
        ge=0.0,
        description="Wait between status polls"
    )

    POLL_MAX_ATTEMPTS: int = Field(
        default=100,
        ge=1,
        description="Status polls before the job is recorded as pending"
    )

    RESUME_MAX_ATTEMPTS: int = Field(
        default=1,
        ge=1,
        description="Status polls per resume request"
    )

    PENDING_MAX_AGE_SECONDS: int = Field(
        default=60 * 60,
        ge=60,
        description="Age after which an unfinished pending animation is marked failed"
    )

    # -------------------------------------------------------------------------
    # Redis Configuration (for Celery)
    # -------------------------------------------------------------------------

    REDIS_URL: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL for Celery broker"
    )

    SWEEP_INTERVAL_SECONDS: float = Field(
        default=60.0,
        gt=0,
        description="How often Celery beat resumes pending animations"
    )

    SWEEP_BATCH_SIZE: int = Field(
        default=25,
        ge=1,
        le=500,
        description="Pending animations resumed per sweep"
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
        description="Enable debug mode (verbose logging, auto-reload)"
    )

    API_HOST: str = Field(
        default="0.0.0.0",
        description="Host to bind the API server to"
    )

    API_PORT: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Port for the API server"
    )

    # CORS origins (comma-separated string that gets parsed)
    CORS_ORIGINS: str = Field(
        default="http://localhost:3000",
        description="Allowed CORS origins (comma-separated)"
    )

    # -------------------------------------------------------------------------
    # File Upload Settings
    # -------------------------------------------------------------------------

    MAX_UPLOAD_SIZE_MB: int = Field(
        default=20,
        ge=1,
        le=500,
        description="Maximum photo upload size in MB"
    )

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
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
        Parse CORS_ORIGINS string into a list.

        Example: "http://localhost:3000, https://myapp.com" -> ["http://localhost:3000", "https://myapp.com"]
        """
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def max_upload_size_bytes(self) -> int:
        """Convert MB to bytes for file size validation."""
        return self.MAX_UPLOAD_SIZE_MB * 1024 * 1024

    @property
    def fal_submit_url(self) -> str:
        return f"{self.FAL_BASE_URL.rstrip('/')}/{self.FAL_MODEL_PATH.strip('/')}"

    @property
    def fal_status_url(self) -> str:
        return f"{self.fal_submit_url}/status"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached Settings instance.

    Using lru_cache ensures we only parse .env and validate once,
    not on every access.
    """
    return Settings()


# Global settings instance for easy importing
# Usage: from app.config import settings
settings = get_settings()
