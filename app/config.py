# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# Environment-driven settings shared by the API process and the Celery
# workers, loaded once with pydantic-settings.
#
# Usage:
#   from app.config import settings
#   print(settings.SUPABASE_URL)
#
# Values come from the process environment first, then from `.env` in the
# working directory.
# =============================================================================

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Settings for the Trayve Media API and its workers.

    Only the Supabase credentials are required; everything else has a
    development default.
    """

    # -------------------------------------------------------------------------
    # Supabase
    # -------------------------------------------------------------------------

    SUPABASE_URL: str = Field(
        ...,
        description="Supabase project URL (e.g., https://xxx.supabase.co)"
    )

    SUPABASE_SERVICE_KEY: str = Field(
        ...,
        description="Supabase service_role key; ownership is checked in services"
    )

    # -------------------------------------------------------------------------
    # Task Queue
    # -------------------------------------------------------------------------

    REDIS_URL: str = Field(
        default="redis://localhost:6379/0",
        description="Redis URL used as Celery broker and result backend"
    )

    TASK_RESULT_TTL_SECONDS: int = Field(
        default=3600,
        ge=60,
        description="How long finished task results stay pollable"
    )

    # -------------------------------------------------------------------------
    # Background Removal
    # -------------------------------------------------------------------------

    BG_REMOVAL_API_URL: str = Field(
        default="https://fal.run/fal-ai/imageutils/rembg",
        description="HTTP endpoint that removes the background of an image URL"
    )

    FAL_KEY: str | None = Field(
        default=None,
        description="API key for the background removal provider"
    )

    BG_REMOVAL_TIMEOUT_SECONDS: float = Field(
        default=120.0,
        gt=0,
        le=600,
        description="Timeout for one provider request"
    )

    BG_REMOVAL_MAX_RETRIES: int = Field(
        default=3,
        ge=0,
        le=10,
        description="Worker retries after a provider timeout or 5xx"
    )

    BG_REMOVAL_RETRY_DELAY_SECONDS: int = Field(
        default=30,
        ge=1,
        description="Delay between provider retries"
    )

    # -------------------------------------------------------------------------
    # On-Demand Upscale
    # -------------------------------------------------------------------------

    UPSCALE_API_URL: str = Field(
        default="https://api.replicate.com/v1/models/philz1337x/crystal-upscaler/predictions",
        description="Replicate endpoint that creates an upscale prediction"
    )

    REPLICATE_API_TOKEN: str | None = Field(
        default=None,
        description="API token for the upscale provider"
    )

    UPSCALE_TIMEOUT_SECONDS: float = Field(
        default=240.0,
        gt=0,
        le=900,
        description="How long to wait for one prediction to finish"
    )

    UPSCALE_POLL_INTERVAL_SECONDS: float = Field(
        default=2.0,
        gt=0,
        description="Delay between prediction status checks"
    )

    UPSCALE_MAX_RETRIES: int = Field(
        default=1,
        ge=0,
        le=5,
        description="Worker retries after a provider timeout or 5xx"
    )

    UPSCALE_RETRY_DELAY_SECONDS: int = Field(
        default=30,
        ge=1,
        description="Delay between upscale provider retries"
    )

    # -------------------------------------------------------------------------
    # Shop Identification
    # -------------------------------------------------------------------------
    # The embedding proxy verifies the Shopify session and forwards the
    # shop domain in this header.

    SHOP_DOMAIN_HEADER: str = Field(
        default="X-Shopify-Shop-Domain",
        description="Request header carrying the authenticated shop domain"
    )

    # -------------------------------------------------------------------------
    # Server
    # -------------------------------------------------------------------------

    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Deployment environment"
    )

    DEBUG: bool = Field(
        default=False,
        description="Verbose logging and auto-reload"
    )

    API_HOST: str = Field(default="0.0.0.0")

    API_PORT: int = Field(default=8000, ge=1, le=65535)

    CORS_ORIGINS: str = Field(
        default="https://admin.shopify.com",
        description="Allowed CORS origins in production (comma-separated)"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=True,
        extra="ignore",
    )

    @property
    def cors_origins_list(self) -> list[str]:
        """CORS_ORIGINS split on commas, blanks dropped."""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"


@lru_cache
def get_settings() -> Settings:
    """Parse and validate the environment once per process."""
    return Settings()


settings = get_settings()
