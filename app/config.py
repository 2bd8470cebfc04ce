# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import settings
#   print(settings.AIRTABLE_BASE_ID)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
#
# Airtable and Supabase credentials are optional at startup. Endpoints that
# need them report a "not configured" error instead of the app refusing to boot,
# so the public content pages keep working without any backing store.
# =============================================================================

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses pydantic-settings to:
    - Automatically load from .env file
    - Validate types and constraints
    - Provide sensible defaults for development

    All settings are accessed via the global `settings` instance.
    """

    # -------------------------------------------------------------------------
    # Airtable Configuration
    # -------------------------------------------------------------------------
    # AIRTABLE_PAT is accepted as an alias for the API key

    AIRTABLE_API_KEY: str = Field(
        default="",
        validation_alias=AliasChoices("AIRTABLE_API_KEY", "AIRTABLE_PAT"),
        description="Airtable Personal Access Token (PAT)"
    )

    AIRTABLE_BASE_ID: str = Field(
        default="",
        description="Airtable base ID (e.g., appXXXXXXXXXXXXXX)"
    )

    AIRTABLE_API_URL: str = Field(
        default="https://api.airtable.com/v0",
        description="Airtable REST API root"
    )

    # Airtable allows 5 requests/second per base; 220ms keeps us under it
    AIRTABLE_MIN_SPACING_MS: int = Field(
        default=220,
        ge=0,
        description="Minimum gap between Airtable requests in milliseconds"
    )

    AIRTABLE_MAX_RETRIES: int = Field(
        default=2,
        ge=0,
        le=10,
        description="Retries allowed for 429 and 5xx responses (shared budget)"
    )

    AIRTABLE_RATE_LIMIT_WAIT_SECONDS: float = Field(
        default=30.0,
        ge=0,
        description="Fixed wait after a 429 response"
    )

    AIRTABLE_BACKOFF_BASE_MS: int = Field(
        default=500,
        ge=0,
        description="First backoff delay after a 5xx response (doubles per attempt)"
    )

    # -------------------------------------------------------------------------
    # Supabase Configuration
    # -------------------------------------------------------------------------

    SUPABASE_URL: str = Field(
        default="",
        description="Supabase project URL (e.g., https://xxx.supabase.co)"
    )

    SUPABASE_ANON_KEY: str = Field(
        default="",
        description="Supabase anon/public API key (read access via RLS)"
    )

    SUPABASE_SERVICE_KEY: str = Field(
        default="",
        description="Supabase service_role key (migration script only)"
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

    CACHE_CONTROL: str = Field(
        default="s-maxage=60, stale-while-revalidate=300",
        description="Cache-Control header for the public Airtable proxy endpoints"
    )

    # -------------------------------------------------------------------------
    # Security / Mocked Auth
    # -------------------------------------------------------------------------

    SECRET_KEY: str = Field(
        default="dev-secret-key-change-in-production",
        min_length=16,
        description="Secret key for signing member session tokens"
    )

    ACCESS_TOKEN_TTL_MINUTES: int = Field(
        default=480,
        ge=1,
        description="Lifetime of a member session token"
    )

    DEMO_MEMBER_EMAIL: str = Field(
        default="demo@clinicalrxq.com",
        description="The only email the mocked auth store accepts"
    )

    DEMO_MEMBER_PASSWORD: str = Field(
        default="password",
        description="Password for the demo member"
    )

    # CORS origins (comma-separated string that gets parsed)
    CORS_ORIGINS: str = Field(
        default="http://localhost:3000",
        description="Allowed CORS origins (comma-separated)"
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
    def airtable_configured(self) -> bool:
        """Both the PAT and the base ID are present."""
        return bool(self.AIRTABLE_API_KEY and self.AIRTABLE_BASE_ID)

    @property
    def supabase_configured(self) -> bool:
        """URL and anon key are present."""
        return bool(self.SUPABASE_URL and self.SUPABASE_ANON_KEY)

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

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

    Returns:
        Settings: The application settings instance
    """
    return Settings()


# Global settings instance for easy importing
# Usage: from app.config import settings
settings = get_settings()
