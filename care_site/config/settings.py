import logging

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Application settings loaded from environment variables or .env file."""

    # Supabase Configuration
    supabase_url: str = Field(..., description="URL for the Supabase project.")
    supabase_key: str = Field(..., description="Anon key for the Supabase project.")
    storage_bucket: str = Field(
        "images", description="Public storage bucket holding site images."
    )

    # Site Behaviour
    featured_branch: str = Field(
        "Pittsburgh",
        description="City of the branch pinned first when no row is flagged as featured.",
    )
    asset_cache_ttl_seconds: float = Field(
        300.0,
        ge=0,
        description="How long a folder listing stays cached (0 disables caching).",
    )
    verify_images: bool = Field(
        False, description="HEAD-check image URLs and substitute fallbacks on failure."
    )
    http_timeout_seconds: float = Field(
        10.0, gt=0, description="Timeout for image verification requests."
    )

    # Logging Configuration
    log_level: str = Field(
        "INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."
    )

    # Pydantic Settings Configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )


def load_settings() -> AppSettings:
    """Loads and validates application settings."""
    try:
        settings = AppSettings()
        log_level_upper = settings.log_level.upper()
        # Validate log_level even if loaded from .env
        if log_level_upper not in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
            logging.warning(
                f"Invalid LOG_LEVEL '{settings.log_level}' found in .env or default. Using INFO."
            )
            settings.log_level = "INFO"
        else:
            settings.log_level = log_level_upper
        return settings
    except Exception as e:
        logging.exception(f"Error loading application settings: {e}")
        raise SystemExit("Failed to load application settings. Exiting.")


settings: AppSettings = load_settings()
