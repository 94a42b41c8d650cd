"""
Configuration settings for loadspec.

All settings are loaded from environment variables with sensible defaults.
Use .env file for local development.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Application ===
    APP_NAME: str = "loadspec"
    APP_VERSION: str = "0.1.0"
    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"  # development | production

    # === Parsing ===
    PARSER_MAX_INPUT_CHARS: int = Field(default=50_000, ge=1)  # Longer input is truncated, never rejected
    PARSE_CONFIDENCE_THRESHOLD: float = Field(default=0.1, ge=0.0, le=1.0)  # can_parse() gate
    DEFAULT_URL: str = "http://example.com"
    DEFAULT_VIRTUAL_USERS: int = Field(default=10, ge=1)
    DEFAULT_DURATION_SECONDS: int = Field(default=60, ge=1)
    DESCRIPTION_MAX_CHARS: int = Field(default=200, ge=1)

    # === Recovery ===
    RECOVERY_MAX_RETRIES: int = Field(default=3, ge=0)  # Per-session ceiling
    RETRY_BASE_DELAY_SECONDS: float = Field(default=1.0, gt=0.0)
    RETRY_BACKOFF_BASE: float = Field(default=2.0, gt=1.0)  # Exponential backoff multiplier
    RETRY_CONFIDENCE_DECAY: float = Field(default=0.8, gt=0.0, le=1.0)
    PROMPT_ENHANCEMENT_MAX_RETRIES: int = Field(default=2, ge=1)

    # === Feature Flags ===
    ENABLE_RETRY: bool = True
    ENABLE_FALLBACK: bool = True
    ENABLE_PROMPT_ENHANCEMENT: bool = True


# Global settings instance
settings = Settings()
