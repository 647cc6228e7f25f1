"""Application configuration."""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Importer settings.

    Environment variables will be loaded and validated using Pydantic.
    Command line flags override these per run.
    """

    app_name: str = "content-importer"
    version: str = "0.1.0"

    # Output Settings
    OUTPUT_FOLDER: str = "."
    ASSETS_FOLDER: str = "assets"
    DRAFTS_FOLDER: str = "drafts"

    # Fetch Settings
    CACHE_DURATION: str = "24h"
    CACHE_DIRECTORY: str = ".cache"
    FETCH_CONCURRENCY: int = Field(default=10, ge=1)
    FETCH_TIMEOUT: int = Field(default=30, ge=1)
    FETCH_RETRIES: int = Field(default=2, ge=0)
    USER_AGENT: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    )

    # Persist Settings
    GITHUB_TOKEN: str | None = None
    GITHUB_API_URL: str = "https://api.github.com"

    # Logging Settings
    LOG_LEVEL: str = "INFO"
    JSON_LOGS: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @field_validator("LOG_LEVEL")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        """Accept log levels in any case."""
        return value.upper()


# Create settings instance
settings = Settings()
