"""Type-safe environment configuration using Pydantic Settings."""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application configuration loaded from environment variables.

    Every field has a default so the service starts with no environment.
    Numeric fields are range-checked at load time.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",  # Ignore extra fields in .env
        env_ignore_empty=True,
    )

    APP_NAME: str = Field(
        default="hn-top-stories",
        description="Application name"
    )

    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment"
    )

    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level"
    )

    LOG_JSON: bool = Field(
        default=False,
        description="Emit log records as JSON lines instead of text"
    )

    DEBUG: bool = Field(
        default=False,
        description="Debug mode flag"
    )

    API_TIMEOUT: float = Field(
        default=30.0,
        description="Timeout for each Hacker News API request in seconds",
        gt=0  # Must be greater than 0
    )

    # Remote API
    HN_API_BASE_URL: str = Field(
        default="https://hacker-news.firebaseio.com/v0",
        description="Base URL of the Hacker News Firebase API"
    )

    ITEM_VIEW_URL: str = Field(
        default="https://news.ycombinator.com/item?id=",
        description="Prefix of the item page link used when a story has no URL"
    )

    # Cache behaviour
    NUM_WANTED_STORIES: int = Field(
        default=30,
        description="Number of top stories to materialize and serve",
        gt=0
    )

    REFRESH_INTERVAL_SECONDS: float = Field(
        default=900.0,
        description="Seconds a loaded cache stays fresh; 0 disables periodic refresh",
        ge=0
    )

    REFRESH_RETRY_DELAY: float = Field(
        default=5.0,
        description="Delay before the first retry after a failed reload in seconds",
        gt=0
    )

    REFRESH_BACKOFF_FACTOR: float = Field(
        default=2.0,
        description="Multiplier applied to the retry delay per consecutive failure",
        ge=1
    )

    MAX_FETCH_WORKERS: int = Field(
        default=32,
        description="Upper bound on threads used to fetch stories concurrently",
        gt=0
    )

    # Server
    HOST: str = Field(
        default="0.0.0.0",
        description="Server host"
    )

    PORT: int = Field(
        default=8080,
        description="Server port",
        gt=0,
        lt=65536
    )

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the standard levels."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(
                f"LOG_LEVEL must be one of {valid_levels}, got '{v}'"
            )
        return v_upper

    @field_validator("HN_API_BASE_URL")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Store the base URL without a trailing slash."""
        return v.rstrip("/")

    @property
    def top_stories_url(self) -> str:
        """URL of the ranked top stories list."""
        return f"{self.HN_API_BASE_URL}/topstories.json"

    def item_url(self, story_id: int) -> str:
        """URL of a single item record."""
        return f"{self.HN_API_BASE_URL}/item/{story_id}.json"


# Singleton instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Get the application settings singleton.

    Loads settings from environment variables and .env file on first call.
    Subsequent calls return the cached instance.

    Returns:
        Settings: The application settings instance

    Raises:
        ValidationError: If environment variables hold invalid values
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset the settings singleton. Useful for testing."""
    global _settings
    _settings = None
