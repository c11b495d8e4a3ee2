"""Application settings using Pydantic Settings for environment-based configuration."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Central configuration for statusfeed.

    All settings can be overridden via environment variables.
    Prefix is not used to allow plain env var names (e.g., API_USERNAME).

    Nothing here is read as ambient state by the timeline core: the CLI
    reads settings once and passes explicit values into the client,
    fetcher and formatter.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    debug: bool = False

    # Status service endpoints
    api_base_url: str = "https://twitter.com"
    friends_timeline_path: str = "/statuses/friends_timeline.json"
    replies_path: str = "/statuses/replies.json"
    update_path: str = "/statuses/update.json"
    include_replies: bool = True

    # Credential (sent as HTTP Basic auth on every request)
    api_username: str | None = None
    api_password: str | None = None

    # Posting
    source_label: str = "statusfeed"
    status_max_length: int = Field(default=140, ge=1)

    # Display
    clock_24h: bool = True
    relative_times: bool = True

    # Transport
    request_timeout_seconds: float = Field(default=30.0, gt=0.0, le=300.0)
    user_agent: str = "statusfeed/0.1.0"

    # Observability
    metrics_port: int = 8000

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def credentials_configured(self) -> bool:
        """Check if a username and password are both set."""
        return bool(self.api_username) and self.api_password is not None

    def _endpoint(self, path: str) -> str:
        return f"{self.api_base_url.rstrip('/')}/{path.lstrip('/')}"

    @property
    def friends_timeline_url(self) -> str:
        return self._endpoint(self.friends_timeline_path)

    @property
    def replies_url(self) -> str:
        return self._endpoint(self.replies_path)

    @property
    def update_url(self) -> str:
        return self._endpoint(self.update_path)


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are loaded only once.
    Clear cache with get_settings.cache_clear() if needed.
    """
    return Settings()
