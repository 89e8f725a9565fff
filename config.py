"""Application configuration."""

from functools import lru_cache
from typing import Optional
from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Client settings loaded from environment."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    environment: str = "development"

    # Trello
    trello_api_key: Optional[SecretStr] = None
    trello_user_token: Optional[SecretStr] = None
    trello_base_url: str = "https://api.trello.com/1"
    request_timeout_seconds: float = 30.0

    # Synchronization
    submit_delay_seconds: float = 0.1
    refresh_throttle_seconds: Optional[float] = None


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
