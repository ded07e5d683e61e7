"""Application configuration settings."""
from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "Gym Program Builder"
    debug: bool = False
    log_json: bool = True  # False renders human-readable console logs

    # Workout program API
    api_base_url: str = "http://localhost:3001"
    api_prefix: str = "/api"
    api_timeout: float = 30.0  # seconds

    # List view
    programs_page_limit: int = 12

    # Editor defaults
    default_program_name: str = "New Program"
    default_block_name: str = "New Block"
    default_rest_period: int = 60  # seconds between sets

    # Notifications
    notify_success: bool = True

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
