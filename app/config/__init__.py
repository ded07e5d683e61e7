"""Application configuration module.

- **settings.py**: Environment-based settings (Pydantic BaseSettings)
  - API base URL, prefix and timeout for the workout program API
  - Editor defaults (program/block names, rest period) and list page size
  - Loaded from .env file via pydantic-settings
"""
from app.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
