"""
Unified application settings.

Aggregates all configuration modules into a single Settings class.
Provides dependency injection factory for FastAPI.

Dependencies: All config modules
System role: Central configuration aggregator for the application
"""

from functools import lru_cache

from docsync.configs.base import BaseSettings
from docsync.configs.database import DatabaseSettings
from docsync.configs.google_drive import GoogleDriveSettings
from docsync.configs.processing import ProcessingSettings
from docsync.configs.scheduler import SchedulerSettings
from docsync.configs.staging import StagingSettings


class Settings(BaseSettings):
    """Unified application settings aggregating all config modules."""

    database: DatabaseSettings = DatabaseSettings()
    google_drive: GoogleDriveSettings = GoogleDriveSettings()
    staging: StagingSettings = StagingSettings()
    processing: ProcessingSettings = ProcessingSettings()
    scheduler: SchedulerSettings = SchedulerSettings()


@lru_cache
def get_settings() -> Settings:
    """
    Get application settings singleton.

    Returns Settings instance, cached for dependency injection.
    Environment variables loaded once at startup.

    Returns:
        Settings: Application settings instance

    Usage:
        from docsync.configs import get_settings
        settings = get_settings()
    """
    return Settings()
