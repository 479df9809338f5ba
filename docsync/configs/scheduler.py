"""
Scheduler configuration.

Dependencies: pydantic_settings
System role: Periodic processing timer configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class SchedulerSettings(BaseSettings):
    """Settings for the periodic batch driver timer."""

    model_config = SettingsConfigDict(
        env_prefix="SCHEDULER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    interval_seconds: float = Field(
        default=300.0,
        gt=0,
        description="Seconds between scheduled batch driver runs",
    )
    autostart: bool = Field(
        default=True,
        description="Start the scheduler during application startup",
    )
