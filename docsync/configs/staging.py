"""
Local staging configuration.

Dependencies: pydantic_settings
System role: Filesystem staging area configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class StagingSettings(BaseSettings):
    """Settings for the on-disk staging tree."""

    model_config = SettingsConfigDict(
        env_prefix="STAGING_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    root_dir: str = Field(
        default="./temp/google-drive-files",
        description="Root directory holding one subdirectory per user",
    )
    cleanup_max_age_days: int = Field(
        default=7,
        description="Default age threshold for the out-of-band cleanup sweep",
    )
