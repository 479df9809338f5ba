"""
Google Drive source configuration.

Settings for the remote source adapter: API endpoints, paging and the
download batching policy used during discovery syncs.

Dependencies: pydantic_settings
System role: Remote storage adapter configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class GoogleDriveSettings(BaseSettings):
    """Settings for Google Drive listing and downloads."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_DRIVE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    api_base_url: str = Field(
        default="https://www.googleapis.com/drive/v3",
        description="Google Drive v3 REST base URL",
    )
    page_size: int = Field(
        default=100,
        description="Files requested per listing page (Drive caps this at 1000)",
    )
    request_timeout: float = Field(
        default=60.0,
        description="Per-request timeout in seconds for listing and downloads",
    )
    download_concurrency: int = Field(
        default=3,
        description="Number of files downloaded concurrently inside one batch",
    )
    batch_pause_seconds: float = Field(
        default=1.0,
        description="Pause between download batches to respect upstream rate limits",
    )
    list_retry_attempts: int = Field(
        default=3,
        ge=1,
        description="Attempts per listing page when Drive fails transiently",
    )
    list_retry_initial_wait: float = Field(
        default=1.0,
        description="First backoff in seconds between listing page attempts",
    )
