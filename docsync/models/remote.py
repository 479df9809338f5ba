"""
Remote source models.

Dependencies: pydantic
System role: Contracts for the Google Drive adapter
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, SecretStr


class DriveCredentials(BaseModel):
    """Bearer credential for one user's Drive account, issued externally."""

    user_id: str = Field(description="Owning user identifier")
    access_token: SecretStr = Field(description="OAuth bearer token for the Drive API")


class RemoteFile(BaseModel):
    """File metadata as listed by the remote source."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    mime_type: str
    size: int | None = None
    web_view_link: str | None = None
    modified_at: datetime | None = None


class DownloadOutcome(BaseModel):
    """Per-file result of a batched download; exactly one of content/error is set."""

    file: RemoteFile
    content: bytes | None = None
    error: str | None = None
    error_type: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None
