"""
Google Drive boundary.

Exports:
  - GoogleDriveClient: Listing, metadata and batched downloads
  - SUPPORTED_MIME_TYPES: Document types picked up by discovery
"""

from docsync.boundary.drive.google_drive_client import (
    SUPPORTED_MIME_TYPES,
    GoogleDriveClient,
    build_list_query,
)

__all__ = [
    "GoogleDriveClient",
    "SUPPORTED_MIME_TYPES",
    "build_list_query",
]
