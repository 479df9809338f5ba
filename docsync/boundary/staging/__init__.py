"""Local staging boundary: on-disk copies awaiting processing."""

from docsync.boundary.staging.local_staging import LocalStagingManager, sanitize_name

__all__ = ["LocalStagingManager", "sanitize_name"]
