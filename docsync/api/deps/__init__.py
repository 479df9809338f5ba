"""API-specific dependencies."""

# Re-export common dependencies
from .dependencies import (
    ServiceCache,
    get_drive_credentials,
    get_processing_backend_dependency,
    get_scheduler,
    get_service_cache,
    get_sync_service,
    get_user_id,
)

__all__ = [
    "ServiceCache",
    "get_drive_credentials",
    "get_processing_backend_dependency",
    "get_scheduler",
    "get_service_cache",
    "get_sync_service",
    "get_user_id",
]
