"""
Dependency injection container.

Factory functions for FastAPI dependencies. Long-lived collaborators
(registry, HTTP clients, staging, worker, scheduler) are built lazily
once per process and held in ServiceCache.

Dependencies: docsync.configs, docsync.application, docsync.boundary
System role: DI container for service injection
"""

from fastapi import Depends, Header, HTTPException, status

from docsync.application.scheduler import ProcessingScheduler
from docsync.application.services import DocumentSyncService, ProcessingWorker
from docsync.boundary.db.connection import get_async_session_factory
from docsync.boundary.db.document_registry import DocumentRegistry
from docsync.boundary.drive.google_drive_client import GoogleDriveClient
from docsync.boundary.processors import ProcessingBackend, get_processing_backend
from docsync.boundary.staging.local_staging import LocalStagingManager
from docsync.configs import Settings, get_settings
from docsync.models.remote import DriveCredentials


class ServiceCache:
    """Container for cached service instances."""

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings
        self._registry = None
        self._drive_client = None
        self._staging = None
        self._processing_backend = None
        self._worker = None
        self._scheduler = None
        self._sync_service = None

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            self._settings = get_settings()
        return self._settings

    @property
    def registry(self) -> DocumentRegistry:
        """Get cached document registry."""
        if self._registry is None:
            self._registry = DocumentRegistry(get_async_session_factory())
        return self._registry

    @property
    def drive_client(self) -> GoogleDriveClient:
        """Get cached Google Drive client."""
        if self._drive_client is None:
            self._drive_client = GoogleDriveClient(self.settings.google_drive)
        return self._drive_client

    @property
    def staging(self) -> LocalStagingManager:
        """Get cached staging manager."""
        if self._staging is None:
            self._staging = LocalStagingManager(self.settings.staging)
        return self._staging

    @property
    def processing_backend(self) -> ProcessingBackend:
        """Get cached processing backend selected by configuration."""
        if self._processing_backend is None:
            self._processing_backend = get_processing_backend(self.settings.processing)
        return self._processing_backend

    @property
    def worker(self) -> ProcessingWorker:
        """Get cached processing worker."""
        if self._worker is None:
            self._worker = ProcessingWorker(
                registry=self.registry,
                staging=self.staging,
                backend=self.processing_backend,
                settings=self.settings.processing,
            )
        return self._worker

    @property
    def scheduler(self) -> ProcessingScheduler:
        """Get cached processing scheduler."""
        if self._scheduler is None:
            self._scheduler = ProcessingScheduler(self.worker, self.settings.scheduler)
        return self._scheduler

    @property
    def sync_service(self) -> DocumentSyncService:
        """Get cached document sync service."""
        if self._sync_service is None:
            self._sync_service = DocumentSyncService(
                registry=self.registry,
                drive=self.drive_client,
                staging=self.staging,
            )
        return self._sync_service

    async def aclose(self) -> None:
        """Stop the scheduler and close HTTP clients, then forget all instances."""
        if self._scheduler is not None:
            await self._scheduler.shutdown()
        if self._drive_client is not None:
            await self._drive_client.aclose()
        if self._processing_backend is not None:
            await self._processing_backend.aclose()
        self.clear()

    def clear(self) -> None:
        """Clear all cached instances."""
        self._registry = None
        self._drive_client = None
        self._staging = None
        self._processing_backend = None
        self._worker = None
        self._scheduler = None
        self._sync_service = None


# Global service cache
_service_cache = ServiceCache()


def get_service_cache() -> ServiceCache:
    """Get service cache singleton."""
    return _service_cache


def get_sync_service(
    cache: ServiceCache = Depends(get_service_cache),
) -> DocumentSyncService:
    return cache.sync_service


def get_scheduler(
    cache: ServiceCache = Depends(get_service_cache),
) -> ProcessingScheduler:
    return cache.scheduler


def get_processing_backend_dependency(
    cache: ServiceCache = Depends(get_service_cache),
) -> ProcessingBackend:
    return cache.processing_backend


def get_user_id(x_user_id: str | None = Header(default=None)) -> str:
    """
    Resolve the calling user from the X-User-Id header.

    Raises:
        HTTPException(401): Header missing or blank
    """
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="X-User-Id header is required",
        )
    return x_user_id.strip()


def get_drive_credentials(
    user_id: str = Depends(get_user_id),
    x_drive_access_token: str | None = Header(default=None),
) -> DriveCredentials:
    """
    Build Drive credentials from the X-Drive-Access-Token header.

    Raises:
        HTTPException(401): Token missing
    """
    if not x_drive_access_token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="X-Drive-Access-Token header is required",
        )
    return DriveCredentials(user_id=user_id, access_token=x_drive_access_token)
