"""
Test suite for dependency injection container.

Tests ServiceCache wiring, lifecycle and the header dependencies.

System role: Verification of DI container
"""

from unittest.mock import MagicMock, patch

import pytest
from fastapi import HTTPException

from docsync.api.deps import (
    ServiceCache,
    get_drive_credentials,
    get_scheduler,
    get_sync_service,
    get_user_id,
)
from docsync.application.scheduler import ProcessingScheduler
from docsync.application.services import DocumentSyncService
from docsync.boundary.processors import LangExtractBackend
from docsync.configs import Settings
from docsync.configs.scheduler import SchedulerSettings
from docsync.configs.staging import StagingSettings


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        staging=StagingSettings(root_dir=str(tmp_path / "staging")),
        scheduler=SchedulerSettings(autostart=False),
    )


@pytest.fixture
def cache(settings):
    with patch("docsync.api.deps.dependencies.get_async_session_factory", return_value=MagicMock()):
        yield ServiceCache(settings)


class TestServiceCache:
    """Test suite for ServiceCache."""

    async def test_cache_should_reuse_instances(self, cache: ServiceCache) -> None:
        # Act
        first = cache.sync_service
        second = cache.sync_service

        # Assert
        assert first is second
        assert isinstance(first, DocumentSyncService)
        assert first.registry is cache.registry
        assert first.staging is cache.staging
        await cache.aclose()

    async def test_worker_and_scheduler_should_share_collaborators(self, cache: ServiceCache) -> None:
        # Act
        scheduler = cache.scheduler

        # Assert
        assert isinstance(scheduler, ProcessingScheduler)
        assert scheduler.worker is cache.worker
        assert cache.worker.registry is cache.registry
        assert isinstance(cache.processing_backend, LangExtractBackend)
        await cache.aclose()

    async def test_aclose_should_stop_scheduler_and_forget_instances(self, cache: ServiceCache) -> None:
        # Arrange
        scheduler = cache.scheduler
        scheduler.start()

        # Act
        await cache.aclose()

        # Assert
        assert scheduler.status().is_running is False
        assert cache._scheduler is None
        assert cache._sync_service is None

    async def test_dependency_functions_should_read_from_cache(self, cache: ServiceCache) -> None:
        assert get_sync_service(cache=cache) is cache.sync_service
        assert get_scheduler(cache=cache) is cache.scheduler
        await cache.aclose()


class TestHeaderDependencies:
    """Test suite for the caller identity dependencies."""

    def test_get_user_id_should_strip(self) -> None:
        assert get_user_id(x_user_id="  user-1 ") == "user-1"

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_get_user_id_missing_should_raise_401(self, value) -> None:
        with pytest.raises(HTTPException) as exc_info:
            get_user_id(x_user_id=value)

        assert exc_info.value.status_code == 401

    def test_get_drive_credentials_should_combine_headers(self) -> None:
        credentials = get_drive_credentials(user_id="user-1", x_drive_access_token="token-abc")

        assert credentials.user_id == "user-1"
        assert credentials.access_token == "token-abc"

    def test_get_drive_credentials_without_token_should_raise_401(self) -> None:
        with pytest.raises(HTTPException) as exc_info:
            get_drive_credentials(user_id="user-1", x_drive_access_token=None)

        assert exc_info.value.status_code == 401
