"""
Shared test fixtures and configuration for entire test suite.

Provides: In-memory async registry, temp staging area, fake processing
backend, sample remote files and credentials
Dependencies: pytest, sqlalchemy, aiosqlite
System role: Test infrastructure and fixture management
"""

from datetime import datetime, timezone
from typing import Any
from unittest.mock import AsyncMock

import pytest

from docsync.boundary.processors.base import ProcessingBackend
from docsync.models.remote import DriveCredentials, RemoteFile


class FakeBackend(ProcessingBackend):
    """In-process processing backend with scripted responses."""

    name = "fake"

    def __init__(self) -> None:
        super().__init__(client=AsyncMock())
        self.calls: list[tuple[bytes, str, str]] = []
        self.failures: dict[str, Exception] = {}
        self.healthy = True

    async def submit(self, content: bytes, file_name: str, user_id: str) -> dict[str, Any]:
        self.calls.append((content, file_name, user_id))
        if file_name in self.failures:
            raise self.failures[file_name]
        return {"file": file_name, "length": len(content)}

    async def check_health(self) -> bool:
        return self.healthy


@pytest.fixture
async def session_factory():
    """
    Create in-memory SQLite async database for testing.

    Yields:
        async_sessionmaker: Session factory bound to a fresh schema
    """
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
    from sqlalchemy.pool import StaticPool

    from docsync.boundary.db.connection import create_tables
    from docsync.boundary.db.base import Base

    # Use SQLite in-memory database for tests
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await create_tables(engine)

    yield async_sessionmaker(
        engine,
        class_=AsyncSession,
        autoflush=False,
        expire_on_commit=False,
    )

    # Cleanup
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def registry(session_factory):
    """Provide a DocumentRegistry backed by the in-memory database."""
    from docsync.boundary.db.document_registry import DocumentRegistry

    return DocumentRegistry(session_factory)


@pytest.fixture
def staging(tmp_path):
    """Provide a LocalStagingManager rooted in a temp directory."""
    from docsync.boundary.staging.local_staging import LocalStagingManager

    return LocalStagingManager(root_dir=tmp_path / "staging")


@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def credentials() -> DriveCredentials:
    return DriveCredentials(user_id="user-1", access_token="token-abc")


@pytest.fixture
def make_remote_file():
    """Factory for RemoteFile instances with sensible defaults."""

    def _make(
        file_id: str,
        name: str | None = None,
        mime_type: str = "application/pdf",
        size: int | None = 10,
    ) -> RemoteFile:
        return RemoteFile(
            id=file_id,
            name=name or f"{file_id}.pdf",
            mime_type=mime_type,
            size=size,
            web_view_link=f"https://drive.google.com/file/d/{file_id}/view",
            modified_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        )

    return _make
