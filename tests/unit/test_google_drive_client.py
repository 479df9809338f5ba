"""
Test suite for GoogleDriveClient.

Uses httpx.MockTransport to stand in for the Drive v3 API.

System role: Verification of the remote storage adapter
"""

from unittest.mock import AsyncMock

import httpx
import pytest

from docsync.boundary.drive.google_drive_client import (
    SUPPORTED_MIME_TYPES,
    GoogleDriveClient,
    build_list_query,
)
from docsync.configs.google_drive import GoogleDriveSettings
from docsync.core.exceptions import (
    RemoteAuthError,
    RemoteNotFoundError,
    RemoteSourceError,
    RemoteTransientError,
)

BASE_URL = "https://drive.test/drive/v3"


def make_client(handler, sleep=None, **overrides) -> GoogleDriveClient:
    settings = GoogleDriveSettings(api_base_url=BASE_URL, **overrides)
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return GoogleDriveClient(settings=settings, client=http, sleep=sleep or AsyncMock())


def drive_file(file_id: str, mime_type: str = "application/pdf", **extra) -> dict:
    payload = {
        "id": file_id,
        "name": f"{file_id}.pdf",
        "mimeType": mime_type,
        "size": "42",
        "webViewLink": f"https://drive.google.com/{file_id}",
        "modifiedTime": "2024-03-01T10:00:00.000Z",
    }
    payload.update(extra)
    return payload


class TestListQuery:
    """Test suite for build_list_query()."""

    def test_query_should_cover_allow_list_and_exclude_trash(self) -> None:
        query = build_list_query()

        assert query.endswith("and trashed = false")
        for mime in SUPPORTED_MIME_TYPES:
            assert f"mimeType='{mime}'" in query


class TestListDocuments:
    """Test suite for GoogleDriveClient.list_documents()."""

    async def test_list_should_follow_page_tokens(self, credentials) -> None:
        # Arrange
        seen_tokens = []

        def handler(request: httpx.Request) -> httpx.Response:
            token = request.url.params.get("pageToken")
            seen_tokens.append(token)
            assert request.headers["Authorization"] == "Bearer token-abc"
            if token is None:
                return httpx.Response(200, json={"files": [drive_file("a")], "nextPageToken": "p2"})
            return httpx.Response(200, json={"files": [drive_file("b")]})

        client = make_client(handler)

        # Act
        files = [f async for f in client.list_documents(credentials)]

        # Assert
        assert [f.id for f in files] == ["a", "b"]
        assert seen_tokens == [None, "p2"]
        assert files[0].size == 42
        assert files[0].modified_at.year == 2024

    async def test_list_should_drop_unsupported_types(self, credentials) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                json={
                    "files": [
                        drive_file("a"),
                        drive_file("img", mime_type="image/png"),
                        drive_file("md", mime_type="text/x-markdown"),
                    ]
                },
            )

        client = make_client(handler)

        files = [f async for f in client.list_documents(credentials)]

        assert [f.id for f in files] == ["a", "md"]

    async def test_list_should_raise_auth_error_on_401(self, credentials) -> None:
        client = make_client(lambda request: httpx.Response(401, json={"error": "invalid"}))

        with pytest.raises(RemoteAuthError):
            [f async for f in client.list_documents(credentials)]

    async def test_list_should_retry_transient_page_failures(self, credentials) -> None:
        # Arrange
        sleep = AsyncMock()
        attempts = []

        def handler(request: httpx.Request) -> httpx.Response:
            attempts.append(request)
            if len(attempts) < 3:
                return httpx.Response(503)
            return httpx.Response(200, json={"files": [drive_file("a")]})

        client = make_client(handler, sleep=sleep)

        # Act
        files = [f async for f in client.list_documents(credentials)]

        # Assert
        assert [f.id for f in files] == ["a"]
        assert len(attempts) == 3
        assert sleep.await_count == 2

    async def test_list_should_give_up_after_configured_attempts(self, credentials) -> None:
        sleep = AsyncMock()
        client = make_client(lambda request: httpx.Response(500), sleep=sleep, list_retry_attempts=2)

        with pytest.raises(RemoteTransientError):
            [f async for f in client.list_documents(credentials)]

        assert sleep.await_count == 1


class TestDownload:
    """Test suite for GoogleDriveClient.download() error mapping."""

    @pytest.mark.parametrize(
        ("status", "expected"),
        [
            (401, RemoteAuthError),
            (403, RemoteAuthError),
            (404, RemoteNotFoundError),
            (500, RemoteTransientError),
            (503, RemoteTransientError),
            (400, RemoteSourceError),
        ],
    )
    async def test_download_should_map_status_codes(self, credentials, status, expected) -> None:
        client = make_client(lambda request: httpx.Response(status, text="nope"))

        with pytest.raises(expected) as exc_info:
            await client.download(credentials, "file-1")

        assert exc_info.value.status_code == status
        assert exc_info.value.file_id == "file-1"

    async def test_download_timeout_should_be_transient(self, credentials) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        client = make_client(handler)

        with pytest.raises(RemoteTransientError):
            await client.download(credentials, "file-1")

    async def test_download_should_request_media(self, credentials) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/drive/v3/files/file-1"
            assert request.url.params["alt"] == "media"
            return httpx.Response(200, content=b"bytes!")

        client = make_client(handler)

        assert await client.download(credentials, "file-1") == b"bytes!"

    async def test_get_file_should_parse_metadata(self, credentials) -> None:
        client = make_client(lambda request: httpx.Response(200, json=drive_file("x")))

        remote = await client.get_file(credentials, "x")

        assert remote.id == "x"
        assert remote.mime_type == "application/pdf"


class TestDownloadMany:
    """Test suite for GoogleDriveClient.download_many() batching."""

    async def test_download_many_should_batch_and_isolate_failures(
        self, credentials, make_remote_file
    ) -> None:
        # Arrange
        sleep = AsyncMock()
        pauses_at_start: dict[str, int] = {}

        def handler(request: httpx.Request) -> httpx.Response:
            file_id = request.url.path.rsplit("/", 1)[-1]
            pauses_at_start[file_id] = sleep.await_count
            if file_id == "f4":
                return httpx.Response(500)
            return httpx.Response(200, content=file_id.encode())

        client = make_client(handler, sleep=sleep, batch_pause_seconds=1.0)
        files = [make_remote_file(f"f{i}") for i in range(1, 8)]

        # Act
        outcomes = await client.download_many(credentials, files, concurrency=3)

        # Assert
        assert [o.file.id for o in outcomes] == [f"f{i}" for i in range(1, 8)]
        assert [o.ok for o in outcomes] == [True, True, True, False, True, True, True]
        assert outcomes[3].error_type == "RemoteTransientError"
        assert outcomes[6].content == b"f7"
        # batches of 3, 3, 1 with a pause between batches only
        assert pauses_at_start == {
            "f1": 0, "f2": 0, "f3": 0,
            "f4": 1, "f5": 1, "f6": 1,
            "f7": 2,
        }
        assert sleep.await_count == 2
        sleep.assert_awaited_with(1.0)

    async def test_download_many_empty_should_not_pause(self, credentials) -> None:
        sleep = AsyncMock()
        client = make_client(lambda request: httpx.Response(200), sleep=sleep)

        outcomes = await client.download_many(credentials, [])

        assert outcomes == []
        sleep.assert_not_awaited()
