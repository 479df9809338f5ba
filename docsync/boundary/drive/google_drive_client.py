"""
Google Drive client for document discovery and download.

Lists a user's supported documents through the Drive v3 REST API and
downloads their content. Downloads are batched: members of a batch run
concurrently, batches run sequentially with a pause in between.

Dependencies: httpx, tenacity, docsync.configs
System role: Remote storage adapter (read-only)
"""

import asyncio
import logging
from datetime import datetime
from typing import Any, AsyncIterator, Awaitable, Callable, Sequence

import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from docsync.configs.google_drive import GoogleDriveSettings
from docsync.core.exceptions import (
    RemoteAuthError,
    RemoteNotFoundError,
    RemoteSourceError,
    RemoteTransientError,
)
from docsync.models.remote import DownloadOutcome, DriveCredentials, RemoteFile

logger = logging.getLogger(__name__)

SUPPORTED_MIME_TYPES: frozenset[str] = frozenset(
    {
        "application/pdf",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "application/msword",
        "application/vnd.ms-word",
        "text/plain",
        "text/markdown",
        "text/x-markdown",
    }
)

LIST_FIELDS = "nextPageToken, files(id, name, mimeType, size, webViewLink, modifiedTime)"
FILE_FIELDS = "id, name, mimeType, size, webViewLink, modifiedTime"


def build_list_query(mime_types: Sequence[str] = tuple(sorted(SUPPORTED_MIME_TYPES))) -> str:
    """Drive ``q`` expression matching non-trashed files of the given types."""
    clauses = " or ".join(f"mimeType='{mime}'" for mime in mime_types)
    return f"({clauses}) and trashed = false"


def _parse_remote_file(payload: dict[str, Any]) -> RemoteFile:
    size = payload.get("size")
    modified = payload.get("modifiedTime")
    return RemoteFile(
        id=payload["id"],
        name=payload.get("name") or payload["id"],
        mime_type=payload.get("mimeType", "application/octet-stream"),
        # Drive reports size as a decimal string
        size=int(size) if size is not None else None,
        web_view_link=payload.get("webViewLink"),
        modified_at=datetime.fromisoformat(modified.replace("Z", "+00:00")) if modified else None,
    )


class GoogleDriveClient:
    """Async Google Drive v3 client bound to per-call user credentials."""

    def __init__(
        self,
        settings: GoogleDriveSettings | None = None,
        client: httpx.AsyncClient | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """
        Initialize the Drive client.

        Args:
            settings: Drive settings (defaults read from the environment)
            client: Shared HTTP client; one is created and owned when omitted
            sleep: Coroutine used for the inter-batch pause
        """
        self._settings = settings or GoogleDriveSettings()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=self._settings.request_timeout)
        self._sleep = sleep

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    def _url(self, path: str) -> str:
        return f"{self._settings.api_base_url.rstrip('/')}/{path.lstrip('/')}"

    @staticmethod
    def _headers(credentials: DriveCredentials) -> dict[str, str]:
        return {"Authorization": f"Bearer {credentials.access_token.get_secret_value()}"}

    async def _get(
        self,
        credentials: DriveCredentials,
        path: str,
        params: dict[str, Any],
        file_id: str | None = None,
    ) -> httpx.Response:
        """
        Issue a GET and map failures onto the remote error taxonomy.

        Raises:
            RemoteAuthError: 401/403
            RemoteNotFoundError: 404
            RemoteTransientError: 5xx, timeout or transport failure
            RemoteSourceError: Any other non-2xx status
        """
        try:
            response = await self._client.get(
                self._url(path),
                params=params,
                headers=self._headers(credentials),
            )
        except httpx.TimeoutException as e:
            raise RemoteTransientError(
                f"Google Drive request timed out: {e}", file_id=file_id
            ) from e
        except httpx.TransportError as e:
            raise RemoteTransientError(
                f"Google Drive transport error: {e}", file_id=file_id
            ) from e

        status = response.status_code
        if response.is_success:
            return response
        if status in (401, 403):
            raise RemoteAuthError(
                "Google Drive rejected the access token", file_id=file_id, status_code=status
            )
        if status == 404:
            raise RemoteNotFoundError(
                f"Google Drive file {file_id} not found", file_id=file_id, status_code=status
            )
        if status >= 500:
            raise RemoteTransientError(
                f"Google Drive returned {status}", file_id=file_id, status_code=status
            )
        raise RemoteSourceError(
            f"Google Drive returned {status}: {response.text[:200]}",
            file_id=file_id,
            status_code=status,
        )

    async def _list_page(self, credentials: DriveCredentials, params: dict[str, Any]) -> dict[str, Any]:
        """Fetch one listing page, retrying transient Drive failures with backoff."""
        async for attempt in AsyncRetrying(
            retry=retry_if_exception_type(RemoteTransientError),
            stop=stop_after_attempt(self._settings.list_retry_attempts),
            wait=wait_exponential_jitter(initial=self._settings.list_retry_initial_wait, max=30, jitter=1),
            before_sleep=lambda retry_state: logger.warning(
                f"{__name__}:_list_page - Retry {retry_state.attempt_number}/"
                f"{self._settings.list_retry_attempts} after transient error"
            ),
            sleep=self._sleep,
            reraise=True,
        ):
            with attempt:
                response = await self._get(credentials, "files", params)
        return response.json()

    async def list_documents(self, credentials: DriveCredentials) -> AsyncIterator[RemoteFile]:
        """
        Iterate every supported document visible to the user.

        Pages are requested lazily; each page token is followed until Drive
        stops returning one. Filtering happens server-side through the ``q``
        expression and again client-side on the returned MIME types.

        Args:
            credentials: User bearer credential

        Yields:
            RemoteFile: One supported document

        Raises:
            RemoteSourceError: Listing failed (see ``_get`` for subclasses)
        """
        params: dict[str, Any] = {
            "q": build_list_query(),
            "fields": LIST_FIELDS,
            "pageSize": self._settings.page_size,
        }
        page = 0
        while True:
            payload = await self._list_page(credentials, params)
            page += 1

            for item in payload.get("files", []):
                if item.get("mimeType") in SUPPORTED_MIME_TYPES:
                    yield _parse_remote_file(item)

            token = payload.get("nextPageToken")
            if not token:
                break
            params["pageToken"] = token

        logger.debug(
            f"{__name__}:list_documents - Listing finished",
            extra={"user_id": credentials.user_id, "pages": page},
        )

    async def get_file(self, credentials: DriveCredentials, remote_file_id: str) -> RemoteFile:
        """Fetch metadata for a single file."""
        response = await self._get(
            credentials,
            f"files/{remote_file_id}",
            {"fields": FILE_FIELDS},
            file_id=remote_file_id,
        )
        return _parse_remote_file(response.json())

    async def download(self, credentials: DriveCredentials, remote_file_id: str) -> bytes:
        """
        Download the raw content of one file.

        Raises:
            RemoteSourceError: Download failed (see ``_get`` for subclasses)
        """
        response = await self._get(
            credentials,
            f"files/{remote_file_id}",
            {"alt": "media"},
            file_id=remote_file_id,
        )
        return response.content

    async def _download_outcome(
        self,
        credentials: DriveCredentials,
        file: RemoteFile,
    ) -> DownloadOutcome:
        try:
            content = await self.download(credentials, file.id)
        except RemoteSourceError as e:
            logger.warning(
                f"{__name__}:download_many - Download failed for {file.name}: {e}",
                extra={"file_id": file.id, "error_type": type(e).__name__},
            )
            return DownloadOutcome(file=file, error=e.message, error_type=type(e).__name__)
        return DownloadOutcome(file=file, content=content)

    async def download_many(
        self,
        credentials: DriveCredentials,
        files: Sequence[RemoteFile],
        concurrency: int | None = None,
    ) -> list[DownloadOutcome]:
        """
        Download files in fixed-size concurrent batches.

        A failed file produces an outcome with ``error`` set and never
        affects its siblings or later batches. The pause runs between
        batches only, never after the last one.

        Args:
            credentials: User bearer credential
            files: Files to download
            concurrency: Batch size (defaults to settings)

        Returns:
            list[DownloadOutcome]: One outcome per input file, in input order
        """
        batch_size = max(1, concurrency or self._settings.download_concurrency)
        outcomes: list[DownloadOutcome] = []

        for start in range(0, len(files), batch_size):
            if start:
                await self._sleep(self._settings.batch_pause_seconds)
            batch = files[start:start + batch_size]
            outcomes.extend(
                await asyncio.gather(*(self._download_outcome(credentials, f) for f in batch))
            )

        failed = sum(1 for outcome in outcomes if not outcome.ok)
        logger.info(
            f"{__name__}:download_many - Downloaded {len(outcomes) - failed}/{len(outcomes)} files",
            extra={"user_id": credentials.user_id, "failed": failed},
        )
        return outcomes
