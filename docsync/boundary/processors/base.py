"""
Processing backend interface.

A backend accepts raw document bytes and returns an opaque JSON result.
Both implementations talk HTTP through a shared httpx.AsyncClient and map
every failure onto ProcessingBackendError.

Dependencies: httpx
System role: Contract between the processing worker and external extractors
"""

import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx

from docsync.core.exceptions import ProcessingBackendError

logger = logging.getLogger(__name__)


class ProcessingBackend(ABC):
    """Abstract external document processor."""

    name: str = "backend"

    def __init__(self, client: httpx.AsyncClient | None = None, timeout: float = 30.0) -> None:
        """
        Args:
            client: Shared HTTP client; one is created and owned when omitted
            timeout: Per-request timeout in seconds
        """
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._timeout = timeout

    @abstractmethod
    async def submit(self, content: bytes, file_name: str, user_id: str) -> dict[str, Any]:
        """
        Send one document for processing.

        Args:
            content: Raw file bytes
            file_name: Display name (used for the multipart filename and type hints)
            user_id: Owning user

        Returns:
            dict: Backend result stored verbatim on the document

        Raises:
            ProcessingBackendError: Non-2xx, timeout, transport error or bad JSON
        """

    @abstractmethod
    async def check_health(self) -> bool:
        """Return True when the backend answers its health check."""

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """
        Send a request and raise ProcessingBackendError on any failure.

        Raises:
            ProcessingBackendError: Timeout, transport failure or non-2xx
        """
        kwargs.setdefault("timeout", self._timeout)
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            raise ProcessingBackendError(
                f"{self.name} did not respond within {kwargs['timeout']} seconds",
                backend=self.name,
            ) from e
        except httpx.TransportError as e:
            raise ProcessingBackendError(
                f"Cannot connect to {self.name} at {url}: {e}",
                backend=self.name,
            ) from e

        if not response.is_success:
            raise ProcessingBackendError(
                f"{self.name} request failed: {response.status_code} "
                f"{response.reason_phrase} - {response.text[:500]}",
                backend=self.name,
                status_code=response.status_code,
            )
        return response

    def _json(self, response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise ProcessingBackendError(
                f"{self.name} returned a non-JSON response",
                backend=self.name,
                status_code=response.status_code,
            ) from e

    async def _ping(self, url: str, timeout: float) -> bool:
        try:
            response = await self._client.get(url, timeout=timeout)
        except httpx.HTTPError as e:
            logger.warning(
                f"{__name__}:check_health - {self.name} unreachable: {type(e).__name__}",
                extra={"backend": self.name, "url": url},
            )
            return False
        if not response.is_success:
            logger.warning(
                f"{__name__}:check_health - {self.name} health returned {response.status_code}",
                extra={"backend": self.name},
            )
        return response.is_success
