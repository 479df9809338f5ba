"""
LangExtract processing backend.

Uploads each document as multipart form data together with processing
options derived from the file extension. A health check runs before every
submission so an unreachable service fails fast with a clear reason.

Dependencies: httpx
System role: Default external document extractor
"""

import json
import logging
from typing import Any

import httpx

from docsync.boundary.processors.base import ProcessingBackend
from docsync.configs.processing import ProcessingSettings
from docsync.core.exceptions import ProcessingBackendError

logger = logging.getLogger(__name__)

UPLOAD_PATH = "/api/document/documents/upload/"


def _extension(file_name: str) -> str:
    return file_name.rsplit(".", 1)[-1].lower() if "." in file_name else ""


def build_processing_options(file_name: str) -> dict[str, Any]:
    """Processing options sent alongside the upload."""
    extension = _extension(file_name)
    return {
        "extractText": True,
        "analyzeStructure": True,
        "enableDocling": extension == "pdf",
        "schemaValidation": False,
        "fileType": extension,
        "autoDetectSchema": True,
        "skipSchemaValidation": True,
    }


class LangExtractBackend(ProcessingBackend):
    """Processing backend for the LangExtract document API."""

    name = "langextract"

    def __init__(self, settings: ProcessingSettings, client: httpx.AsyncClient | None = None) -> None:
        super().__init__(client=client, timeout=settings.request_timeout)
        self._base_url = settings.langextract_base_url.rstrip("/")
        self._enable_docling = settings.langextract_enable_docling
        self._health_timeout = settings.health_timeout

    async def check_health(self) -> bool:
        return await self._ping(f"{self._base_url}/health", self._health_timeout)

    async def submit(self, content: bytes, file_name: str, user_id: str) -> dict[str, Any]:
        if not await self.check_health():
            raise ProcessingBackendError(
                f"LangExtract API at {self._base_url} failed its health check",
                backend=self.name,
            )

        options = build_processing_options(file_name)
        logger.info(
            f"{__name__}:submit - Uploading {file_name}",
            extra={
                "bytes": len(content),
                "enable_docling": options["enableDocling"],
                "file_type": options["fileType"],
            },
        )

        response = await self._request(
            "POST",
            f"{self._base_url}{UPLOAD_PATH}",
            files={"file": (file_name, content)},
            data={
                "userId": user_id,
                "enable_docling": "true" if self._enable_docling else "false",
                "processing_options": json.dumps(options),
            },
        )
        payload = self._json(response)
        # Non-object payloads are wrapped so the stored result is always a mapping
        return payload if isinstance(payload, dict) else {"data": payload}
