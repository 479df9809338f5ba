"""
Langflow processing backend.

Two calls per document: upload the file to Langflow's file store, then run
the configured flow with the uploaded path injected into the file
component through ``tweaks``. The chat message text is lifted out of the
run response for convenience; the full response is kept alongside it.

Dependencies: httpx
System role: Alternative external document extractor
"""

import logging
from typing import Any

import httpx

from docsync.boundary.processors.base import ProcessingBackend
from docsync.configs.processing import ProcessingSettings
from docsync.core.exceptions import ProcessingBackendError
from docsync.observability.log_utils import log_with_context

logger = logging.getLogger(__name__)


def extract_message(run_response: dict[str, Any]) -> str | None:
    """Pull ``outputs[0].outputs[0].results.message.data.text`` if present."""
    try:
        return run_response["outputs"][0]["outputs"][0]["results"]["message"]["data"]["text"]
    except (KeyError, IndexError, TypeError):
        return None


class LangflowBackend(ProcessingBackend):
    """Processing backend that runs a Langflow flow per document."""

    name = "langflow"

    def __init__(self, settings: ProcessingSettings, client: httpx.AsyncClient | None = None) -> None:
        super().__init__(client=client, timeout=settings.request_timeout)
        if not settings.langflow_flow_id:
            raise ValueError("PROCESSING_LANGFLOW_FLOW_ID is required for the langflow backend")
        self._api_url = settings.langflow_api_url.rstrip("/")
        self._api_key = settings.langflow_api_key
        self._flow_id = settings.langflow_flow_id
        self._file_component = settings.langflow_file_component
        self._input_value = settings.langflow_input_value
        self._health_timeout = settings.health_timeout

    def _headers(self) -> dict[str, str]:
        return {"x-api-key": self._api_key} if self._api_key else {}

    async def check_health(self) -> bool:
        return await self._ping(f"{self._api_url}/health", self._health_timeout)

    async def _upload(self, content: bytes, file_name: str) -> str:
        response = await self._request(
            "POST",
            f"{self._api_url}/api/v2/files/",
            files={"file": (file_name, content)},
            headers=self._headers(),
        )
        payload = self._json(response)
        file_path = payload.get("path") if isinstance(payload, dict) else None
        if not file_path:
            raise ProcessingBackendError(
                "Langflow upload returned no file path", backend=self.name
            )
        return file_path

    async def _run_flow(self, file_path: str) -> dict[str, Any]:
        response = await self._request(
            "POST",
            f"{self._api_url}/api/v1/run/{self._flow_id}",
            json={
                "input_value": self._input_value,
                "output_type": "chat",
                "input_type": "text",
                "tweaks": {self._file_component: {"path": file_path}},
            },
            headers=self._headers(),
        )
        payload = self._json(response)
        if not isinstance(payload, dict):
            raise ProcessingBackendError(
                "Langflow run returned an unexpected payload", backend=self.name
            )
        return payload

    async def submit(self, content: bytes, file_name: str, user_id: str) -> dict[str, Any]:
        file_id = await self._upload(content, file_name)
        logger.info(
            f"{__name__}:submit - Uploaded {file_name}, running flow",
            extra={"flow_id": self._flow_id, "remote_path": file_id, "user_id": user_id},
        )
        run_response = await self._run_flow(file_id)
        message = extract_message(run_response)
        log_with_context(
            logger,
            logging.INFO,
            f"{__name__}:submit - Flow finished for {file_name}",
            flow_id=self._flow_id,
            message=message,
        )
        return {
            "flow_id": self._flow_id,
            "file_id": file_id,
            "status": "completed",
            "message": message,
            "full_response": run_response,
        }
