"""
Processing backend factory.

Dependencies: docsync.configs
System role: Selects the backend implementation from configuration
"""

import httpx

from docsync.boundary.processors.base import ProcessingBackend
from docsync.boundary.processors.langextract_processor import LangExtractBackend
from docsync.boundary.processors.langflow_processor import LangflowBackend
from docsync.configs.processing import ProcessingSettings

_BACKENDS: dict[str, type[ProcessingBackend]] = {
    LangExtractBackend.name: LangExtractBackend,
    LangflowBackend.name: LangflowBackend,
}


def get_processing_backend(
    settings: ProcessingSettings,
    client: httpx.AsyncClient | None = None,
) -> ProcessingBackend:
    """
    Build the backend named by ``settings.backend``.

    Raises:
        ValueError: Unknown backend name or incomplete backend settings
    """
    try:
        backend_cls = _BACKENDS[settings.backend]
    except KeyError as e:
        raise ValueError(f"Unknown processing backend: {settings.backend}") from e
    return backend_cls(settings, client=client)
