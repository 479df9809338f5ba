"""
Processing backends.

Exports:
  - ProcessingBackend: Abstract interface
  - LangExtractBackend, LangflowBackend: HTTP implementations
  - get_processing_backend(): Selection by configuration
"""

from docsync.boundary.processors.base import ProcessingBackend
from docsync.boundary.processors.factory import get_processing_backend
from docsync.boundary.processors.langextract_processor import LangExtractBackend
from docsync.boundary.processors.langflow_processor import LangflowBackend

__all__ = [
    "LangExtractBackend",
    "LangflowBackend",
    "ProcessingBackend",
    "get_processing_backend",
]
