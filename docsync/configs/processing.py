"""
Processing backend configuration.

Selects the external extraction backend and tunes the batch driver.
Both backends share the same upload/respond contract; only the
selected one needs its connection settings populated.

Dependencies: pydantic, pydantic_settings
System role: Processing worker and backend configuration
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ProcessingSettings(BaseSettings):
    """Settings for the processing worker and its backend."""

    model_config = SettingsConfigDict(
        env_prefix="PROCESSING_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    backend: Literal["langextract", "langflow"] = Field(
        default="langextract",
        description="Processing backend implementation to use",
    )
    request_timeout: float = Field(
        default=30.0,
        description="Timeout in seconds for each processing call",
    )
    health_timeout: float = Field(
        default=10.0,
        description="Timeout in seconds for the backend health check",
    )
    batch_limit: int = Field(
        default=100,
        description="Maximum pending documents fetched per batch driver run",
    )
    inter_document_delay: float = Field(
        default=1.0,
        description="Delay in seconds between sequentially processed documents",
    )

    # LangExtract
    langextract_base_url: str = Field(
        default="http://localhost:8000",
        description="LangExtract API base URL",
    )
    langextract_enable_docling: bool = Field(
        default=True,
        description="Request Docling conversion for PDF uploads",
    )

    # Langflow
    langflow_api_url: str = Field(
        default="http://localhost:7860",
        description="Langflow API base URL",
    )
    langflow_api_key: str | None = Field(
        default=None,
        description="Langflow API key sent as x-api-key",
    )
    langflow_flow_id: str | None = Field(
        default=None,
        description="Flow executed for every uploaded document",
    )
    langflow_file_component: str = Field(
        default="DoclingInline-eltbj",
        description="Flow component receiving the uploaded file path via tweaks",
    )
    langflow_input_value: str = Field(
        default="Analyze this file",
        description="Chat input sent with each flow run",
    )
