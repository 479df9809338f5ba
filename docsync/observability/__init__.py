"""
Observability module.

Provides logging configuration and structured logging helpers.
"""

from docsync.observability.logger import configure_logging
from docsync.observability.log_utils import (
    log_exception_with_context,
    log_with_context,
    safe_log_value,
)

__all__ = [
    "configure_logging",
    "log_exception_with_context",
    "log_with_context",
    "safe_log_value",
]
