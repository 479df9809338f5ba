"""
Logger configuration.

Configures the root logger once at startup with an ISO timestamp format.

Dependencies: logging (stdlib)
System role: Centralized logging configuration
"""

import logging
import sys

_NOISY_LOGGERS = ("httpx", "httpcore", "sqlalchemy.engine", "asyncio")


def configure_logging(level: str = "INFO") -> None:
    """
    Configure Python logging with ISO timestamp and structured format.

    Args:
        level: Root log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    # Remove any existing handlers to avoid duplicates
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )

    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    root_logger.addHandler(handler)

    # Request-level chatter from the HTTP client and engine
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

