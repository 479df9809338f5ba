"""
Router error handling.

Decorator translating domain exceptions into HTTPExceptions so every
endpoint reports failures with the same status codes:

- DocumentNotFoundError, RemoteNotFoundError → 404
- InvalidTransitionError → 400
- RemoteAuthError → 401
- PipelineBusyError → 409
- RemoteSourceError, ProcessingBackendError → 502
- RegistryError, StagingError → 500
"""

import functools
import logging
from typing import Any, Callable, TypeVar

from fastapi import HTTPException, status

from docsync.core.exceptions import (
    DocumentNotFoundError,
    InvalidTransitionError,
    PipelineBusyError,
    ProcessingBackendError,
    RegistryError,
    RemoteAuthError,
    RemoteNotFoundError,
    RemoteSourceError,
    StagingError,
)

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def handle_docsync_errors(func: F) -> F:
    """
    Decorator mapping docsync exceptions to HTTP responses.

    Centralizes logging of the error context and the status code policy.
    """

    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return await func(*args, **kwargs)

        except (DocumentNotFoundError, RemoteNotFoundError) as e:
            logger.warning(
                f"{__name__}:{func.__name__} - Resource not found",
                extra={"error": str(e), **e.details},
            )
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

        except InvalidTransitionError as e:
            logger.warning(
                f"{__name__}:{func.__name__} - Rejected status change",
                extra={"error": str(e), **e.details},
            )
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

        except RemoteAuthError as e:
            logger.warning(
                f"{__name__}:{func.__name__} - Remote credential rejected",
                extra={"error": str(e)},
            )
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))

        except PipelineBusyError as e:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

        except (RemoteSourceError, ProcessingBackendError) as e:
            logger.error(
                f"{__name__}:{func.__name__} - Upstream service failed",
                extra={"error": str(e), **e.details},
            )
            raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))

        except (RegistryError, StagingError) as e:
            logger.error(
                f"{__name__}:{func.__name__} - Request failed",
                extra={"error_type": type(e).__name__, "error": str(e)},
            )
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=str(e),
            )

    return wrapper  # type: ignore
