"""API error handling and response helpers."""

import logging
from typing import Any, Dict

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from src.services.errors import AllocationError, ConfigurationError, NotFoundError

logger = logging.getLogger(__name__)


def http_status_for(error: AllocationError) -> int:
    """HTTP status code for an engine error."""
    if isinstance(error, NotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(error, ConfigurationError):
        return status.HTTP_422_UNPROCESSABLE_ENTITY
    return status.HTTP_400_BAD_REQUEST


def error_response(error: AllocationError) -> Dict[str, Any]:
    """Create a standardized error response."""
    return {
        "error": {
            "code": error.code,
            "message": error.message,
        }
    }


async def allocation_error_handler(request: Request, exc: AllocationError) -> JSONResponse:
    """Translate engine errors raised by route handlers into JSON responses."""
    status_code = http_status_for(exc)
    logger.warning("%s %s failed (%d): %s", request.method, request.url.path, status_code, exc.message)
    return JSONResponse(status_code=status_code, content={"detail": error_response(exc)})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AllocationError, allocation_error_handler)


__all__ = ["error_response", "http_status_for", "register_error_handlers"]
