# =============================================================================
# app/exceptions.py - Exception Handlers
# =============================================================================
# Centralized exception handling for the API.
#
# Application errors keep their own status and code. Anything else is
# logged with its stack trace and surfaced to the client as an opaque 500.
# =============================================================================

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from lib.utils import ApplicationError

logger = logging.getLogger(__name__)


INTERNAL_ERROR_BODY = {"error": "Internal Server Error"}


async def application_error_handler(
    request: Request,
    exc: ApplicationError
) -> JSONResponse:
    """
    Convert ApplicationError to JSON response.

    Returns structured error with:
    - error: Human-readable message
    - code: Machine-readable error code
    - suggestion: How to fix (if available)
    - details: Additional context
    """
    logger.warning(f"{request.method} {request.url.path} -> {exc.code}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def unhandled_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """Log the stack trace and return a generic 500."""
    logger.exception(f"Unhandled error: {exc}")
    return JSONResponse(
        status_code=500,
        content=INTERNAL_ERROR_BODY,
    )
