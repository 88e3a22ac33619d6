"""Exception handlers rendering every failure as ``{"error": message}``."""

import structlog
from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from clinic_booking.core.exceptions import AppException

logger = structlog.get_logger()

INVALID_REQUEST = "Invalid request data"
INTERNAL_ERROR = "Internal server error"


def error_response(status_code: int, message: str) -> JSONResponse:
    """Build the JSON error body shared by all handlers."""
    return JSONResponse(status_code=status_code, content={"error": message})


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """
    Handle custom application exceptions.

    Args:
        request: Request object
        exc: Application exception

    Returns:
        JSON error response with the exception's status and message
    """
    if exc.status_code >= 500:
        logger.error(
            "request_error",
            path=request.url.path,
            error=exc.__class__.__name__,
            message=exc.message,
        )
    return error_response(exc.status_code, exc.message)


async def http_exception_handler(
    request: Request,
    exc: StarletteHTTPException,
) -> JSONResponse:
    """Handle routing and framework HTTP errors such as 404 and 405."""
    return error_response(exc.status_code, str(exc.detail))


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """
    Handle malformed request bodies and query parameters.

    Field details are logged rather than returned to the client.
    """
    logger.info("request_validation_failed", path=request.url.path, errors=exc.errors())
    return error_response(status.HTTP_400_BAD_REQUEST, INVALID_REQUEST)


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions without leaking internals."""
    logger.exception("unhandled_exception", path=request.url.path, error=str(exc))
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR)
