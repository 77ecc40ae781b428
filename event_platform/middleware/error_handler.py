"""
Error handling for the Event Platform services.

Platform exceptions become ``{"error": {...}, "error_id", "timestamp"}``
responses; request validation failures become ``{"status": 400, "errors": {...}}``.
"""

import logging
import traceback
from datetime import datetime, timezone
from typing import Dict
from uuid import uuid4

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from sqlalchemy.exc import IntegrityError, OperationalError, TimeoutError as SQLTimeoutError

from ..utils.exceptions import (
    EventPlatformError,
    ErrorCode,
    ConflictError,
    NotFoundError,
    UpstreamUnavailableError,
    ValidationError
)

logger = logging.getLogger(__name__)

STATUS_MAP = {
    ErrorCode.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    ErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorCode.INVALID_BOOKING_STATE: status.HTTP_409_CONFLICT,
    ErrorCode.INVALID_EVENT_STATE: status.HTTP_409_CONFLICT,
    ErrorCode.SEAT_RESERVATION_FAILED: status.HTTP_409_CONFLICT,
    ErrorCode.RESERVATION_MISMATCH: status.HTTP_409_CONFLICT,
    ErrorCode.UPSTREAM_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def get_status_code_for_error(exc: EventPlatformError) -> int:
    """Map error codes to HTTP status codes."""
    return STATUS_MAP.get(exc.error_code, status.HTTP_500_INTERNAL_SERVER_ERROR)


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def platform_error_response(exc: EventPlatformError, error_id: str) -> JSONResponse:
    """Render a platform exception as an error response."""
    return JSONResponse(
        status_code=get_status_code_for_error(exc),
        content={
            "error": exc.to_dict(),
            "error_id": error_id,
            "timestamp": _timestamp()
        }
    )


async def platform_error_handler(request: Request, exc: EventPlatformError) -> JSONResponse:
    """Exception handler for platform errors raised by route handlers."""
    error_id = str(uuid4())
    _log_error(request, exc, error_id)
    return platform_error_response(exc, error_id)


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render invalid request input as a field -> message map with status 400."""
    field_errors: Dict[str, str] = {}
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        field = loc[-1] if loc else "request"
        # Keep the first message per field
        field_errors.setdefault(field, error.get("msg", "invalid value"))

    logger.warning(
        f"Request validation failed: {request.method} {request.url.path}",
        extra={"field_errors": field_errors}
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"status": status.HTTP_400_BAD_REQUEST, "errors": field_errors}
    )


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Last line of defence: turns anything that escaped the routes into JSON."""

    def __init__(self, app, debug: bool = False):
        super().__init__(app)
        self.debug = debug

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as exc:
            error_id = str(uuid4())
            _log_error(request, exc, error_id)
            return self._handle_exception(exc, error_id)

    def _handle_exception(self, exc: Exception, error_id: str) -> JSONResponse:
        if isinstance(exc, EventPlatformError):
            return platform_error_response(exc, error_id)
        if isinstance(exc, IntegrityError):
            return platform_error_response(
                ConflictError("Data integrity constraint violation", details={"constraint_type": "unknown"}),
                error_id
            )
        if isinstance(exc, (OperationalError, SQLTimeoutError)):
            response = platform_error_response(
                UpstreamUnavailableError("database", "Database temporarily unavailable"),
                error_id
            )
            response.headers["Retry-After"] = "30"
            return response
        return self._handle_unexpected_error(exc, error_id)

    def _handle_unexpected_error(self, exc: Exception, error_id: str) -> JSONResponse:
        platform_error = EventPlatformError(
            "An unexpected error occurred",
            error_code=ErrorCode.INTERNAL_ERROR,
            details={"error_type": type(exc).__name__} if self.debug else None
        )

        response_data = {
            "error": platform_error.to_dict(),
            "error_id": error_id,
            "timestamp": _timestamp()
        }

        # Include stack trace in debug mode
        if self.debug:
            response_data["debug"] = {
                "exception": str(exc),
                "traceback": traceback.format_exception(type(exc), exc, exc.__traceback__)
            }

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=response_data
        )


def _log_error(request: Request, exc: Exception, error_id: str) -> None:
    request_info = {
        "method": request.method,
        "path": request.url.path,
        "client_ip": request.client.host if request.client else None,
    }

    if isinstance(exc, (ValidationError, NotFoundError, ConflictError)):
        logger.warning(
            f"Client error [{error_id}]: {exc.message}",
            extra={
                "error_id": error_id,
                "error_code": exc.error_code.value,
                "request": request_info,
                "details": exc.details
            }
        )
    elif isinstance(exc, EventPlatformError):
        logger.error(
            f"System error [{error_id}]: {exc.message}",
            extra={
                "error_id": error_id,
                "error_code": exc.error_code.value,
                "request": request_info,
                "details": exc.details
            }
        )
    else:
        logger.error(
            f"Unexpected error [{error_id}]: {exc}",
            extra={
                "error_id": error_id,
                "error_type": type(exc).__name__,
                "request": request_info
            },
            exc_info=exc
        )
