"""Middleware components for the Event Platform services."""

from .error_handler import (
    ErrorHandlerMiddleware,
    platform_error_handler,
    request_validation_error_handler
)
from .logging import LoggingMiddleware

__all__ = [
    "ErrorHandlerMiddleware",
    "LoggingMiddleware",
    "platform_error_handler",
    "request_validation_error_handler"
]
