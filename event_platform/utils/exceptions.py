"""
Custom exceptions for the Event Platform.
"""

from typing import Any, Dict, Optional, List
from enum import Enum


class ErrorCode(str, Enum):
    """Standard error codes for the platform."""

    # General errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"

    # Business logic errors
    CONFLICT = "CONFLICT"
    INVALID_BOOKING_STATE = "INVALID_BOOKING_STATE"
    INVALID_EVENT_STATE = "INVALID_EVENT_STATE"
    SEAT_RESERVATION_FAILED = "SEAT_RESERVATION_FAILED"
    RESERVATION_MISMATCH = "RESERVATION_MISMATCH"

    # External service errors
    UPSTREAM_UNAVAILABLE = "UPSTREAM_UNAVAILABLE"


class EventPlatformError(Exception):
    """Base exception class for the Event Platform."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None
    ):
        """Initialize the exception with comprehensive error information."""
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.suggestions = suggestions or []
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        result = {
            "error_code": self.error_code.value,
            "message": self.message,
        }

        if self.details:
            result["details"] = self.details

        if self.suggestions:
            result["suggestions"] = self.suggestions

        return result


class ValidationError(EventPlatformError):
    """Exception raised for validation errors."""

    def __init__(self, message: str, field_errors: Optional[Dict[str, str]] = None, **kwargs):
        super().__init__(
            message,
            error_code=ErrorCode.VALIDATION_ERROR,
            details={"field_errors": field_errors} if field_errors else None,
            **kwargs
        )
        self.field_errors = field_errors or {}


class NotFoundError(EventPlatformError):
    """Base exception for resource not found errors."""

    def __init__(self, message: str, resource_type: Optional[str] = None, resource_id: Optional[str] = None, **kwargs):
        super().__init__(
            message,
            error_code=ErrorCode.NOT_FOUND,
            details={"resource_type": resource_type, "resource_id": resource_id} if resource_type else None,
            **kwargs
        )


class EventNotFoundError(NotFoundError):
    """Exception raised when an event is not found."""

    def __init__(self, event_id: int, **kwargs):
        super().__init__(
            f"Event {event_id} not found",
            resource_type="event",
            resource_id=str(event_id),
            suggestions=["Check the event ID", "Browse available events"],
            **kwargs
        )


class BookingNotFoundError(NotFoundError):
    """Exception raised when a booking is not found."""

    def __init__(self, booking_id: int, **kwargs):
        super().__init__(
            f"Booking {booking_id} not found",
            resource_type="booking",
            resource_id=str(booking_id),
            suggestions=["Check the booking ID"],
            **kwargs
        )


class ConflictError(EventPlatformError):
    """Base exception for requests that conflict with the current state."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.CONFLICT, **kwargs):
        super().__init__(message, error_code=error_code, **kwargs)


class InvalidBookingStateError(ConflictError):
    """Exception raised when booking is in invalid state for operation."""

    def __init__(self, booking_id: int, current_state: str, operation: str, **kwargs):
        super().__init__(
            f"Booking {booking_id} cannot be {operation} in {current_state} state",
            error_code=ErrorCode.INVALID_BOOKING_STATE,
            details={"booking_id": booking_id, "current_state": current_state, "operation": operation},
            **kwargs
        )


class InvalidEventStateError(ConflictError):
    """Exception raised when an event status transition is not allowed."""

    def __init__(self, event_id: int, current_state: str, operation: str, **kwargs):
        super().__init__(
            f"Event {event_id} cannot be {operation} in {current_state} state",
            error_code=ErrorCode.INVALID_EVENT_STATE,
            details={"event_id": event_id, "current_state": current_state, "operation": operation},
            **kwargs
        )


class SeatReservationError(ConflictError):
    """Exception raised when seats could not be reserved for a booking.

    Raised both for sold-out events and for an unreachable Event Service;
    the two cases are indistinguishable to the caller.
    """

    def __init__(self, event_id: int, requested: int, **kwargs):
        super().__init__(
            f"Unable to reserve {requested} seat(s) for event {event_id}",
            error_code=ErrorCode.SEAT_RESERVATION_FAILED,
            details={"event_id": event_id, "requested": requested},
            suggestions=["Try booking fewer tickets", "Try again later"],
            **kwargs
        )


class ReservationMismatchError(ConflictError):
    """Exception raised when a release does not match an outstanding reservation."""

    def __init__(self, reference: str, event_id: int, **kwargs):
        super().__init__(
            f"No reservation {reference} is recorded for event {event_id}",
            error_code=ErrorCode.RESERVATION_MISMATCH,
            details={"reference": reference, "event_id": event_id},
            **kwargs
        )


class UpstreamUnavailableError(EventPlatformError):
    """Exception raised for transport failures towards another service."""

    def __init__(self, service_name: str, message: str, status_code: Optional[int] = None, **kwargs):
        super().__init__(
            f"{service_name} unavailable: {message}",
            error_code=ErrorCode.UPSTREAM_UNAVAILABLE,
            details={"service_name": service_name, "status_code": status_code},
            suggestions=["Try again later"],
            **kwargs
        )
        self.service_name = service_name
        self.status_code = status_code
