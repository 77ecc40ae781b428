"""
Database models for the Event Platform.
"""

from .base import Base
from .event import Event, EventCategory, EventStatus
from .seat_reservation import SeatReservation, ReservationStatus
from .booking import Booking, BookingStatus

# Tables owned by each service; each service has its own database
EVENT_SERVICE_TABLES = [Event.__table__, SeatReservation.__table__]
BOOKING_SERVICE_TABLES = [Booking.__table__]

__all__ = [
    "Base",
    "Event",
    "EventCategory",
    "EventStatus",
    "SeatReservation",
    "ReservationStatus",
    "Booking",
    "BookingStatus",
    "EVENT_SERVICE_TABLES",
    "BOOKING_SERVICE_TABLES",
]
