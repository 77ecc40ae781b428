"""API routers for the Event Platform services."""

from .events import router as events_router
from .bookings import router as bookings_router

__all__ = ["events_router", "bookings_router"]
