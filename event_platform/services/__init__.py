"""Business logic services for the Event Platform."""

from .inventory_ledger import InventoryLedger
from .event_service import EventService
from .booking_service import BookingService

__all__ = ["InventoryLedger", "EventService", "BookingService"]
