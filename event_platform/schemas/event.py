"""
Event schemas for request/response validation.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from pydantic import Field, model_validator

from ..models.event import EventCategory, EventStatus
from .common import CamelModel


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so they compare with aware ones."""
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class EventBase(CamelModel):
    """Base event schema with common fields."""

    name: str = Field(..., min_length=1, max_length=200, description="Event name")
    description: Optional[str] = Field(None, max_length=5000, description="Event description")
    location: str = Field(..., min_length=1, max_length=300, description="Event location")
    category: EventCategory = Field(EventCategory.CULTURE, description="Event category")
    start_date: datetime = Field(..., description="Event start date and time")
    end_date: datetime = Field(..., description="Event end date and time")
    base_price: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2, description="Base ticket price")
    image_url: Optional[str] = Field(None, max_length=500)

    @model_validator(mode="after")
    def end_date_after_start_date(self):
        """Validate that the event does not end before it starts."""
        if as_utc(self.end_date) < as_utc(self.start_date):
            raise ValueError("endDate must not be before startDate")
        return self


class EventCreate(EventBase):
    """Schema for creating a new event."""

    capacity: int = Field(..., ge=1, le=100000, description="Total event capacity")
    organizer_id: int = Field(1, ge=1)


class EventUpdate(CamelModel):
    """Schema for updating an existing event.

    Capacity and available seats are not updatable: the seat counter only
    moves through reserve and release.
    """

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=5000)
    location: Optional[str] = Field(None, min_length=1, max_length=300)
    category: Optional[EventCategory] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    base_price: Optional[Decimal] = Field(None, gt=0, max_digits=10, decimal_places=2)
    image_url: Optional[str] = Field(None, max_length=500)


class EventResponse(CamelModel):
    """Schema for event response."""

    id: int
    name: str
    description: Optional[str] = None
    location: str
    category: EventCategory
    start_date: datetime
    end_date: datetime
    capacity: int
    available_seats: int
    base_price: Decimal
    status: EventStatus
    organizer_id: int
    image_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class EventSummary(CamelModel):
    """The subset of an event the Booking Service reads from the ledger."""

    id: int
    name: str
    location: Optional[str] = None
    available_seats: int
