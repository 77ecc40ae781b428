"""
Pydantic schemas for booking-related API requests and responses.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import EmailStr, Field

from ..models.booking import BookingStatus
from .common import CamelModel


class BookingCreateRequest(CamelModel):
    """Schema for creating a new booking."""

    event_id: int = Field(..., description="ID of the event to book")
    user_id: int = Field(..., description="ID of the user making the booking")
    number_of_tickets: int = Field(..., ge=1, description="Number of tickets to book")
    total_price: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2, description="Total price")
    user_email: EmailStr = Field(..., description="Email of the user, kept for display")
    event_name: str = Field(..., min_length=1, max_length=255, description="Event name, kept for display")
    event_date: datetime = Field(..., description="Event date, kept for display")
    notes: Optional[str] = Field(None, description="Optional notes or special requests")


class BookingResponse(CamelModel):
    """Schema for booking responses."""

    id: int
    booking_code: str
    event_id: int
    user_id: int
    number_of_tickets: int
    total_price: Decimal
    status: BookingStatus
    user_email: str
    event_name: str
    event_date: datetime
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    confirmed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
