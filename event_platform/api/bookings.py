"""
Booking Service API endpoints.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import PlainTextResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..clients.event_service_client import EventServiceClient
from ..database import get_db
from ..models.booking import BookingStatus
from ..schemas.booking import BookingCreateRequest, BookingResponse
from ..schemas.common import ErrorResponse, FieldErrorResponse
from ..services.booking_service import BookingService


router = APIRouter(prefix="/bookings", tags=["bookings"])

ERROR_RESPONSES = {
    400: {"model": FieldErrorResponse, "description": "Invalid input"},
    404: {"model": ErrorResponse, "description": "Booking not found"},
    409: {"model": ErrorResponse, "description": "Seats unavailable or invalid booking state"},
}


def get_event_client(request: Request) -> EventServiceClient:
    """Dependency returning the Event Service client owned by the app."""
    return request.app.state.event_client


def get_booking_service(
    db: AsyncSession = Depends(get_db),
    event_client: EventServiceClient = Depends(get_event_client)
) -> BookingService:
    """Dependency to get booking service instance."""
    return BookingService(db, event_client)


@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED, responses=ERROR_RESPONSES)
async def create_booking(
    booking_data: BookingCreateRequest,
    booking_service: BookingService = Depends(get_booking_service)
):
    """
    Create a new booking.

    Seats are reserved on the Event Service first. When the reservation is
    refused, or the Event Service cannot be reached, nothing is stored and
    409 is returned.
    """
    return await booking_service.create_booking(booking_data)


@router.get("", response_model=List[BookingResponse])
async def list_bookings(
    user_id: Optional[int] = Query(None, alias="userId", description="Filter by user"),
    booking_status: Optional[BookingStatus] = Query(None, alias="status", description="Filter by status"),
    booking_service: BookingService = Depends(get_booking_service)
):
    """List bookings, newest first."""
    return await booking_service.list_bookings(user_id=user_id, status=booking_status)


@router.get("/health", response_class=PlainTextResponse, tags=["health"])
async def health():
    return "Booking Service is running"


@router.get("/{booking_id}", response_model=BookingResponse, responses=ERROR_RESPONSES)
async def get_booking(
    booking_id: int,
    booking_service: BookingService = Depends(get_booking_service)
):
    """Get booking details by ID."""
    return await booking_service.get_booking(booking_id)


@router.post("/{booking_id}/confirm", response_model=BookingResponse, responses=ERROR_RESPONSES)
async def confirm_booking(
    booking_id: int,
    booking_service: BookingService = Depends(get_booking_service)
):
    """Confirm a pending booking."""
    return await booking_service.confirm_booking(booking_id)


@router.post("/{booking_id}/cancel", response_model=BookingResponse, responses=ERROR_RESPONSES)
async def cancel_booking(
    booking_id: int,
    booking_service: BookingService = Depends(get_booking_service)
):
    """
    Cancel a pending or confirmed booking and give its seats back.

    The cancellation succeeds even when the Event Service does not
    acknowledge the release.
    """
    return await booking_service.cancel_booking(booking_id)
