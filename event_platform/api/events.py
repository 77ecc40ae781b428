"""
Event Service API endpoints: the event catalogue and the seat ledger.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from fastapi.responses import PlainTextResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..models.event import EventCategory, EventStatus
from ..schemas.common import ErrorResponse, FieldErrorResponse
from ..schemas.event import EventCreate, EventUpdate, EventResponse
from ..services.event_service import EventService
from ..services.inventory_ledger import InventoryLedger


router = APIRouter(prefix="/events", tags=["events"])

ERROR_RESPONSES = {
    400: {"model": FieldErrorResponse, "description": "Invalid input"},
    404: {"model": ErrorResponse, "description": "Event not found"},
    409: {"model": ErrorResponse, "description": "Conflicting state"},
}


def get_event_service(db: AsyncSession = Depends(get_db)) -> EventService:
    """Dependency to get event service instance."""
    return EventService(db)


def get_inventory_ledger(db: AsyncSession = Depends(get_db)) -> InventoryLedger:
    """Dependency to get inventory ledger instance."""
    return InventoryLedger(db)


@router.post("", response_model=EventResponse, status_code=status.HTTP_201_CREATED, responses=ERROR_RESPONSES)
async def create_event(
    event_data: EventCreate,
    event_service: EventService = Depends(get_event_service)
):
    """Create a new event in DRAFT status with all seats available."""
    return await event_service.create_event(event_data)


@router.get("", response_model=List[EventResponse])
async def list_events(
    event_status: Optional[EventStatus] = Query(None, alias="status", description="Filter by status"),
    category: Optional[EventCategory] = Query(None, description="Filter by category"),
    event_service: EventService = Depends(get_event_service)
):
    """Get all events, optionally filtered by status and category."""
    return await event_service.list_events(status=event_status, category=category)


@router.get("/available", response_model=List[EventResponse])
async def list_available_events(event_service: EventService = Depends(get_event_service)):
    """Get published upcoming events that still have seats."""
    return await event_service.list_available_events()


@router.get("/search", response_model=List[EventResponse])
async def search_events(
    keyword: str = Query(..., min_length=1, description="Text to look for in name or description"),
    event_service: EventService = Depends(get_event_service)
):
    return await event_service.search_events(keyword)


@router.get("/category/{category}", response_model=List[EventResponse], responses=ERROR_RESPONSES)
async def list_events_by_category(
    category: EventCategory,
    event_service: EventService = Depends(get_event_service)
):
    """Get all events of one category."""
    return await event_service.list_events(category=category)


@router.get("/health", response_class=PlainTextResponse, tags=["health"])
async def health():
    return "Event Service is running"


@router.get("/{event_id}", response_model=EventResponse, responses=ERROR_RESPONSES)
async def get_event(
    event_id: int,
    event_service: EventService = Depends(get_event_service)
):
    """Get event details by ID."""
    return await event_service.get_event(event_id)


@router.put("/{event_id}", response_model=EventResponse, responses=ERROR_RESPONSES)
async def update_event(
    event_id: int,
    event_data: EventUpdate,
    event_service: EventService = Depends(get_event_service)
):
    """Update descriptive fields of an event. Capacity and seats are not updatable."""
    return await event_service.update_event(event_id, event_data)


@router.patch("/{event_id}/publish", response_model=EventResponse, responses=ERROR_RESPONSES)
async def publish_event(
    event_id: int,
    event_service: EventService = Depends(get_event_service)
):
    return await event_service.publish_event(event_id)


@router.patch("/{event_id}/cancel", response_model=EventResponse, responses=ERROR_RESPONSES)
async def cancel_event(
    event_id: int,
    event_service: EventService = Depends(get_event_service)
):
    return await event_service.cancel_event(event_id)


@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT, responses=ERROR_RESPONSES)
async def delete_event(
    event_id: int,
    event_service: EventService = Depends(get_event_service)
):
    """Delete an event."""
    await event_service.delete_event(event_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{event_id}/reserve", response_model=bool, responses=ERROR_RESPONSES)
async def reserve_seats(
    event_id: int,
    number_of_seats: int = Query(..., alias="numberOfSeats", ge=1),
    reference: Optional[str] = Query(None, min_length=1, max_length=64),
    ledger: InventoryLedger = Depends(get_inventory_ledger)
):
    """
    Reserve seats on an event.

    Returns ``true`` when the seats were taken and ``false`` when too few
    remain; the counter is untouched in the latter case. A repeated call with
    the same ``reference`` returns the original outcome without reserving again.
    """
    return await ledger.reserve_seats(event_id, number_of_seats, reference)


@router.post("/{event_id}/release", responses=ERROR_RESPONSES)
async def release_seats(
    event_id: int,
    number_of_seats: int = Query(..., alias="numberOfSeats", ge=1),
    reference: Optional[str] = Query(None, min_length=1, max_length=64),
    ledger: InventoryLedger = Depends(get_inventory_ledger)
):
    """
    Give seats back to an event.

    With a ``reference`` the release is applied at most once, for the seats
    that reservation holds.
    """
    await ledger.release_seats(event_id, number_of_seats, reference)
    return Response(status_code=status.HTTP_200_OK)
