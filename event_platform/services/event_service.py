"""
Event service for managing events and their operations.
"""

import logging
from typing import List, Optional

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError

from ..models.base import utc_now
from ..models.event import Event, EventCategory, EventStatus
from ..schemas.event import EventCreate, EventUpdate, as_utc
from ..utils.exceptions import (
    EventNotFoundError,
    InvalidEventStateError,
    ValidationError
)

logger = logging.getLogger(__name__)


class EventService:
    """Service class for event management operations.

    Nothing here touches ``available_seats`` after creation; see
    :class:`~event_platform.services.inventory_ledger.InventoryLedger`.
    """

    def __init__(self, db: AsyncSession):
        """Initialize the event service with database session."""
        self.db = db

    async def create_event(self, event_data: EventCreate) -> Event:
        """
        Create a new event in DRAFT status.

        Args:
            event_data: Event creation data

        Returns:
            Created event instance

        Raises:
            ValidationError: If event data is rejected by the database
        """
        try:
            # All seats are available initially
            event = Event(
                name=event_data.name,
                description=event_data.description,
                location=event_data.location,
                category=event_data.category,
                start_date=event_data.start_date,
                end_date=event_data.end_date,
                capacity=event_data.capacity,
                available_seats=event_data.capacity,
                base_price=event_data.base_price,
                status=EventStatus.DRAFT,
                organizer_id=event_data.organizer_id,
                image_url=event_data.image_url
            )

            self.db.add(event)
            await self.db.commit()
            await self.db.refresh(event)

            logger.info(f"Event {event.id} created with capacity {event.capacity}")
            return event

        except IntegrityError as e:
            await self.db.rollback()
            raise ValidationError(f"Failed to create event: {str(e.orig)}")

    async def get_event(self, event_id: int) -> Event:
        """
        Get event by ID.

        Raises:
            EventNotFoundError: If event is not found
        """
        result = await self.db.execute(select(Event).where(Event.id == event_id))
        event = result.scalar_one_or_none()
        if not event:
            raise EventNotFoundError(event_id)
        return event

    async def list_events(
        self,
        status: Optional[EventStatus] = None,
        category: Optional[EventCategory] = None
    ) -> List[Event]:
        """Get all events, optionally filtered by status and category."""
        query = select(Event).order_by(Event.start_date.asc(), Event.id.asc())
        if status is not None:
            query = query.where(Event.status == status)
        if category is not None:
            query = query.where(Event.category == category)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def list_available_events(self) -> List[Event]:
        """Get published future events that still have seats."""
        query = (
            select(Event)
            .where(
                Event.status == EventStatus.PUBLISHED,
                Event.available_seats > 0,
                Event.start_date > utc_now()
            )
            .order_by(Event.start_date.asc())
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def search_events(self, keyword: str) -> List[Event]:
        """Case-insensitive search in event name and description."""
        pattern = f"%{keyword.lower()}%"
        query = (
            select(Event)
            .where(
                or_(
                    func.lower(Event.name).like(pattern),
                    func.lower(Event.description).like(pattern)
                )
            )
            .order_by(Event.start_date.asc())
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def update_event(self, event_id: int, event_data: EventUpdate) -> Event:
        """
        Update descriptive fields of an event.

        Raises:
            EventNotFoundError: If event is not found
            ValidationError: If the resulting dates are inconsistent
        """
        event = await self.get_event(event_id)

        update_data = event_data.model_dump(exclude_unset=True, exclude_none=True)
        for field, value in update_data.items():
            setattr(event, field, value)

        if as_utc(event.end_date) < as_utc(event.start_date):
            await self.db.rollback()
            raise ValidationError(
                "Event end date must not be before start date",
                field_errors={"endDate": "must not be before startDate"}
            )

        await self.db.commit()
        await self.db.refresh(event)
        return event

    async def publish_event(self, event_id: int) -> Event:
        """Move a DRAFT event to PUBLISHED."""
        event = await self.get_event(event_id)
        if event.status != EventStatus.DRAFT:
            raise InvalidEventStateError(event_id, event.status.value, "published")

        event.status = EventStatus.PUBLISHED
        await self.db.commit()
        await self.db.refresh(event)
        logger.info(f"Event {event_id} published")
        return event

    async def cancel_event(self, event_id: int) -> Event:
        """Cancel a DRAFT or PUBLISHED event. Seat counters are left untouched."""
        event = await self.get_event(event_id)
        if event.status not in (EventStatus.DRAFT, EventStatus.PUBLISHED):
            raise InvalidEventStateError(event_id, event.status.value, "cancelled")

        event.status = EventStatus.CANCELLED
        await self.db.commit()
        await self.db.refresh(event)
        logger.info(f"Event {event_id} cancelled")
        return event

    async def delete_event(self, event_id: int) -> None:
        """
        Delete an event.

        Raises:
            EventNotFoundError: If event is not found
        """
        result = await self.db.execute(delete(Event).where(Event.id == event_id))
        if result.rowcount == 0:
            await self.db.rollback()
            raise EventNotFoundError(event_id)
        await self.db.commit()
        logger.info(f"Event {event_id} deleted")
