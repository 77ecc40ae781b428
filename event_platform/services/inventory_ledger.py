"""
Inventory ledger: the single authority over per-event seat counters.

Every counter mutation is one conditional UPDATE statement, so the database
serialises concurrent callers per event row and a stale read can never be
acted upon. No lock is held across a network hop.
"""

import logging
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.base import utc_now
from ..models.event import Event
from ..models.seat_reservation import SeatReservation, ReservationStatus
from ..utils.exceptions import EventNotFoundError, ReservationMismatchError

logger = logging.getLogger(__name__)


class InventoryLedger:
    """Atomic reserve/release operations on event seat counters."""

    def __init__(self, db: AsyncSession):
        """Initialize the ledger with database session."""
        self.db = db

    async def get_event(self, event_id: int) -> Event:
        """
        Get event by ID.

        Raises:
            EventNotFoundError: If event is not found
        """
        result = await self.db.execute(
            select(Event).where(Event.id == event_id).execution_options(populate_existing=True)
        )
        event = result.scalar_one_or_none()
        if not event:
            raise EventNotFoundError(event_id)
        return event

    async def reserve_seats(self, event_id: int, count: int, reference: Optional[str] = None) -> bool:
        """
        Reserve ``count`` seats if that many are still available.

        Args:
            event_id: Event to reserve on
            count: Number of seats, must be positive
            reference: Optional caller reference recorded with the reservation

        Returns:
            True when the seats were taken, False when too few remain

        Raises:
            EventNotFoundError: If event is not found
        """
        if count <= 0:
            raise ValueError("count must be positive")

        if reference is not None:
            existing = await self._get_reservation(reference)
            if existing is not None:
                logger.info(f"Reserve for known reference {reference}: no mutation")
                return existing.is_active and existing.event_id == event_id

        result = await self.db.execute(
            update(Event)
            .where(Event.id == event_id, Event.available_seats >= count)
            .values(
                available_seats=Event.available_seats - count,
                updated_at=utc_now()
            )
            .execution_options(synchronize_session=False)
        )

        if result.rowcount == 0:
            await self.db.rollback()
            # Distinguish unknown event from insufficient seats
            await self.get_event(event_id)
            logger.info(f"Reservation of {count} seats declined for event {event_id}")
            return False

        if reference is not None:
            self.db.add(SeatReservation(reference=reference, event_id=event_id, seats=count))

        try:
            await self.db.commit()
        except IntegrityError:
            # A concurrent reserve recorded the same reference first; ours is rolled back
            await self.db.rollback()
            existing = await self._get_reservation(reference)
            return existing is not None and existing.is_active and existing.event_id == event_id

        logger.info(f"Reserved {count} seats for event {event_id} (reference={reference})")
        return True

    async def release_seats(self, event_id: int, count: int, reference: Optional[str] = None) -> None:
        """
        Give seats back to an event.

        Without a reference the counter is credited unconditionally, even past
        capacity. With a reference only an outstanding reservation is credited,
        by the number of seats it actually holds, and only once.

        Raises:
            EventNotFoundError: If event is not found
            ReservationMismatchError: If the reference matches no reservation of this event
        """
        if count <= 0:
            raise ValueError("count must be positive")

        if reference is None:
            await self._credit(event_id, count)
            await self.db.commit()
            logger.info(f"Released {count} seats for event {event_id} without reference")
            return

        reservation = await self._get_reservation(reference)
        if reservation is None or reservation.event_id != event_id:
            await self.get_event(event_id)
            raise ReservationMismatchError(reference, event_id)

        if reservation.seats != count:
            logger.warning(
                f"Release of {count} seats for reservation {reference} "
                f"holding {reservation.seats}; crediting the reserved amount"
            )

        result = await self.db.execute(
            update(SeatReservation)
            .where(
                SeatReservation.reference == reference,
                SeatReservation.status == ReservationStatus.ACTIVE
            )
            .values(status=ReservationStatus.RELEASED, released_at=utc_now(), updated_at=utc_now())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            await self.db.rollback()
            logger.info(f"Reservation {reference} already released: no mutation")
            return

        await self._credit(event_id, reservation.seats)
        await self.db.commit()
        logger.info(f"Released {reservation.seats} seats for event {event_id} (reference={reference})")

    async def _credit(self, event_id: int, count: int) -> None:
        result = await self.db.execute(
            update(Event)
            .where(Event.id == event_id)
            .values(
                available_seats=Event.available_seats + count,
                updated_at=utc_now()
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            await self.db.rollback()
            raise EventNotFoundError(event_id)

    async def _get_reservation(self, reference: str) -> Optional[SeatReservation]:
        result = await self.db.execute(
            select(SeatReservation)
            .where(SeatReservation.reference == reference)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()
