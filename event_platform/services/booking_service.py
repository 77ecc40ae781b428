"""
Booking service: the booking lifecycle on top of the remote inventory ledger.
"""

import logging
from typing import List, Optional
from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..clients.event_service_client import EventServiceClient
from ..models.booking import Booking, BookingStatus, generate_booking_code
from ..schemas.booking import BookingCreateRequest
from ..utils.exceptions import (
    BookingNotFoundError,
    ConflictError,
    InvalidBookingStateError,
    SeatReservationError
)
from ..utils.logging_config import log_business_event, log_reconciliation_event

logger = logging.getLogger(__name__)


class BookingService:
    """Service for managing bookings against the Event Service seat ledger.

    Seats are taken from the ledger before anything is stored locally, and
    given back before a cancellation is stored. The remote call is never made
    inside an open local transaction.
    """

    def __init__(self, session: AsyncSession, event_client: EventServiceClient):
        self.session = session
        self.event_client = event_client

    async def create_booking(self, request: BookingCreateRequest) -> Booking:
        """
        Create a PENDING booking once the ledger has granted the seats.

        Args:
            request: Validated booking request

        Returns:
            Created booking instance

        Raises:
            SeatReservationError: When the ledger did not grant the seats
            ConflictError: When the booking could not be stored
        """
        logger.info(
            f"Creating booking for user {request.user_id}, event {request.event_id}, "
            f"tickets {request.number_of_tickets}"
        )

        reference = uuid4().hex
        reserved = await self.event_client.reserve_seats(
            request.event_id, request.number_of_tickets, reference
        )
        if not reserved:
            logger.info(f"Seat reservation declined for event {request.event_id}")
            raise SeatReservationError(request.event_id, request.number_of_tickets)

        booking = Booking(
            booking_code=generate_booking_code(),
            reservation_reference=reference,
            event_id=request.event_id,
            user_id=request.user_id,
            number_of_tickets=request.number_of_tickets,
            total_price=request.total_price,
            status=BookingStatus.PENDING,
            user_email=request.user_email,
            event_name=request.event_name,
            event_date=request.event_date,
            notes=request.notes
        )

        try:
            self.session.add(booking)
            await self.session.commit()
        except Exception as e:
            await self.session.rollback()
            logger.error(f"Storing booking for event {request.event_id} failed, releasing seats: {e}")
            await self._release(request.event_id, request.number_of_tickets, reference, booking_id=None)
            if isinstance(e, IntegrityError):
                raise ConflictError("Failed to create booking due to data conflict") from e
            raise

        # The booking is stored and owns its seats; never release past this point
        await self.session.refresh(booking)

        log_business_event(
            "booking_created",
            {
                "booking_id": booking.id,
                "booking_code": booking.booking_code,
                "event_id": booking.event_id,
                "tickets": booking.number_of_tickets,
            },
            user_id=booking.user_id
        )
        return booking

    async def confirm_booking(self, booking_id: int) -> Booking:
        """
        Confirm a pending booking.

        Raises:
            BookingNotFoundError: When booking is not found
            InvalidBookingStateError: When booking is not in pending state
        """
        booking = await self._get_booking_for_update(booking_id)
        if not booking.can_transition_to(BookingStatus.CONFIRMED):
            current = booking.status.value
            await self.session.rollback()
            raise InvalidBookingStateError(booking_id, current, "confirmed")

        booking.confirm()
        await self.session.commit()
        await self.session.refresh(booking)

        log_business_event(
            "booking_confirmed",
            {"booking_id": booking.id, "booking_code": booking.booking_code},
            user_id=booking.user_id
        )
        return booking

    async def cancel_booking(self, booking_id: int) -> Booking:
        """
        Cancel a booking and give its seats back to the ledger.

        The cancellation is stored even when the ledger does not acknowledge
        the release; that case is reported for reconciliation.

        Raises:
            BookingNotFoundError: When booking is not found
            InvalidBookingStateError: When booking cannot be cancelled
        """
        booking = await self._get_booking_for_update(booking_id)
        if not booking.can_be_cancelled:
            current = booking.status.value
            await self.session.rollback()
            raise InvalidBookingStateError(booking_id, current, "cancelled")

        event_id = booking.event_id
        tickets = booking.number_of_tickets
        reference = booking.reservation_reference
        # End the read transaction before the remote call
        await self.session.commit()

        await self._release(event_id, tickets, reference, booking_id=booking_id)

        booking = await self._get_booking_for_update(booking_id)
        if not booking.can_be_cancelled:
            # A concurrent cancel won the race; the release above was a no-op for it
            current = booking.status.value
            await self.session.rollback()
            raise InvalidBookingStateError(booking_id, current, "cancelled")

        booking.cancel()
        await self.session.commit()
        await self.session.refresh(booking)

        log_business_event(
            "booking_cancelled",
            {"booking_id": booking.id, "booking_code": booking.booking_code, "event_id": event_id},
            user_id=booking.user_id
        )
        return booking

    async def get_booking(self, booking_id: int) -> Booking:
        """Get booking by ID."""
        result = await self.session.execute(select(Booking).where(Booking.id == booking_id))
        booking = result.scalar_one_or_none()
        if not booking:
            raise BookingNotFoundError(booking_id)
        return booking

    async def list_bookings(
        self,
        user_id: Optional[int] = None,
        status: Optional[BookingStatus] = None
    ) -> List[Booking]:
        """List bookings, newest first, optionally filtered by user and status."""
        query = select(Booking).order_by(Booking.created_at.desc(), Booking.id.desc())
        if user_id is not None:
            query = query.where(Booking.user_id == user_id)
        if status is not None:
            query = query.where(Booking.status == status)

        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def _get_booking_for_update(self, booking_id: int) -> Booking:
        result = await self.session.execute(
            select(Booking)
            .where(Booking.id == booking_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        booking = result.scalar_one_or_none()
        if not booking:
            await self.session.rollback()
            raise BookingNotFoundError(booking_id)
        return booking

    async def _release(
        self,
        event_id: int,
        tickets: int,
        reference: Optional[str],
        booking_id: Optional[int]
    ) -> None:
        acknowledged = await self.event_client.release_seats(event_id, tickets, reference)
        if not acknowledged:
            log_reconciliation_event(
                "seat_release_not_acknowledged",
                {
                    "booking_id": booking_id,
                    "event_id": event_id,
                    "tickets": tickets,
                    "reference": reference,
                }
            )
