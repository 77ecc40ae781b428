"""
Booking model for managing ticket reservations.
"""

import enum
import random
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, Enum, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, utc_now


class BookingStatus(str, enum.Enum):
    """Enumeration for booking status."""
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    REFUNDED = "REFUNDED"


# Allowed lifecycle transitions; CANCELLED and REFUNDED are terminal
BOOKING_TRANSITIONS = {
    BookingStatus.PENDING: {BookingStatus.CONFIRMED, BookingStatus.CANCELLED},
    BookingStatus.CONFIRMED: {BookingStatus.CANCELLED},
    BookingStatus.CANCELLED: set(),
    BookingStatus.REFUNDED: set(),
}


def generate_booking_code(now: Optional[datetime] = None) -> str:
    """Generate a booking code in the form BK-YYYYMMDD-NNNN.

    Uniqueness is not checked here; the unique index on the column is the
    only guard.
    """
    now = now or utc_now()
    return f"BK-{now:%Y%m%d}-{random.randint(0, 9999):04d}"


class Booking(Base):
    """Booking model; refers to its event and user by id only."""

    __tablename__ = "bookings"

    booking_code: Mapped[str] = mapped_column(String(50), nullable=False, unique=True, index=True)
    reservation_reference: Mapped[str] = mapped_column(String(64), nullable=False)

    # Cross-service references, no foreign keys
    event_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)

    number_of_tickets: Mapped[int] = mapped_column(Integer, nullable=False)
    total_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    status: Mapped[BookingStatus] = mapped_column(
        Enum(BookingStatus, native_enum=False, length=20),
        default=BookingStatus.PENDING,
        nullable=False,
        index=True
    )

    # Denormalized for display without a remote call
    user_email: Mapped[str] = mapped_column(String(255), nullable=False)
    event_name: Mapped[str] = mapped_column(String(255), nullable=False)
    event_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    confirmed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    cancelled_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        CheckConstraint("number_of_tickets > 0", name="ck_bookings_number_of_tickets_positive"),
        CheckConstraint("total_price > 0", name="ck_bookings_total_price_positive"),
    )

    def can_transition_to(self, status: BookingStatus) -> bool:
        """Check whether the lifecycle allows moving to ``status``."""
        return status in BOOKING_TRANSITIONS[self.status]

    @property
    def can_be_cancelled(self) -> bool:
        return self.can_transition_to(BookingStatus.CANCELLED)

    def confirm(self) -> None:
        """Mark the booking as confirmed."""
        self.status = BookingStatus.CONFIRMED
        self.confirmed_at = utc_now()

    def cancel(self) -> None:
        """Mark the booking as cancelled."""
        self.status = BookingStatus.CANCELLED
        self.cancelled_at = utc_now()

    def __repr__(self) -> str:
        """String representation of the booking."""
        return (
            f"<Booking(id={self.id}, code={self.booking_code}, event_id={self.event_id}, "
            f"tickets={self.number_of_tickets}, status={self.status.value})>"
        )
