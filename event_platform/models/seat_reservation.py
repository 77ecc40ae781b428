"""
Seat reservation records kept by the inventory ledger.
"""

import enum
from datetime import datetime
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, Enum, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class ReservationStatus(str, enum.Enum):
    """Enumeration for seat reservation status."""
    ACTIVE = "ACTIVE"
    RELEASED = "RELEASED"


class SeatReservation(Base):
    """A successful seat reservation identified by a caller-supplied reference."""

    __tablename__ = "seat_reservations"

    reference: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)
    event_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    seats: Mapped[int] = mapped_column(Integer, nullable=False)

    status: Mapped[ReservationStatus] = mapped_column(
        Enum(ReservationStatus, native_enum=False, length=20),
        default=ReservationStatus.ACTIVE,
        nullable=False
    )
    released_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        CheckConstraint("seats > 0", name="ck_seat_reservations_seats_positive"),
    )

    @property
    def is_active(self) -> bool:
        return self.status == ReservationStatus.ACTIVE

    def __repr__(self) -> str:
        return (
            f"<SeatReservation(reference={self.reference}, event_id={self.event_id}, "
            f"seats={self.seats}, status={self.status.value})>"
        )
