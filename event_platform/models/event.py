"""
Event model holding the seat inventory of an event.
"""

import enum
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import DateTime, Enum, Integer, Numeric, String, Text, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class EventStatus(str, enum.Enum):
    """Enumeration for event lifecycle status."""
    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"


class EventCategory(str, enum.Enum):
    """Enumeration for event categories."""
    CONCERT = "CONCERT"
    SPORT = "SPORT"
    CULTURE = "CULTURE"
    CONFERENCE = "CONFERENCE"
    THEATER = "THEATER"
    FESTIVAL = "FESTIVAL"
    OTHER = "OTHER"


class Event(Base):
    """Event model; the authoritative per-event seat counter lives here."""

    __tablename__ = "events"

    # Event basic information
    name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category: Mapped[EventCategory] = mapped_column(
        Enum(EventCategory, native_enum=False, length=50),
        default=EventCategory.CULTURE,
        nullable=False
    )
    location: Mapped[str] = mapped_column(String(300), nullable=False)

    # Event timing
    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    end_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    # Capacity management; available_seats changes only through the inventory ledger
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    available_seats: Mapped[int] = mapped_column(Integer, nullable=False)

    base_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    status: Mapped[EventStatus] = mapped_column(
        Enum(EventStatus, native_enum=False, length=20),
        default=EventStatus.DRAFT,
        nullable=False,
        index=True
    )

    # Reference to the organizer held by value, no foreign key
    organizer_id: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    image_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    # No upper bound on available_seats: an unreferenced release may over-credit
    __table_args__ = (
        CheckConstraint("capacity > 0", name="ck_events_capacity_positive"),
        CheckConstraint("available_seats >= 0", name="ck_events_available_seats_non_negative"),
        CheckConstraint("base_price > 0", name="ck_events_base_price_positive"),
    )

    def __repr__(self) -> str:
        """String representation of the event."""
        return (
            f"<Event(id={self.id}, name='{self.name}', status={self.status.value}, "
            f"seats={self.available_seats}/{self.capacity})>"
        )
