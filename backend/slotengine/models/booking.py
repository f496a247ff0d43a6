# backend/slotengine/models/booking.py
"""
Booking model.

Bookings store their absolute start/end instants (start_at, end_at) plus
the UTC civil date and times derived from them. Only confirmed bookings
occupy time; cancellation is a status change made outside the engine.

A partial unique index on (host_id, start_at) for confirmed rows backs the
admission check at insert time: a second confirmed booking starting at the
same instant for the same host fails with an IntegrityError.
"""

from enum import Enum
import logging
from typing import Any

from sqlalchemy import CheckConstraint, Column, Date, DateTime, ForeignKey, Index, Integer, String, Time
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..database import Base

logger = logging.getLogger(__name__)

HOST_SLOT_UNIQUE_INDEX = "uq_bookings_host_start_confirmed"


class BookingStatus(str, Enum):
    """Booking lifecycle statuses."""

    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class Booking(Base):
    """A single confirmed (or later cancelled) reservation of host time."""

    __tablename__ = "bookings"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    host_id = Column(String(26), ForeignKey("hosts.id", ondelete="CASCADE"), nullable=False)
    event_type_id = Column(String(26), ForeignKey("event_types.id"), nullable=False)

    guest_name = Column(String(255), nullable=False)
    guest_email = Column(String(255), nullable=False)

    # UTC civil fields
    booking_date = Column(Date, nullable=False, index=True)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)

    # Absolute instants (UTC)
    start_at = Column(DateTime(timezone=True), nullable=False)
    end_at = Column(DateTime(timezone=True), nullable=False)

    duration_minutes = Column(Integer, nullable=False)
    status = Column(String(20), nullable=False, default=BookingStatus.CONFIRMED.value, index=True)
    booker_timezone = Column(String(64), nullable=False, default="UTC")
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    host = relationship("Host")
    event_type = relationship("EventType")

    __table_args__ = (
        CheckConstraint("status IN ('confirmed', 'cancelled')", name="ck_bookings_status"),
        CheckConstraint("duration_minutes > 0", name="check_booking_duration_positive"),
        CheckConstraint("start_at < end_at", name="check_booking_instant_order"),
        Index("idx_bookings_host_date_status", "host_id", "booking_date", "status"),
    )

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        if not self.status:
            self.status = BookingStatus.CONFIRMED.value

    def __repr__(self) -> str:
        return f"<Booking {self.id} host={self.host_id} {self.start_at} {self.status}>"


Index(
    HOST_SLOT_UNIQUE_INDEX,
    Booking.host_id,
    Booking.start_at,
    unique=True,
    postgresql_where=(Booking.status == BookingStatus.CONFIRMED.value),
    sqlite_where=(Booking.status == BookingStatus.CONFIRMED.value),
)
