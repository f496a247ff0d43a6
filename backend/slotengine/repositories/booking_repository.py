# backend/slotengine/repositories/booking_repository.py
"""
Booking Repository.

Data access for confirmed bookings:
- Fetching confirmed bookings (with event type buffers) for admission and
  availability
- Inserting bookings, exposing integrity errors for conflict handling
- Listing a host's bookings
"""

from datetime import date
import logging
from typing import Any, Iterable, List, Optional, cast

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from ..core.exceptions import RepositoryException
from ..models.booking import Booking, BookingStatus
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class BookingRepository(BaseRepository[Booking]):
    """Repository for booking data access."""

    def __init__(self, db: Session, timeout_seconds: Optional[float] = None):
        super().__init__(db, Booking, timeout_seconds=timeout_seconds)
        self.logger = logging.getLogger(__name__)

    def insert_booking(self, **kwargs: Any) -> Booking:
        """Create a booking, exposing integrity errors for conflict handling."""
        try:
            return super().create(**kwargs)
        except RepositoryException as exc:
            if isinstance(exc.__cause__, IntegrityError):
                raise exc.__cause__
            raise

    def get_confirmed_bookings(self, host_id: str, dates: Iterable[date]) -> List[Booking]:
        """
        Get confirmed bookings for a host on a set of UTC civil dates.

        The event type is eager-loaded so callers can widen each booking
        by its own buffers.

        Args:
            host_id: Host ID
            dates: UTC civil dates to include

        Returns:
            Bookings ordered by start instant
        """
        wanted = sorted(set(dates))
        if not wanted:
            return []

        def fetch() -> List[Booking]:
            query = (
                self.db.query(Booking)
                .options(joinedload(Booking.event_type))
                .filter(
                    Booking.host_id == host_id,
                    Booking.status == BookingStatus.CONFIRMED.value,
                    Booking.booking_date.in_(wanted),
                )
                .order_by(Booking.start_at)
            )
            return cast(List[Booking], query.all())

        return self._read("get confirmed bookings", fetch)

    def list_bookings(self, host_id: str, booking_date: Optional[date] = None) -> List[Booking]:
        """List a host's bookings, optionally for a single UTC date."""

        def fetch() -> List[Booking]:
            query = self.db.query(Booking).filter(Booking.host_id == host_id)
            if booking_date is not None:
                query = query.filter(Booking.booking_date == booking_date)
            return cast(List[Booking], query.order_by(Booking.start_at).all())

        return self._read("list bookings", fetch)
