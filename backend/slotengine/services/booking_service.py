# backend/slotengine/services/booking_service.py
"""
Booking Service.

Admits and persists bookings. Creation runs inside one transaction:

1. (optional) Redis advisory lock on (host, first UTC date of the buffered
   window)
2. Write lock on the host row: SELECT ... FOR UPDATE, or a no-op UPDATE
   on SQLite
3. Fetch confirmed bookings on the UTC dates around the proposed window
4. Pure admission check (notice, buffered overlap)
5. Insert; the partial unique index on (host_id, start_at) rejects a
   concurrent duplicate with an IntegrityError

An insert-time integrity failure or deadlock is reported exactly like a
pre-check conflict.

The host-row lock decides which of two overlapping admissions wins. The
Redis lock only sheds load early; windows that straddle UTC midnight can
land on different keys and still meet at the row lock.
"""

from datetime import date, datetime, timezone
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.booking_lock import booking_lock
from ..core.config import settings
from ..core.exceptions import (
    BookingConflictException,
    NotFoundException,
    StorageFailureException,
    StorageTimeoutException,
    is_storage_timeout,
)
from ..core.timezone_utils import (
    ensure_utc,
    format_instant_iso,
    get_timezone,
    parse_civil_date,
    parse_instant,
    utc_dates_spanning,
)
from ..engine import EventTypeConfig, ReservedBooking, check_admission
from ..models.booking import HOST_SLOT_UNIQUE_INDEX, Booking, BookingStatus
from ..monitoring.prometheus_metrics import prometheus_metrics
from .base import BaseService

logger = logging.getLogger(__name__)

GENERIC_CONFLICT_MESSAGE = "This time slot conflicts with an existing booking"


class BookingService(BaseService):
    """Service for booking admission and listing."""

    def __init__(self, db: Session, timeout_seconds: Optional[float] = None):
        super().__init__(db, timeout_seconds=timeout_seconds)
        self.repository = self.repositories.create_booking_repository(db, timeout_seconds)
        self.host_repository = self.repositories.create_host_repository(db, timeout_seconds)
        self.event_type_repository = self.repositories.create_event_type_repository(
            db, timeout_seconds
        )

    @staticmethod
    def _is_deadlock_error(exc: BaseException) -> bool:
        message = str(exc).lower()
        return "deadlock detected" in message or "could not serialize" in message

    @staticmethod
    def _integrity_details(exc: IntegrityError, start_at: datetime) -> Dict[str, Any]:
        details: Dict[str, Any] = {
            "reason": "insert_conflict",
            "start_instant": format_instant_iso(start_at),
        }
        orig = getattr(exc, "orig", None)
        diag = getattr(orig, "diag", None)
        constraint_name = getattr(diag, "constraint_name", "") or ""
        if not constraint_name and HOST_SLOT_UNIQUE_INDEX in str(orig):
            constraint_name = HOST_SLOT_UNIQUE_INDEX
        if constraint_name:
            details["constraint"] = constraint_name
        return details

    @BaseService.measure_operation("create_booking")
    def create_booking(
        self,
        host_id: str,
        event_type_id: str,
        guest_name: str,
        guest_email: str,
        start_instant: Any,
        booker_timezone: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Booking:
        """
        Admit and persist a booking.

        Args:
            host_id: Host ID
            event_type_id: Event type ID (must be active and owned by the host)
            guest_name: Booker's name
            guest_email: Booker's email
            start_instant: Absolute start (ISO-8601 string or datetime)
            booker_timezone: Booker's IANA timezone, stored on the booking
            now: Current instant (defaults to the wall clock)

        Returns:
            The confirmed booking

        Raises:
            ValidationException: Malformed instant or timezone
            NotFoundException: Unknown host or event type
            InsufficientNoticeException: Start inside the minimum-notice window
            BookingConflictException: Overlap found before or at insert
            StorageFailureException: Storage failed or timed out
        """
        tz_name = booker_timezone or settings.default_timezone
        get_timezone(tz_name)
        start_at = parse_instant(start_instant)
        current = ensure_utc(now) if now is not None else datetime.now(timezone.utc)

        self.log_operation(
            "create_booking",
            host_id=host_id,
            event_type_id=event_type_id,
            start_instant=format_instant_iso(start_at),
        )

        with self.storage_errors("create_booking"):
            if self.host_repository.get_by_id(host_id) is None:
                raise NotFoundException(f"Host {host_id} not found", code="HOST_NOT_FOUND")
            event_type = self.event_type_repository.get_active(event_type_id)
        if event_type is None or event_type.host_id != host_id:
            raise NotFoundException(
                f"Event type {event_type_id} not found",
                code="EVENT_TYPE_NOT_FOUND",
                details={"host_id": host_id, "event_type_id": event_type_id},
            )
        config = EventTypeConfig.from_model(event_type)
        end_at = start_at + config.duration
        lock_date = (start_at - config.buffer_before).date()

        with booking_lock(host_id, lock_date) as acquired:
            if not acquired:
                prometheus_metrics.record_booking_admission("lock_contended")
                self.logger.warning("Booking lock contended for host %s on %s", host_id, lock_date)
                raise BookingConflictException(
                    "Another booking for this host is being processed. Please retry.",
                    details={"reason": "lock_contended"},
                )
            booking = self._admit_and_insert(
                host_id=host_id,
                event_type_id=event_type.id,
                config=config,
                start_at=start_at,
                end_at=end_at,
                guest_name=guest_name,
                guest_email=guest_email,
                booker_timezone=tz_name,
                now=current,
            )

        prometheus_metrics.record_booking_admission("admitted")
        self.logger.info(
            "Booking %s confirmed for host %s at %s",
            booking.id,
            host_id,
            format_instant_iso(start_at),
        )
        return booking

    def _admit_and_insert(
        self,
        *,
        host_id: str,
        event_type_id: str,
        config: EventTypeConfig,
        start_at: datetime,
        end_at: datetime,
        guest_name: str,
        guest_email: str,
        booker_timezone: str,
        now: datetime,
    ) -> Booking:
        window_start = start_at - config.buffer_before
        window_end = end_at + config.buffer_after
        try:
            with self.storage_errors("create_booking"), self.repository.transaction():
                self.host_repository.lock_for_update(host_id)
                existing = self.repository.get_confirmed_bookings(
                    host_id, utc_dates_spanning(window_start, window_end)
                )
                try:
                    check_admission(
                        start_at,
                        config,
                        [ReservedBooking.from_model(b) for b in existing],
                        now,
                    )
                except BookingConflictException:
                    prometheus_metrics.record_booking_admission("conflict")
                    self.logger.warning("Booking conflict for host %s at %s", host_id, start_at)
                    raise
                except Exception:
                    prometheus_metrics.record_booking_admission("rejected")
                    raise

                return self.repository.insert_booking(
                    host_id=host_id,
                    event_type_id=event_type_id,
                    guest_name=guest_name,
                    guest_email=guest_email,
                    booking_date=start_at.date(),
                    start_time=start_at.time(),
                    end_time=end_at.time(),
                    start_at=start_at,
                    end_at=end_at,
                    duration_minutes=config.duration_minutes,
                    status=BookingStatus.CONFIRMED.value,
                    booker_timezone=booker_timezone,
                )
        except IntegrityError as exc:
            prometheus_metrics.record_booking_admission("insert_conflict")
            self.logger.warning("Insert-time conflict for host %s at %s: %s", host_id, start_at, exc)
            raise BookingConflictException(
                GENERIC_CONFLICT_MESSAGE,
                details=self._integrity_details(exc, start_at),
            ) from exc
        except OperationalError as exc:
            if self._is_deadlock_error(exc):
                prometheus_metrics.record_booking_admission("insert_conflict")
                raise BookingConflictException(
                    GENERIC_CONFLICT_MESSAGE,
                    details={"reason": "deadlock", "start_instant": format_instant_iso(start_at)},
                ) from exc
            self.logger.error("Storage failure creating booking for host %s: %s", host_id, exc)
            if is_storage_timeout(exc):
                raise StorageTimeoutException("create_booking", self.repository.timeout_seconds) from exc
            raise StorageFailureException(details={"operation": "create_booking"}) from exc
        except SQLAlchemyError as exc:
            self.logger.error("Storage failure creating booking for host %s: %s", host_id, exc)
            raise StorageFailureException(details={"operation": "create_booking"}) from exc

    @BaseService.measure_operation("list_bookings")
    def list_bookings(self, host_id: str, booking_date: Any = None) -> List[Booking]:
        """List a host's bookings, optionally for one UTC date."""
        day: Optional[date] = parse_civil_date(booking_date) if booking_date else None
        with self.storage_errors("list_bookings"):
            if self.host_repository.get_by_id(host_id) is None:
                raise NotFoundException(f"Host {host_id} not found", code="HOST_NOT_FOUND")
            return self.repository.list_bookings(host_id, day)
