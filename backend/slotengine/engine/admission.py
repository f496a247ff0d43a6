# backend/slotengine/engine/admission.py
"""
Booking admission check.

A proposed booking is admitted when it respects the event type's minimum
notice and its buffered window does not overlap the buffered window of any
confirmed booking. Each existing booking is widened by its own event type's
buffers, not the proposed one's.
"""

from datetime import datetime
from typing import Any, Dict, Iterable, List

from ..core.exceptions import BookingConflictException, InsufficientNoticeException
from ..core.timezone_utils import ensure_utc, format_instant_iso
from .intervals import Interval
from .types import EventTypeConfig, ReservedBooking


def proposed_window(start: datetime, event_type: EventTypeConfig) -> Interval:
    """[start - buffer_before, start + duration + buffer_after)"""
    start = ensure_utc(start)
    return Interval(
        start=start - event_type.buffer_before,
        end=start + event_type.duration + event_type.buffer_after,
    )


def find_conflicts(window: Interval, existing: Iterable[ReservedBooking]) -> List[ReservedBooking]:
    return [booking for booking in existing if window.overlaps(booking.window)]


def check_notice(start: datetime, event_type: EventTypeConfig, now: datetime) -> None:
    lead = ensure_utc(start) - ensure_utc(now)
    if lead < event_type.min_notice:
        raise InsufficientNoticeException(
            required_minutes=event_type.min_notice_minutes,
            provided_minutes=round(lead.total_seconds() / 60, 2),
        )


def _conflict_details(window: Interval, conflicts: List[ReservedBooking]) -> Dict[str, Any]:
    return {
        "proposed_window": {
            "start": format_instant_iso(window.start),
            "end": format_instant_iso(window.end),
        },
        "conflicting_bookings": [
            {
                "booking_id": booking.booking_id,
                "start": format_instant_iso(booking.window.start),
                "end": format_instant_iso(booking.window.end),
            }
            for booking in conflicts
        ],
    }


def check_admission(
    start: datetime,
    event_type: EventTypeConfig,
    existing: Iterable[ReservedBooking],
    now: datetime,
) -> Interval:
    """
    Validate a proposed booking against notice and existing bookings.

    Args:
        start: Proposed start instant
        event_type: Proposed booking's event type settings
        existing: Confirmed bookings that could overlap
        now: Current instant

    Returns:
        The proposed buffered window

    Raises:
        InsufficientNoticeException: If start is inside the notice window
        BookingConflictException: If the buffered windows overlap
    """
    check_notice(start, event_type, now)

    window = proposed_window(start, event_type)
    conflicts = find_conflicts(window, existing)
    if conflicts:
        raise BookingConflictException(
            "Slot conflicts with existing booking (including buffers)",
            details=_conflict_details(window, conflicts),
        )
    return window
