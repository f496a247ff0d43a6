# backend/slotengine/engine/slots.py
"""
Bookable slot generation.

Each available interval is walked in steps of duration + buffers, starting
from the interval's anchor (its pre-clip start) plus buffer_before so that
slot boundaries follow the host's schedule grid even when the visible
window was clipped or split. Candidates are dropped when they start on a
different civil date in the booker's timezone, or before now + min_notice.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Iterable, List

from ..core.timezone_utils import (
    TimezoneLike,
    civil_date_of,
    ensure_utc,
    format_instant,
    format_instant_iso,
    get_timezone,
    parse_civil_date,
)
from .intervals import Interval
from .types import EventTypeConfig


@dataclass(frozen=True)
class Slot:
    """A bookable slot rendered in the booker's timezone."""

    start: str
    end: str
    start_instant: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start": self.start,
            "end": self.end,
            "start_instant": format_instant_iso(self.start_instant),
        }


def generate_slots(
    available: Iterable[Interval],
    event_type: EventTypeConfig,
    booker_timezone: TimezoneLike,
    target_date: date,
    now: datetime,
) -> List[Slot]:
    """
    Emit bookable slots for the booker's requested day.

    Args:
        available: Free intervals from the window builder
        event_type: Duration, buffers and minimum notice
        booker_timezone: Booker's IANA timezone
        target_date: Civil date requested by the booker
        now: Current instant

    Returns:
        Slots ordered by start instant
    """
    zone = get_timezone(booker_timezone)
    day = parse_civil_date(target_date)
    block = event_type.block
    earliest_allowed = ensure_utc(now) + event_type.min_notice

    slots: List[Slot] = []
    for interval in sorted(available, key=lambda item: item.start):
        cursor = interval.anchor + event_type.buffer_before
        if cursor < interval.start:
            steps = -(-(interval.start - cursor) // block)
            cursor += block * steps

        while cursor + event_type.duration + event_type.buffer_after <= interval.end:
            slot_end = cursor + event_type.duration
            if civil_date_of(cursor, zone) == day and cursor >= earliest_allowed:
                slots.append(
                    Slot(
                        start=format_instant(cursor, zone),
                        end=format_instant(slot_end, zone),
                        start_instant=cursor,
                    )
                )
            cursor += block

    return slots
