# backend/slotengine/engine/windows.py
"""
Availability window construction.

Turns a host's schedule rows for one host civil day into absolute-instant
intervals clipped to the booker's requested day, then removes booked time.

Source of truth for a host day:
    - any override row for the date  -> only available override rows apply
      (none available means the day is closed)
    - no override rows               -> all weekly rules for the weekday

Only the host civil day containing the midpoint of the booker's day is
consulted. A booker day that straddles two host days sees just one of them.
"""

from dataclasses import dataclass
from datetime import date, datetime
import logging
from typing import Any, Iterable, List, Sequence

from ..core.exceptions import ValidationException
from ..core.timezone_utils import (
    TimezoneLike,
    civil_date_of,
    civil_day_bounds_utc,
    civil_to_instant,
    parse_civil_date,
)
from .intervals import Interval, clip_interval, merge_intervals, subtract_all
from .types import ReservedBooking

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchWindow:
    """The booker's requested civil day as an absolute range, plus the host day it maps to."""

    target_date: date
    start: datetime
    end: datetime
    host_day: date

    @property
    def midpoint(self) -> datetime:
        return self.start + (self.end - self.start) / 2


def host_day_for(start: datetime, end: datetime, host_timezone: TimezoneLike) -> date:
    """Host civil date containing the midpoint of [start, end)."""
    return civil_date_of(start + (end - start) / 2, host_timezone)


def resolve_search_window(
    target_date: date, booker_timezone: TimezoneLike, host_timezone: TimezoneLike
) -> SearchWindow:
    """
    Compute the booker's day bounds and the authoritative host day.

    Args:
        target_date: Civil date requested by the booker
        booker_timezone: Booker's IANA timezone
        host_timezone: Host's IANA timezone

    Returns:
        SearchWindow for the request
    """
    day = parse_civil_date(target_date)
    start, end = civil_day_bounds_utc(day, booker_timezone)
    return SearchWindow(
        target_date=day,
        start=start,
        end=end,
        host_day=host_day_for(start, end, host_timezone),
    )


def select_schedule_rows(rules: Sequence[Any], overrides: Sequence[Any]) -> List[Any]:
    """
    Pick the rows that define availability for a host day.

    Overrides replace weekly rules entirely; they are never merged.
    """
    if overrides:
        return [row for row in overrides if row.is_available]
    return list(rules)


def build_raw_windows(host_day: date, rows: Iterable[Any], host_timezone: TimezoneLike) -> List[Interval]:
    """
    Convert host-civil schedule rows into absolute intervals.

    Raises:
        ValidationException: If an available row has no start or end time
    """
    windows: List[Interval] = []
    for row in rows:
        if row.start_time is None or row.end_time is None:
            raise ValidationException(
                "Available schedule rows must define start_time and end_time",
                code="INVALID_SCHEDULE_ROW",
                details={"row_id": str(getattr(row, "id", ""))},
            )
        start = civil_to_instant(host_day, row.start_time, host_timezone)
        end = civil_to_instant(host_day, row.end_time, host_timezone)
        if start >= end:
            # Collapsed by a DST transition
            logger.debug("Skipping empty window %s-%s on %s", row.start_time, row.end_time, host_day)
            continue
        windows.append(Interval(start=start, end=end))
    return windows


def build_availability_windows(
    search: SearchWindow,
    host_timezone: TimezoneLike,
    rules: Sequence[Any],
    overrides: Sequence[Any],
    bookings: Iterable[ReservedBooking] = (),
) -> List[Interval]:
    """
    Build the free intervals for a booker's day.

    Steps: select source rows, convert to instants, clip to the booker's day
    (recording the pre-clip start), merge, then subtract each confirmed
    booking widened by its own buffers.

    Args:
        search: Resolved search window
        host_timezone: Host's IANA timezone
        rules: Weekly rules for the host day's weekday
        overrides: Date overrides for the host day
        bookings: Confirmed bookings that may touch the window

    Returns:
        Sorted, disjoint list of available intervals (possibly empty)
    """
    rows = select_schedule_rows(rules, overrides)
    if not rows:
        return []

    clipped = []
    for window in build_raw_windows(search.host_day, rows, host_timezone):
        piece = clip_interval(window, search.start, search.end)
        if piece is not None:
            clipped.append(piece)

    merged = merge_intervals(clipped)
    if not merged:
        return []

    return subtract_all(merged, (booking.window for booking in bookings))
