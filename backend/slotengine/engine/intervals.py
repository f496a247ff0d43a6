# backend/slotengine/engine/intervals.py
"""
Half-open interval algebra over absolute instants.

Intervals carry an optional ``original_start``: the start of the schedule
window they were cut from, before clipping to a requested day or splitting
around a booking. Slot generation anchors its stepping grid there so slot
boundaries stay aligned to the host's recurring schedule.
"""

from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from ..core.exceptions import ValidationException


@dataclass(frozen=True)
class Interval:
    """Half-open [start, end) range of absolute instants."""

    start: datetime
    end: datetime
    original_start: Optional[datetime] = None

    def __post_init__(self) -> None:
        if self.start >= self.end:
            raise ValidationException(
                "Interval start must be before end",
                code="INVALID_INTERVAL",
                details={"start": self.start.isoformat(), "end": self.end.isoformat()},
            )

    @property
    def anchor(self) -> datetime:
        """Start of the stepping grid for slot generation."""
        return self.original_start if self.original_start is not None else self.start

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def overlaps(self, other: "Interval") -> bool:
        return self.start < other.end and self.end > other.start

    def widened(self, before: timedelta, after: timedelta) -> "Interval":
        """Return a copy extended outward by the given paddings."""
        return replace(self, start=self.start - before, end=self.end + after)


def _earliest(a: Optional[datetime], b: Optional[datetime]) -> Optional[datetime]:
    candidates = [value for value in (a, b) if value is not None]
    return min(candidates) if candidates else None


def merge_intervals(intervals: Iterable[Interval]) -> List[Interval]:
    """
    Merge overlapping or adjacent intervals.

    Output is sorted ascending, pairwise disjoint and non-adjacent. When two
    intervals merge, the earlier ``original_start`` is kept.

    Args:
        intervals: Intervals in any order

    Returns:
        New list of merged intervals
    """
    ordered = sorted(intervals, key=lambda interval: interval.start)
    if not ordered:
        return []

    merged: List[Interval] = []
    current = ordered[0]

    for candidate in ordered[1:]:
        if candidate.start <= current.end:
            current = Interval(
                start=current.start,
                end=max(current.end, candidate.end),
                original_start=_earliest(current.original_start, candidate.original_start),
            )
        else:
            merged.append(current)
            current = candidate

    merged.append(current)
    return merged


def subtract_interval(intervals: Iterable[Interval], removed: Interval) -> List[Interval]:
    """
    Remove ``removed`` from every interval, splitting where necessary.

    Remainders keep their parent's ``original_start``. An interval fully
    covered by ``removed`` produces nothing.
    """
    result: List[Interval] = []

    for interval in intervals:
        if removed.end <= interval.start or removed.start >= interval.end:
            result.append(interval)
            continue

        if removed.start > interval.start:
            result.append(replace(interval, end=removed.start))
        if removed.end < interval.end:
            result.append(replace(interval, start=removed.end))

    return result


def subtract_all(intervals: Iterable[Interval], removals: Iterable[Interval]) -> List[Interval]:
    """Subtract each removal in turn."""
    remaining = list(intervals)
    for removed in removals:
        remaining = subtract_interval(remaining, removed)
    return remaining


def clip_interval(interval: Interval, lower: datetime, upper: datetime) -> Optional[Interval]:
    """
    Clip an interval to [lower, upper).

    The pre-clip start is recorded as ``original_start`` unless one is
    already set. Returns None when nothing remains.
    """
    start = max(interval.start, lower)
    end = min(interval.end, upper)
    if start >= end:
        return None
    return Interval(start=start, end=end, original_start=interval.anchor)
