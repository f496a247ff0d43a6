"""
Pure scheduling engine.

No I/O and no clock access: callers pass schedule rows, bookings, the
current instant and timezones explicitly.
"""

from .admission import check_admission, find_conflicts, proposed_window
from .intervals import Interval, clip_interval, merge_intervals, subtract_all, subtract_interval
from .slots import Slot, generate_slots
from .types import EventTypeConfig, ReservedBooking
from .windows import SearchWindow, build_availability_windows, resolve_search_window

__all__ = [
    "EventTypeConfig",
    "Interval",
    "ReservedBooking",
    "SearchWindow",
    "Slot",
    "build_availability_windows",
    "check_admission",
    "clip_interval",
    "find_conflicts",
    "generate_slots",
    "merge_intervals",
    "proposed_window",
    "resolve_search_window",
    "subtract_all",
    "subtract_interval",
]
