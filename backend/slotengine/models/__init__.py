"""
Database models for the scheduling backend.

Importing this package registers every table on ``Base.metadata``.
"""

from .availability import DateOverride, WeeklyRule
from .booking import Booking, BookingStatus
from .event_type import EventType
from .host import Host

__all__ = [
    "Booking",
    "BookingStatus",
    "DateOverride",
    "EventType",
    "Host",
    "WeeklyRule",
]
