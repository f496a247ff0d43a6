"""
Service layer: orchestration between repositories and the pure engine.
"""

from .availability_service import AvailabilityService
from .base import BaseService
from .booking_service import BookingService
from .event_type_service import EventTypeService
from .host_service import HostService

__all__ = [
    "AvailabilityService",
    "BaseService",
    "BookingService",
    "EventTypeService",
    "HostService",
]
