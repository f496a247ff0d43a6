"""FastAPI dependency providers."""

from .database import get_db
from .services import (
    get_availability_service,
    get_booking_service,
    get_event_type_service,
    get_host_service,
)

__all__ = [
    "get_availability_service",
    "get_booking_service",
    "get_db",
    "get_event_type_service",
    "get_host_service",
]
