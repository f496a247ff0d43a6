# backend/slotengine/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.

This module provides factory functions that create service instances
bound to the request's database session.
"""

import logging

from fastapi import Depends
from sqlalchemy.orm import Session

from ...services.availability_service import AvailabilityService
from ...services.booking_service import BookingService
from ...services.event_type_service import EventTypeService
from ...services.host_service import HostService
from .database import get_db

logger = logging.getLogger(__name__)


def get_availability_service(db: Session = Depends(get_db)) -> AvailabilityService:
    return AvailabilityService(db)


def get_booking_service(db: Session = Depends(get_db)) -> BookingService:
    """
    Get booking service instance.

    Args:
        db: Database session

    Returns:
        BookingService bound to the request session
    """
    return BookingService(db)


def get_event_type_service(db: Session = Depends(get_db)) -> EventTypeService:
    return EventTypeService(db)


def get_host_service(db: Session = Depends(get_db)) -> HostService:
    return HostService(db)
