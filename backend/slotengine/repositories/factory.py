# backend/slotengine/repositories/factory.py
"""
Repository Factory.

Provides centralized creation of repository instances,
ensuring consistent initialization and dependency injection.
"""

from typing import TYPE_CHECKING, Optional

from sqlalchemy.orm import Session

# Avoid circular imports
if TYPE_CHECKING:
    from .availability_repository import AvailabilityRepository
    from .booking_repository import BookingRepository
    from .event_type_repository import EventTypeRepository
    from .host_repository import HostRepository


class RepositoryFactory:
    """
    Factory class for creating repository instances.

    timeout_seconds overrides the storage deadline for every repository
    created by a call; None uses settings.storage_timeout_seconds.
    """

    @staticmethod
    def create_availability_repository(
        db: Session, timeout_seconds: Optional[float] = None
    ) -> "AvailabilityRepository":
        """Create repository for schedule rows."""
        from .availability_repository import AvailabilityRepository

        return AvailabilityRepository(db, timeout_seconds=timeout_seconds)

    @staticmethod
    def create_booking_repository(
        db: Session, timeout_seconds: Optional[float] = None
    ) -> "BookingRepository":
        """Create repository for booking operations."""
        from .booking_repository import BookingRepository

        return BookingRepository(db, timeout_seconds=timeout_seconds)

    @staticmethod
    def create_event_type_repository(
        db: Session, timeout_seconds: Optional[float] = None
    ) -> "EventTypeRepository":
        from .event_type_repository import EventTypeRepository

        return EventTypeRepository(db, timeout_seconds=timeout_seconds)

    @staticmethod
    def create_host_repository(
        db: Session, timeout_seconds: Optional[float] = None
    ) -> "HostRepository":
        from .host_repository import HostRepository

        return HostRepository(db, timeout_seconds=timeout_seconds)
