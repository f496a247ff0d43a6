"""
Repository layer: the storage collaborator behind the services.

Repositories never commit; services own the transaction.
"""

from .availability_repository import AvailabilityRepository
from .base_repository import BaseRepository
from .booking_repository import BookingRepository
from .event_type_repository import EventTypeRepository
from .factory import RepositoryFactory
from .host_repository import HostRepository

__all__ = [
    "AvailabilityRepository",
    "BaseRepository",
    "BookingRepository",
    "EventTypeRepository",
    "HostRepository",
    "RepositoryFactory",
]
