# backend/slotengine/services/event_type_service.py
"""
Event Type Service.

Event types carry the duration, buffers and minimum notice the slot
generator and admission check work from. Inactive event types are hidden
from listings and unknown to slot queries and bookings.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.exceptions import NotFoundException, ValidationException
from ..engine import EventTypeConfig
from ..models.event_type import EventType
from .base import BaseService

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = frozenset(
    {
        "title",
        "description",
        "duration_minutes",
        "buffer_before_minutes",
        "buffer_after_minutes",
        "min_notice_minutes",
        "is_active",
    }
)


class EventTypeService(BaseService):
    def __init__(self, db: Session, timeout_seconds: Optional[float] = None):
        super().__init__(db, timeout_seconds=timeout_seconds)
        self.repository = self.repositories.create_event_type_repository(db, timeout_seconds)
        self.host_repository = self.repositories.create_host_repository(db, timeout_seconds)

    @BaseService.measure_operation("create_event_type")
    def create_event_type(
        self,
        host_id: str,
        title: str,
        duration_minutes: int,
        buffer_before_minutes: int = 0,
        buffer_after_minutes: int = 0,
        min_notice_minutes: int = 0,
        description: str = "",
    ) -> EventType:
        """
        Create an event type for a host.

        Raises:
            ValidationException: Non-positive duration or negative buffers/notice
            NotFoundException: Unknown host
        """
        EventTypeConfig(
            duration_minutes=duration_minutes,
            buffer_before_minutes=buffer_before_minutes,
            buffer_after_minutes=buffer_after_minutes,
            min_notice_minutes=min_notice_minutes,
        )
        with self.storage_errors("create_event_type"):
            if self.host_repository.get_by_id(host_id) is None:
                raise NotFoundException(f"Host {host_id} not found", code="HOST_NOT_FOUND")
            with self.transaction():
                event_type = self.repository.create(
                    host_id=host_id,
                    title=title,
                    description=description or "",
                    duration_minutes=duration_minutes,
                    buffer_before_minutes=buffer_before_minutes,
                    buffer_after_minutes=buffer_after_minutes,
                    min_notice_minutes=min_notice_minutes,
                    is_active=True,
                )
        self.log_operation("create_event_type", host_id=host_id, event_type_id=event_type.id)
        return event_type

    @BaseService.measure_operation("list_event_types")
    def list_event_types(self, host_id: str) -> List[EventType]:
        with self.storage_errors("list_event_types"):
            return self.repository.list_active_for_host(host_id)

    @BaseService.measure_operation("update_event_type")
    def update_event_type(self, event_type_id: str, updates: Dict[str, Any]) -> EventType:
        """
        Apply a partial update.

        The merged duration, buffers and notice are validated together before
        anything is written.
        """
        unknown = set(updates) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationException(
                "Unknown event type fields",
                code="INVALID_EVENT_TYPE",
                details={"fields": sorted(unknown)},
            )

        with self.storage_errors("update_event_type"):
            event_type = self.repository.get_by_id(event_type_id)
            if event_type is None:
                raise NotFoundException(
                    f"Event type {event_type_id} not found", code="EVENT_TYPE_NOT_FOUND"
                )

            merged = {
                name: updates.get(name, getattr(event_type, name))
                for name in (
                    "duration_minutes",
                    "buffer_before_minutes",
                    "buffer_after_minutes",
                    "min_notice_minutes",
                )
            }
            EventTypeConfig(**merged)

            with self.transaction():
                updated = self.repository.update(event_type_id, **updates)

        self.log_operation("update_event_type", event_type_id=event_type_id, fields=sorted(updates))
        return updated
