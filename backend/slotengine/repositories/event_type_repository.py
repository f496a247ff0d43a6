# backend/slotengine/repositories/event_type_repository.py
"""Event type data access."""

import logging
from typing import List, Optional, cast

from sqlalchemy.orm import Session

from ..models.event_type import EventType
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class EventTypeRepository(BaseRepository[EventType]):
    def __init__(self, db: Session, timeout_seconds: Optional[float] = None):
        super().__init__(db, EventType, timeout_seconds=timeout_seconds)

    def get_active(self, event_type_id: str) -> Optional[EventType]:
        """Get an event type only if it is active."""
        return self._read(
            "get active event type",
            lambda: self.db.query(EventType)
            .filter(EventType.id == event_type_id, EventType.is_active.is_(True))
            .first(),
        )

    def list_active_for_host(self, host_id: str) -> List[EventType]:
        return self._read(
            "list event types",
            lambda: cast(
                List[EventType],
                self.db.query(EventType)
                .filter(EventType.host_id == host_id, EventType.is_active.is_(True))
                .order_by(EventType.created_at, EventType.id)
                .all(),
            ),
        )
