# backend/slotengine/models/event_type.py
"""
Event type model.

Defines the slot block size (duration + buffer_before + buffer_after) and
the minimum notice for bookings made against it.
"""

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..database import Base


class EventType(Base):
    """A bookable meeting kind offered by a host."""

    __tablename__ = "event_types"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    host_id = Column(String(26), ForeignKey("hosts.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    duration_minutes = Column(Integer, nullable=False)
    buffer_before_minutes = Column(Integer, nullable=False, default=0)
    buffer_after_minutes = Column(Integer, nullable=False, default=0)
    min_notice_minutes = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    host = relationship("Host", back_populates="event_types")

    __table_args__ = (
        CheckConstraint("duration_minutes > 0", name="check_event_duration_positive"),
        CheckConstraint("buffer_before_minutes >= 0", name="check_buffer_before_non_negative"),
        CheckConstraint("buffer_after_minutes >= 0", name="check_buffer_after_non_negative"),
        CheckConstraint("min_notice_minutes >= 0", name="check_min_notice_non_negative"),
    )

    @property
    def block_minutes(self) -> int:
        return (
            int(self.duration_minutes)
            + int(self.buffer_before_minutes or 0)
            + int(self.buffer_after_minutes or 0)
        )

    def __repr__(self) -> str:
        return f"<EventType {self.title} {self.duration_minutes}m>"
