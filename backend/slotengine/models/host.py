# backend/slotengine/models/host.py
"""
Host model.

A host owns event types, a weekly schedule and date overrides. The host's
timezone is the zone every schedule row is interpreted in.
"""

from sqlalchemy import Column, DateTime, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..database import Base


class Host(Base):
    """A person whose time can be booked."""

    __tablename__ = "hosts"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    timezone = Column(String(64), nullable=False, default="UTC")
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    event_types = relationship("EventType", back_populates="host", cascade="all, delete-orphan")
    weekly_rules = relationship("WeeklyRule", back_populates="host", cascade="all, delete-orphan")
    date_overrides = relationship("DateOverride", back_populates="host", cascade="all, delete-orphan")

    def __repr__(self) -> str:
        return f"<Host {self.email} ({self.timezone})>"
