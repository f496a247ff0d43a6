# backend/slotengine/models/availability.py
"""
Availability models.

Classes:
    WeeklyRule: Recurring weekly availability (host civil time)
    DateOverride: Per-date availability that replaces the weekly rules

Weekdays use 0=Sunday .. 6=Saturday.
"""

from sqlalchemy import Boolean, CheckConstraint, Column, Date, DateTime, ForeignKey, Index, Integer, String, Time
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..database import Base


class WeeklyRule(Base):
    """Recurring availability window for one weekday."""

    __tablename__ = "weekly_rules"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    host_id = Column(String(26), ForeignKey("hosts.id", ondelete="CASCADE"), nullable=False)
    day_of_week = Column(Integer, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    host = relationship("Host", back_populates="weekly_rules")

    __table_args__ = (
        CheckConstraint("day_of_week BETWEEN 0 AND 6", name="check_rule_weekday_range"),
        CheckConstraint("start_time < end_time", name="check_rule_time_order"),
        Index("idx_weekly_rules_host_day", "host_id", "day_of_week"),
    )

    def __repr__(self) -> str:
        return f"<WeeklyRule day={self.day_of_week} {self.start_time}-{self.end_time}>"


class DateOverride(Base):
    """
    Availability statement for a single host civil date.

    Any override row for a date supersedes the weekly rules for that date.
    Unavailable rows may omit times.
    """

    __tablename__ = "date_overrides"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    host_id = Column(String(26), ForeignKey("hosts.id", ondelete="CASCADE"), nullable=False)
    date = Column(Date, nullable=False, index=True)
    start_time = Column(Time, nullable=True)
    end_time = Column(Time, nullable=True)
    is_available = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    host = relationship("Host", back_populates="date_overrides")

    __table_args__ = (
        CheckConstraint(
            "NOT is_available OR (start_time IS NOT NULL AND end_time IS NOT NULL AND start_time < end_time)",
            name="check_override_available_has_times",
        ),
        Index("idx_date_overrides_host_date", "host_id", "date"),
    )

    def __repr__(self) -> str:
        state = "available" if self.is_available else "unavailable"
        return f"<DateOverride {self.date} {state}>"
