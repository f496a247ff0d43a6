"""Value objects consumed by the pure scheduling engine."""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from ..core.exceptions import ValidationException
from ..core.timezone_utils import ensure_utc
from .intervals import Interval


@dataclass(frozen=True)
class EventTypeConfig:
    """Duration, buffer and notice settings of an event type, in minutes."""

    duration_minutes: int
    buffer_before_minutes: int = 0
    buffer_after_minutes: int = 0
    min_notice_minutes: int = 0

    def __post_init__(self) -> None:
        if self.duration_minutes <= 0:
            raise ValidationException(
                "Event duration must be positive",
                code="INVALID_DURATION",
                details={"duration_minutes": self.duration_minutes},
            )
        for name in ("buffer_before_minutes", "buffer_after_minutes", "min_notice_minutes"):
            if getattr(self, name) < 0:
                raise ValidationException(
                    f"{name} cannot be negative",
                    code="INVALID_EVENT_TYPE",
                    details={name: getattr(self, name)},
                )

    @classmethod
    def from_model(cls, event_type: Any) -> "EventTypeConfig":
        return cls(
            duration_minutes=int(event_type.duration_minutes),
            buffer_before_minutes=int(event_type.buffer_before_minutes or 0),
            buffer_after_minutes=int(event_type.buffer_after_minutes or 0),
            min_notice_minutes=int(event_type.min_notice_minutes or 0),
        )

    @property
    def duration(self) -> timedelta:
        return timedelta(minutes=self.duration_minutes)

    @property
    def buffer_before(self) -> timedelta:
        return timedelta(minutes=self.buffer_before_minutes)

    @property
    def buffer_after(self) -> timedelta:
        return timedelta(minutes=self.buffer_after_minutes)

    @property
    def min_notice(self) -> timedelta:
        return timedelta(minutes=self.min_notice_minutes)

    @property
    def block(self) -> timedelta:
        """Slot step: duration plus both buffers."""
        return self.duration + self.buffer_before + self.buffer_after


@dataclass(frozen=True)
class ReservedBooking:
    """A confirmed booking together with its own event type's buffers."""

    start: datetime
    end: datetime
    buffer_before_minutes: int = 0
    buffer_after_minutes: int = 0
    booking_id: str = ""

    @classmethod
    def from_model(cls, booking: Any) -> "ReservedBooking":
        event_type = getattr(booking, "event_type", None)
        return cls(
            start=ensure_utc(booking.start_at),
            end=ensure_utc(booking.end_at),
            buffer_before_minutes=int(getattr(event_type, "buffer_before_minutes", 0) or 0),
            buffer_after_minutes=int(getattr(event_type, "buffer_after_minutes", 0) or 0),
            booking_id=str(getattr(booking, "id", "") or ""),
        )

    @property
    def window(self) -> Interval:
        """Reserved time including this booking's buffers."""
        return Interval(self.start, self.end).widened(
            timedelta(minutes=self.buffer_before_minutes),
            timedelta(minutes=self.buffer_after_minutes),
        )
