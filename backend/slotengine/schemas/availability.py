# backend/slotengine/schemas/availability.py
"""
Availability schemas.

Times travel as 'HH:MM' strings in the host's timezone ('24:00' ends a
day). They are parsed by the service so malformed values surface as
InvalidTimeFormat (400) rather than request validation errors.
"""

from typing import List, Optional

from pydantic import Field

from ._strict_base import StandardizedModel, StrictRequestModel


class WeeklyRuleCreate(StrictRequestModel):
    host_id: str
    day_of_week: int = Field(..., description="0=Sunday .. 6=Saturday")
    start_time: str
    end_time: str


class DateOverrideCreate(StrictRequestModel):
    host_id: str
    date: str = Field(..., description="Host civil date, YYYY-MM-DD")
    is_available: bool = False
    start_time: Optional[str] = None
    end_time: Optional[str] = None


class WeeklyRuleResponse(StandardizedModel):
    id: str
    day_of_week: int
    start_time: str
    end_time: str


class DateOverrideResponse(StandardizedModel):
    id: str
    date: str
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    is_available: bool


class ScheduleResponse(StandardizedModel):
    weekly: List[WeeklyRuleResponse]
    overrides: List[DateOverrideResponse]


class SlotResponse(StandardizedModel):
    """A bookable slot; start/end are booker-local 'HH:MM'."""

    start: str
    end: str
    start_instant: str


class AvailableSlotsResponse(StandardizedModel):
    date: str
    slots: List[SlotResponse]
