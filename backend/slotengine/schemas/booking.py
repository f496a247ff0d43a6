# backend/slotengine/schemas/booking.py
"""Booking request/response schemas."""

import datetime
from typing import List, Optional

from pydantic import EmailStr, Field, field_serializer

from ..core.timezone_utils import format_instant_iso
from ._strict_base import StandardizedModel, StrictRequestModel


class BookingCreate(StrictRequestModel):
    """
    Create-booking request.

    start_instant is an ISO-8601 absolute instant ('2024-03-04T14:00:00.000Z').
    """

    host_id: str
    event_type_id: str
    guest_name: str = Field(..., min_length=1, max_length=255)
    guest_email: EmailStr
    start_instant: str
    booker_timezone: Optional[str] = None


class BookingResponse(StandardizedModel):
    id: str
    host_id: str
    event_type_id: str
    guest_name: str
    guest_email: str
    booking_date: datetime.date
    start_time: datetime.time
    end_time: datetime.time
    start_at: datetime.datetime
    end_at: datetime.datetime
    duration_minutes: int
    status: str
    booker_timezone: str

    @field_serializer("start_at", "end_at")
    def serialize_instant(self, value: datetime.datetime) -> str:
        return format_instant_iso(value)


class BookingEnvelope(StandardizedModel):
    booking: BookingResponse


class BookingListResponse(StandardizedModel):
    bookings: List[BookingResponse]
