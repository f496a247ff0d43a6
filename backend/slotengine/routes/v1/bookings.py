# backend/slotengine/routes/v1/bookings.py
"""
Booking routes - API v1

Endpoints:
    POST / - Admit and create a booking
    GET / - List a host's bookings, optionally for one UTC date
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from ...api.dependencies import get_booking_service
from ...core.exceptions import ValidationException
from ...schemas.booking import (
    BookingCreate,
    BookingEnvelope,
    BookingListResponse,
    BookingResponse,
)
from ...services.booking_service import BookingService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["bookings-v1"])


@router.post("", response_model=BookingEnvelope, status_code=status.HTTP_201_CREATED)
def create_booking(
    booking_data: BookingCreate,
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingEnvelope:
    """
    Create a booking at an absolute start instant.

    Returns 400 on malformed input or insufficient notice, 404 for an unknown
    host or event type, 409 when the slot is taken and 503 when storage is
    unavailable.
    """
    booking = booking_service.create_booking(
        host_id=booking_data.host_id,
        event_type_id=booking_data.event_type_id,
        guest_name=booking_data.guest_name,
        guest_email=str(booking_data.guest_email),
        start_instant=booking_data.start_instant,
        booker_timezone=booking_data.booker_timezone,
    )
    return BookingEnvelope(booking=BookingResponse.model_validate(booking))


@router.get("", response_model=BookingListResponse)
def list_bookings(
    host_id: Optional[str] = Query(None),
    date: Optional[str] = Query(None, description="UTC date, YYYY-MM-DD"),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingListResponse:
    if not host_id:
        raise ValidationException(
            "Missing required parameters: host_id",
            code="MISSING_PARAMETERS",
            details={"missing": ["host_id"]},
        )
    bookings = booking_service.list_bookings(host_id, date)
    return BookingListResponse(
        bookings=[BookingResponse.model_validate(booking) for booking in bookings]
    )
