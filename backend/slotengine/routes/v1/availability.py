# backend/slotengine/routes/v1/availability.py
"""
Availability routes - API v1

Endpoints:
    GET /slots - Bookable slots for a booker's civil day
    GET /schedule - Host weekly rules and date overrides
    POST /rules - Add a weekly rule
    POST /overrides - Add a date override
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, status

from ...api.dependencies import get_availability_service
from ...core.exceptions import ValidationException
from ...schemas.availability import (
    AvailableSlotsResponse,
    DateOverrideCreate,
    DateOverrideResponse,
    ScheduleResponse,
    WeeklyRuleCreate,
    WeeklyRuleResponse,
)
from ...services.availability_service import AvailabilityService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["availability-v1"])


def _require(**params: Optional[str]) -> None:
    missing = sorted(name for name, value in params.items() if not value)
    if missing:
        raise ValidationException(
            f"Missing required parameters: {', '.join(missing)}",
            code="MISSING_PARAMETERS",
            details={"missing": missing},
        )


@router.get("/slots", response_model=AvailableSlotsResponse)
def get_available_slots(
    host_id: Optional[str] = Query(None),
    event_type_id: Optional[str] = Query(None),
    date: Optional[str] = Query(None, description="Booker civil date, YYYY-MM-DD"),
    booker_timezone: Optional[str] = Query(None),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> Dict[str, Any]:
    """
    Get bookable slots for one civil day in the booker's timezone.

    booker_timezone defaults to the configured default timezone.
    """
    _require(host_id=host_id, event_type_id=event_type_id, date=date)
    return availability_service.get_available_slots(
        host_id=host_id,
        event_type_id=event_type_id,
        target_date=date,
        booker_timezone=booker_timezone,
    )


@router.get("/schedule", response_model=ScheduleResponse)
def get_schedule(
    host_id: Optional[str] = Query(None),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> Dict[str, Any]:
    _require(host_id=host_id)
    return availability_service.get_schedule(host_id)


@router.post("/rules", response_model=WeeklyRuleResponse, status_code=status.HTTP_201_CREATED)
def create_weekly_rule(
    payload: WeeklyRuleCreate,
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> Dict[str, Any]:
    rule = availability_service.create_weekly_rule(
        host_id=payload.host_id,
        day_of_week=payload.day_of_week,
        start_time=payload.start_time,
        end_time=payload.end_time,
    )
    return availability_service.rule_to_dict(rule)


@router.post(
    "/overrides", response_model=DateOverrideResponse, status_code=status.HTTP_201_CREATED
)
def create_date_override(
    payload: DateOverrideCreate,
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> Dict[str, Any]:
    override = availability_service.create_date_override(
        host_id=payload.host_id,
        override_date=payload.date,
        is_available=payload.is_available,
        start_time=payload.start_time,
        end_time=payload.end_time,
    )
    return availability_service.override_to_dict(override)
