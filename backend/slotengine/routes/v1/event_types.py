# backend/slotengine/routes/v1/event_types.py
"""
Event type routes - API v1

Endpoints:
    POST / - Create an event type
    GET / - List a host's active event types
    PATCH /{event_type_id} - Partially update an event type
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status

from ...api.dependencies import get_event_type_service
from ...core.exceptions import ValidationException
from ...schemas.event_type import (
    EventTypeCreate,
    EventTypeListResponse,
    EventTypeResponse,
    EventTypeUpdate,
)
from ...services.event_type_service import EventTypeService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["event-types-v1"])


@router.post("", response_model=EventTypeResponse, status_code=status.HTTP_201_CREATED)
def create_event_type(
    payload: EventTypeCreate,
    event_type_service: EventTypeService = Depends(get_event_type_service),
) -> EventTypeResponse:
    event_type = event_type_service.create_event_type(**payload.model_dump())
    return EventTypeResponse.model_validate(event_type)


@router.get("", response_model=EventTypeListResponse)
def list_event_types(
    host_id: Optional[str] = Query(None),
    event_type_service: EventTypeService = Depends(get_event_type_service),
) -> EventTypeListResponse:
    if not host_id:
        raise ValidationException(
            "Missing required parameters: host_id",
            code="MISSING_PARAMETERS",
            details={"missing": ["host_id"]},
        )
    event_types = event_type_service.list_event_types(host_id)
    return EventTypeListResponse(
        event_types=[EventTypeResponse.model_validate(item) for item in event_types]
    )


@router.patch("/{event_type_id}", response_model=EventTypeResponse)
def update_event_type(
    payload: EventTypeUpdate,
    event_type_id: str = Path(...),
    event_type_service: EventTypeService = Depends(get_event_type_service),
) -> EventTypeResponse:
    updates = payload.model_dump(exclude_unset=True, exclude_none=True)
    event_type = event_type_service.update_event_type(event_type_id, updates)
    return EventTypeResponse.model_validate(event_type)
