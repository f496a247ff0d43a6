# backend/slotengine/schemas/event_type.py
"""Event type request/response schemas."""

from typing import List, Optional

from pydantic import Field

from ._strict_base import StandardizedModel, StrictRequestModel


class EventTypeCreate(StrictRequestModel):
    host_id: str
    title: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    duration_minutes: int = Field(..., gt=0, le=24 * 60)
    buffer_before_minutes: int = Field(0, ge=0)
    buffer_after_minutes: int = Field(0, ge=0)
    min_notice_minutes: int = Field(0, ge=0)


class EventTypeUpdate(StrictRequestModel):
    """Partial update; omitted fields are left unchanged."""

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    duration_minutes: Optional[int] = Field(None, gt=0, le=24 * 60)
    buffer_before_minutes: Optional[int] = Field(None, ge=0)
    buffer_after_minutes: Optional[int] = Field(None, ge=0)
    min_notice_minutes: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None


class EventTypeResponse(StandardizedModel):
    id: str
    host_id: str
    title: str
    description: str
    duration_minutes: int
    buffer_before_minutes: int
    buffer_after_minutes: int
    min_notice_minutes: int
    is_active: bool


class EventTypeListResponse(StandardizedModel):
    event_types: List[EventTypeResponse]
