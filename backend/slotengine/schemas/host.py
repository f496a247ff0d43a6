# backend/slotengine/schemas/host.py
"""Host request/response schemas."""

import datetime
from typing import Optional

from pydantic import EmailStr, Field

from ._strict_base import StandardizedModel, StrictRequestModel


class HostCreate(StrictRequestModel):
    """Timezone is checked by the service so an unknown zone maps to InvalidTimezone."""

    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    timezone: str = Field(..., min_length=1, max_length=64)


class HostResponse(StandardizedModel):
    id: str
    name: str
    email: str
    timezone: str
    created_at: Optional[datetime.datetime] = None
