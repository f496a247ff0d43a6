# backend/slotengine/routes/v1/hosts.py
"""
Host routes - API v1

Endpoints:
    POST / - Create a host
    GET /{host_id} - Fetch a host
"""

from fastapi import APIRouter, Depends, Path, status

from ...api.dependencies import get_host_service
from ...schemas.host import HostCreate, HostResponse
from ...services.host_service import HostService

router = APIRouter(tags=["hosts-v1"])


@router.post("", response_model=HostResponse, status_code=status.HTTP_201_CREATED)
def create_host(
    payload: HostCreate,
    host_service: HostService = Depends(get_host_service),
) -> HostResponse:
    host = host_service.create_host(
        name=payload.name, email=str(payload.email), timezone=payload.timezone
    )
    return HostResponse.model_validate(host)


@router.get("/{host_id}", response_model=HostResponse)
def get_host(
    host_id: str = Path(...),
    host_service: HostService = Depends(get_host_service),
) -> HostResponse:
    return HostResponse.model_validate(host_service.get_host(host_id))
