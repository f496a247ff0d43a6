# backend/slotengine/services/host_service.py
"""Host management: minimal host records carrying the host timezone."""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..core.exceptions import ConflictException, NotFoundException
from ..core.timezone_utils import get_timezone
from ..models.host import Host
from .base import BaseService

logger = logging.getLogger(__name__)


class HostService(BaseService):
    def __init__(self, db: Session, timeout_seconds: Optional[float] = None):
        super().__init__(db, timeout_seconds=timeout_seconds)
        self.repository = self.repositories.create_host_repository(db, timeout_seconds)

    @BaseService.measure_operation("create_host")
    def create_host(self, name: str, email: str, timezone: str) -> Host:
        """
        Create a host.

        Raises:
            InvalidTimezoneException: Unknown IANA timezone
            ConflictException: Email already registered
        """
        get_timezone(timezone)
        normalized_email = email.strip().lower()

        with self.storage_errors("create_host"):
            if self.repository.get_by_email(normalized_email) is not None:
                raise ConflictException(
                    "A host with this email already exists",
                    code="HOST_EMAIL_EXISTS",
                    details={"email": normalized_email},
                )
            with self.transaction():
                host = self.repository.create(
                    name=name.strip(), email=normalized_email, timezone=timezone.strip()
                )

        self.log_operation("create_host", host_id=host.id)
        return host

    @BaseService.measure_operation("get_host")
    def get_host(self, host_id: str) -> Host:
        with self.storage_errors("get_host"):
            host = self.repository.get_by_id(host_id)
        if host is None:
            raise NotFoundException(f"Host {host_id} not found", code="HOST_NOT_FOUND")
        return host
