# backend/slotengine/repositories/host_repository.py
"""Host data access."""

import logging
from typing import Optional

from sqlalchemy import text
from sqlalchemy.orm import Session

from ..models.host import Host
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)

# Rewrites the row unchanged; on SQLite this takes the database write lock
_SQLITE_WRITE_LOCK = text("UPDATE hosts SET id = id WHERE id = :host_id")


class HostRepository(BaseRepository[Host]):
    def __init__(self, db: Session, timeout_seconds: Optional[float] = None):
        super().__init__(db, Host, timeout_seconds=timeout_seconds)

    def get_by_email(self, email: str) -> Optional[Host]:
        return self._read(
            "get host by email",
            lambda: self.db.query(Host).filter(Host.email == email).first(),
        )

    def lock_for_update(self, host_id: str) -> Optional[Host]:
        """
        Load the host row and hold a write lock on it until the transaction ends.

        Serializes booking admission per host: a second admission blocks here
        until the first commits, then reads its booking.

        PostgreSQL and MySQL use SELECT ... FOR UPDATE. SQLite has no row
        locks and pysqlite only opens a transaction at the first write, so a
        no-op UPDATE is issued first; it begins the transaction and takes the
        database RESERVED lock, and competing writers wait out the busy
        timeout behind it.
        """

        def fetch() -> Optional[Host]:
            if self.dialect_name == "sqlite":
                self.db.execute(_SQLITE_WRITE_LOCK, {"host_id": host_id})
            return self.db.query(Host).filter(Host.id == host_id).with_for_update().first()

        return self._read("lock host", fetch)
