"""
Base repository for the scheduling backend.

Repositories wrap one model each and never commit on their own; services
own the transaction. Reads run under a storage deadline:

- PostgreSQL: a transaction-local statement_timeout, so the server cancels
  the query and the cancellation surfaces as RepositoryTimeoutException
- other dialects: the elapsed time is checked after the read returns
"""

from contextlib import contextmanager
import logging
import time
from typing import Any, Callable, Generic, Iterator, Optional, Type, TypeVar

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import RepositoryException, RepositoryTimeoutException, is_storage_timeout

T = TypeVar("T")
R = TypeVar("R")

logger = logging.getLogger(__name__)


class BaseRepository(Generic[T]):
    """
    Shared data access for a single model.

    Attributes:
        db: Session supplied (and committed) by the service layer
        model: Mapped class this repository reads and writes
        timeout_seconds: Deadline applied to reads
    """

    def __init__(self, db: Session, model: Type[T], timeout_seconds: Optional[float] = None):
        self.db = db
        self.model = model
        self.timeout_seconds = timeout_seconds or settings.storage_timeout_seconds
        self.logger = logging.getLogger(f"{__name__}.{model.__name__}")

    @property
    def dialect_name(self) -> str:
        try:
            return self.db.get_bind().dialect.name
        except SQLAlchemyError:
            return "sqlite"

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """
        Unit of work on the shared session.

        Exceptions roll the session back and propagate untranslated, so
        callers can still tell an IntegrityError from other failures.
        """
        try:
            yield self.db
            self.db.commit()
        except SQLAlchemyError as exc:
            self.logger.error("Rolling back after storage error: %s", exc)
            self.db.rollback()
            raise
        except Exception:
            self.db.rollback()
            raise

    def _apply_statement_timeout(self) -> None:
        if self.dialect_name != "postgresql":
            return
        # is_local=true: reverts at the end of the current transaction
        self.db.execute(
            text("SELECT set_config('statement_timeout', :value, true)"),
            {"value": f"{int(self.timeout_seconds * 1000)}ms"},
        )

    def _read(self, operation: str, fetch: Callable[[], R]) -> R:
        """
        Run a read under the repository deadline.

        Raises:
            RepositoryTimeoutException: If the read times out or finishes past the deadline
            RepositoryException: On any other SQLAlchemy error
        """
        started = time.monotonic()
        try:
            self._apply_statement_timeout()
            result = fetch()
        except OperationalError as exc:
            if is_storage_timeout(exc):
                self.logger.error("%s timed out: %s", operation, exc)
                raise RepositoryTimeoutException(operation, self.timeout_seconds) from exc
            self.logger.error("%s failed: %s", operation, exc)
            raise RepositoryException(f"{operation} failed: {exc}") from exc
        except SQLAlchemyError as exc:
            self.logger.error("%s failed: %s", operation, exc)
            raise RepositoryException(f"{operation} failed: {exc}") from exc

        elapsed = time.monotonic() - started
        if elapsed > self.timeout_seconds:
            self.logger.warning("%s finished after deadline (%.2fs)", operation, elapsed)
            raise RepositoryTimeoutException(operation, self.timeout_seconds)
        return result

    def get_by_id(self, id: str) -> Optional[T]:
        return self._read(
            f"get {self.model.__name__}",
            lambda: self.db.query(self.model).filter(self.model.id == id).first(),
        )

    def create(self, **fields: Any) -> T:
        """
        Add a row and flush it so generated keys are populated.

        Raises:
            RepositoryException: On any failure. An integrity violation is
                chained as ``__cause__`` so callers can inspect it.
        """
        row = self.model(**fields)
        try:
            self.db.add(row)
            self.db.flush()
        except IntegrityError as exc:
            self.db.rollback()
            self.logger.warning("Constraint rejected new %s: %s", self.model.__name__, exc.orig)
            raise RepositoryException(f"Integrity constraint violated: {exc.orig}") from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            self.logger.error("Could not insert %s: %s", self.model.__name__, exc)
            raise RepositoryException(f"Failed to create {self.model.__name__}") from exc
        return row

    def update(self, id: str, **fields: Any) -> Optional[T]:
        """Set the given mapped attributes on an existing row; unknown names are ignored."""
        row = self.get_by_id(id)
        if row is None:
            return None
        for name, value in fields.items():
            if hasattr(row, name):
                setattr(row, name, value)
        try:
            self.db.flush()
        except SQLAlchemyError as exc:
            self.db.rollback()
            self.logger.error("Could not update %s %s: %s", self.model.__name__, id, exc)
            raise RepositoryException(f"Failed to update {self.model.__name__}") from exc
        return row
