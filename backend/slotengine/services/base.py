# backend/slotengine/services/base.py
"""
Base Service Pattern for the scheduling backend.

Every service gets:
- a session and the repository factory
- ``transaction()`` for commit/rollback around writes
- ``storage_errors()`` to turn repository failures into retryable domain errors
- ``measure_operation`` timing, reported both in-process and to Prometheus
"""

from contextlib import contextmanager
from dataclasses import dataclass
from functools import wraps
import logging
import time
from typing import Any, Callable, ClassVar, Dict, Iterator, Optional, TypeVar, cast

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import (
    RepositoryException,
    RepositoryTimeoutException,
    StorageFailureException,
    StorageTimeoutException,
)
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.factory import RepositoryFactory

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

SLOW_OPERATION_SECONDS = 1.0


@dataclass
class OperationStats:
    count: int = 0
    failures: int = 0
    total_time: float = 0.0
    max_time: float = 0.0

    def add(self, elapsed: float, success: bool) -> None:
        self.count += 1
        self.total_time += elapsed
        self.max_time = max(self.max_time, elapsed)
        if not success:
            self.failures += 1

    def summary(self) -> Dict[str, float]:
        count = self.count or 1
        return {
            "count": self.count,
            "avg_time": self.total_time / count,
            "success_rate": (self.count - self.failures) / count,
            "max_time": self.max_time,
        }


class BaseService:
    """Common plumbing for service classes; subclasses add the business operations."""

    # service class name -> operation -> stats
    _operation_stats: ClassVar[Dict[str, Dict[str, OperationStats]]] = {}

    def __init__(self, db: Session, timeout_seconds: Optional[float] = None):
        """
        Args:
            db: Database session owned by the caller
            timeout_seconds: Storage deadline for this service's repositories
        """
        self.db = db
        self.timeout_seconds = timeout_seconds
        self.repositories = RepositoryFactory
        self.logger = logging.getLogger(self.__class__.__name__)

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """
        Commit on a clean exit, roll back on any exception.

        SQLAlchemy errors surface as StorageFailureException; anything else
        propagates unchanged.
        """
        try:
            yield self.db
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            self.logger.error("Transaction rolled back: %s", exc)
            raise StorageFailureException(details={"error_type": type(exc).__name__}) from exc
        except Exception:
            self.db.rollback()
            raise

    @contextmanager
    def storage_errors(self, operation: str) -> Iterator[None]:
        """
        Translate repository failures into retryable domain errors.

        RepositoryTimeoutException becomes StorageTimeoutException; any other
        RepositoryException becomes StorageFailureException.
        """
        try:
            yield
        except RepositoryTimeoutException as exc:
            self.logger.error("Storage deadline exceeded during %s: %s", operation, exc)
            raise StorageTimeoutException(exc.operation, exc.timeout_seconds) from exc
        except RepositoryException as exc:
            self.logger.error("Storage failure during %s: %s", operation, exc)
            raise StorageFailureException(details={"operation": operation}) from exc

    @staticmethod
    def measure_operation(operation_name: str) -> Callable[[F], F]:
        """
        Time a service method.

        Usage:
            @BaseService.measure_operation("create_booking")
            def create_booking(self, ...):
                ...
        """

        def decorator(func: F) -> F:
            @wraps(func)
            def wrapper(self: "BaseService", *args: Any, **kwargs: Any) -> Any:
                started = time.perf_counter()
                error_type: Optional[str] = None
                try:
                    return func(self, *args, **kwargs)
                except Exception as exc:
                    error_type = type(exc).__name__
                    raise
                finally:
                    self._finish_operation(
                        operation_name, time.perf_counter() - started, error_type
                    )

            return cast(F, wrapper)

        return decorator

    def _finish_operation(self, operation: str, elapsed: float, error_type: Optional[str]) -> None:
        service_name = self.__class__.__name__
        success = error_type is None
        stats = BaseService._operation_stats.setdefault(service_name, {})
        stats.setdefault(operation, OperationStats()).add(elapsed, success)

        if elapsed > SLOW_OPERATION_SECONDS:
            self.logger.warning("Slow operation: %s took %.2fs", operation, elapsed)

        prometheus_metrics.record_service_operation(
            service=service_name,
            operation=operation,
            duration=elapsed,
            status="success" if success else "error",
            error_type=error_type,
        )

    def log_operation(self, operation: str, **context: Any) -> None:
        self.logger.info("Operation: %s", operation, extra={"operation": operation, **context})

    def get_metrics(self) -> Dict[str, Dict[str, float]]:
        """Per-operation count, average and max time, and success rate for this service."""
        stats = BaseService._operation_stats.get(self.__class__.__name__, {})
        return {operation: entry.summary() for operation, entry in stats.items()}
