# backend/slotengine/core/exceptions.py
"""
Domain-specific exceptions for the scheduling engine.

These exceptions provide clear, business-focused error messages
that can be caught and handled appropriately at the API layer.

Taxonomy:
    ValidationException         malformed input (400, never retried)
      InvalidTimezoneException  unknown IANA timezone identifier
      InvalidTimeFormatException  time string not parseable as HH:MM
    NotFoundException           unknown host / event type (404)
    InsufficientNoticeException booking inside the minimum-notice window (400)
    BookingConflictException    overlap with a confirmed booking (409)
    StorageFailureException     storage read/write failure, retryable (503)
      StorageTimeoutException   storage deadline exceeded
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "code": self.code,
            "details": self.details,
        }

    def to_http_exception(self) -> HTTPException:
        """Default conversion to HTTPException (override in subclasses)."""
        return HTTPException(status_code=self.status_code, detail=self.to_dict())


class ValidationException(DomainException):
    """Raised when business validation fails."""

    status_code = status.HTTP_400_BAD_REQUEST


class InvalidTimezoneException(ValidationException):
    """Raised when a timezone identifier is not recognized."""

    def __init__(self, timezone_name: Any):
        super().__init__(
            message=f"Unknown timezone: {timezone_name!r}",
            code="INVALID_TIMEZONE",
            details={"timezone": str(timezone_name)},
        )


class InvalidTimeFormatException(ValidationException):
    """Raised when a civil time string is not HH:MM."""

    def __init__(self, value: Any):
        super().__init__(
            message=f"Invalid time format: {value!r} (expected HH:MM)",
            code="INVALID_TIME_FORMAT",
            details={"value": str(value)},
        )


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    status_code = status.HTTP_404_NOT_FOUND


class ConflictException(DomainException):
    """Raised when there's a conflict with existing data."""

    status_code = status.HTTP_409_CONFLICT


class BusinessRuleException(DomainException):
    """Raised when a business rule is violated."""

    status_code = status.HTTP_400_BAD_REQUEST


class ServiceException(DomainException):
    """Raised when a service operation fails."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message or "An error occurred processing your request",
                "code": self.code,
                "details": self.details if self.details else {},
            },
        )


# Specific business exceptions


class BookingConflictException(ConflictException):
    """Raised when a booking conflicts with existing bookings."""

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message or "This time slot conflicts with an existing booking",
            code="BOOKING_CONFLICT",
            details=details or {},
        )


class InsufficientNoticeException(BusinessRuleException):
    """Raised when booking doesn't meet minimum advance notice."""

    def __init__(self, required_minutes: int, provided_minutes: float):
        super().__init__(
            message=f"Minimum {required_minutes} minutes notice required",
            code="INSUFFICIENT_NOTICE",
            details={
                "required_minutes": required_minutes,
                "provided_minutes": provided_minutes,
            },
        )


class StorageFailureException(ServiceException):
    """Raised when the storage collaborator fails; safe to retry the operation."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    def __init__(
        self,
        message: str = "Storage temporarily unavailable. Please retry.",
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        merged = {"retryable": True}
        merged.update(details or {})
        super().__init__(message=message, code=code or "STORAGE_FAILURE", details=merged)

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=self.status_code,
            detail=self.to_dict(),
            headers={"Retry-After": "2"},
        )


class StorageTimeoutException(StorageFailureException):
    """Raised when a storage call exceeds its deadline."""

    def __init__(self, operation: str, timeout_seconds: float):
        super().__init__(
            message=f"Storage operation '{operation}' exceeded {timeout_seconds:g}s deadline",
            code="STORAGE_TIMEOUT",
            details={"operation": operation, "timeout_seconds": timeout_seconds},
        )


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    This exception is used when data access operations fail,
    such as database connection issues, query failures, or
    constraint violations.
    """


class RepositoryTimeoutException(RepositoryException):
    """Raised when a storage call exceeds its deadline."""

    def __init__(self, operation: str, timeout_seconds: float):
        self.operation = operation
        self.timeout_seconds = timeout_seconds
        super().__init__(f"{operation} exceeded {timeout_seconds:g}s deadline")


def is_storage_timeout(exc: BaseException) -> bool:
    """
    Check if an exception indicates a storage deadline overrun.

    Covers PostgreSQL statement_timeout cancellation, connection pool
    checkout timeouts and SQLite giving up on its busy timeout.
    """
    error_str = str(exc).lower()
    return (
        "statement timeout" in error_str
        or "database is locked" in error_str
        or "canceling statement" in error_str
        or "queuepool" in error_str
        or ("timeout" in error_str and ("connection" in error_str or "pool" in error_str))
    )
