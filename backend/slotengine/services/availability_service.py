# backend/slotengine/services/availability_service.py
"""
Availability Service.

Resolves a host's bookable slots for a booker's civil day and manages the
schedule rows (weekly rules and date overrides) that feed it.

Query flow:
1. Load the host and the active event type
2. Map the booker's day to the authoritative host day
3. Fetch overrides, weekly rules and confirmed bookings
4. Build free windows and walk them into slots
"""

from datetime import date, datetime, timezone
import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import NotFoundException, ValidationException
from ..core.timezone_utils import (
    day_of_week as weekday_index,
    ensure_utc,
    format_civil_time,
    get_timezone,
    parse_civil_date,
    parse_civil_time,
    utc_dates_spanning,
)
from ..engine import (
    EventTypeConfig,
    ReservedBooking,
    build_availability_windows,
    generate_slots,
    resolve_search_window,
)
from ..models.availability import DateOverride, WeeklyRule
from ..models.event_type import EventType
from ..models.host import Host
from ..monitoring.prometheus_metrics import prometheus_metrics
from .base import BaseService

logger = logging.getLogger(__name__)


class AvailabilityService(BaseService):
    """Service for slot queries and schedule management."""

    def __init__(self, db: Session, timeout_seconds: Optional[float] = None):
        super().__init__(db, timeout_seconds=timeout_seconds)
        self.host_repository = self.repositories.create_host_repository(db, timeout_seconds)
        self.event_type_repository = self.repositories.create_event_type_repository(
            db, timeout_seconds
        )
        self.availability_repository = self.repositories.create_availability_repository(
            db, timeout_seconds
        )
        self.booking_repository = self.repositories.create_booking_repository(db, timeout_seconds)

    def _load_host_and_event_type(self, host_id: str, event_type_id: str) -> Tuple[Host, EventType]:
        with self.storage_errors("load_host_and_event_type"):
            host = self.host_repository.get_by_id(host_id)
            if host is None:
                raise NotFoundException(f"Host {host_id} not found", code="HOST_NOT_FOUND")
            event_type = self.event_type_repository.get_active(event_type_id)

        if event_type is None or event_type.host_id != host.id:
            raise NotFoundException(
                f"Event type {event_type_id} not found",
                code="EVENT_TYPE_NOT_FOUND",
                details={"host_id": host_id, "event_type_id": event_type_id},
            )
        return host, event_type

    @BaseService.measure_operation("get_available_slots")
    def get_available_slots(
        self,
        host_id: str,
        event_type_id: str,
        target_date: Any,
        booker_timezone: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        """
        Compute bookable slots for a booker's civil day.

        Args:
            host_id: Host ID
            event_type_id: Event type ID (must be active and owned by the host)
            target_date: Booker's civil date ('YYYY-MM-DD' or date)
            booker_timezone: Booker's IANA timezone; defaults to settings.default_timezone
            now: Current instant (defaults to the wall clock)

        Returns:
            {"date": "YYYY-MM-DD", "slots": [{"start", "end", "start_instant"}]}

        Raises:
            ValidationException: Malformed date or timezone
            NotFoundException: Unknown host or event type
            StorageFailureException: Storage read failed or timed out
        """
        tz_name = booker_timezone or settings.default_timezone
        get_timezone(tz_name)
        day = parse_civil_date(target_date)
        current = ensure_utc(now) if now is not None else datetime.now(timezone.utc)

        self.log_operation(
            "get_available_slots",
            host_id=host_id,
            event_type_id=event_type_id,
            date=day.isoformat(),
            booker_timezone=tz_name,
        )

        host, event_type = self._load_host_and_event_type(host_id, event_type_id)
        config = EventTypeConfig.from_model(event_type)
        search = resolve_search_window(day, tz_name, host.timezone)
        empty: Dict[str, Any] = {"date": day.isoformat(), "slots": []}

        if search.end <= current:
            self.logger.debug("Requested day %s is in the past", day)
            return empty

        with self.storage_errors("get_available_slots"):
            overrides = self.availability_repository.get_date_overrides(host.id, search.host_day)
            rules: List[WeeklyRule] = []
            if not overrides:
                rules = self.availability_repository.get_weekly_rules(
                    host.id, weekday_index(search.host_day)
                )
            if not rules and not any(row.is_available for row in overrides):
                prometheus_metrics.record_slots_generated(0)
                return empty
            bookings = self.booking_repository.get_confirmed_bookings(
                host.id, utc_dates_spanning(search.start, search.end)
            )

        windows = build_availability_windows(
            search,
            host.timezone,
            rules,
            overrides,
            [ReservedBooking.from_model(booking) for booking in bookings],
        )
        slots = generate_slots(windows, config, tz_name, day, current)
        prometheus_metrics.record_slots_generated(len(slots))

        return {"date": day.isoformat(), "slots": [slot.to_dict() for slot in slots]}

    @BaseService.measure_operation("get_schedule")
    def get_schedule(self, host_id: str) -> Dict[str, List[Dict[str, Any]]]:
        """Return a host's weekly rules and date overrides in display order."""
        with self.storage_errors("get_schedule"):
            if self.host_repository.get_by_id(host_id) is None:
                raise NotFoundException(f"Host {host_id} not found", code="HOST_NOT_FOUND")
            weekly = self.availability_repository.list_weekly_rules(host_id)
            overrides = self.availability_repository.list_date_overrides(host_id)

        return {
            "weekly": [self.rule_to_dict(rule) for rule in weekly],
            "overrides": [self.override_to_dict(row) for row in overrides],
        }

    @BaseService.measure_operation("create_weekly_rule")
    def create_weekly_rule(
        self, host_id: str, day_of_week: int, start_time: Any, end_time: Any
    ) -> WeeklyRule:
        """
        Add a recurring availability window for a weekday (0=Sunday).

        Raises:
            ValidationException: Bad weekday or start not before end
            NotFoundException: Unknown host
        """
        if not 0 <= int(day_of_week) <= 6:
            raise ValidationException(
                "day_of_week must be between 0 (Sunday) and 6 (Saturday)",
                code="INVALID_DAY_OF_WEEK",
                details={"day_of_week": day_of_week},
            )
        start, end = self._parse_time_range(start_time, end_time)

        with self.storage_errors("create_weekly_rule"):
            self._require_host(host_id)
            with self.transaction():
                rule = self.availability_repository.create_rule(
                    host_id=host_id,
                    day_of_week=int(day_of_week),
                    start_time=start,
                    end_time=end,
                )
        self.log_operation("create_weekly_rule", host_id=host_id, rule_id=rule.id)
        return rule

    @BaseService.measure_operation("create_date_override")
    def create_date_override(
        self,
        host_id: str,
        override_date: Any,
        is_available: bool,
        start_time: Any = None,
        end_time: Any = None,
    ) -> DateOverride:
        """
        Add an override row for a host civil date.

        Unavailable overrides may omit times; available ones need both.
        """
        day = parse_civil_date(override_date)
        start = end = None
        if is_available or start_time is not None or end_time is not None:
            if start_time is None or end_time is None:
                raise ValidationException(
                    "Available overrides require start_time and end_time",
                    code="INVALID_SCHEDULE_ROW",
                )
            start, end = self._parse_time_range(start_time, end_time)

        with self.storage_errors("create_date_override"):
            self._require_host(host_id)
            with self.transaction():
                override = self.availability_repository.create_override(
                    host_id=host_id,
                    date=day,
                    start_time=start,
                    end_time=end,
                    is_available=bool(is_available),
                )
        self.log_operation("create_date_override", host_id=host_id, date=day.isoformat())
        return override

    def _require_host(self, host_id: str) -> Host:
        host = self.host_repository.get_by_id(host_id)
        if host is None:
            raise NotFoundException(f"Host {host_id} not found", code="HOST_NOT_FOUND")
        return host

    @staticmethod
    def _parse_time_range(start_time: Any, end_time: Any):
        start = parse_civil_time(start_time)
        end = parse_civil_time(end_time)
        if start >= end:
            raise ValidationException(
                "start_time must be before end_time",
                code="INVALID_TIME_RANGE",
                details={"start_time": str(start_time), "end_time": str(end_time)},
            )
        return start, end

    @staticmethod
    def rule_to_dict(rule: WeeklyRule) -> Dict[str, Any]:
        return {
            "id": rule.id,
            "day_of_week": rule.day_of_week,
            "start_time": format_civil_time(rule.start_time),
            "end_time": format_civil_time(rule.end_time),
        }

    @staticmethod
    def override_to_dict(row: DateOverride) -> Dict[str, Any]:
        return {
            "id": row.id,
            "date": row.date.isoformat() if isinstance(row.date, date) else str(row.date),
            "start_time": format_civil_time(row.start_time) if row.start_time is not None else None,
            "end_time": format_civil_time(row.end_time) if row.end_time is not None else None,
            "is_available": bool(row.is_available),
        }
