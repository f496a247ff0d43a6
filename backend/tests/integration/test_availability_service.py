"""
Integration tests for AvailabilityService against a real (SQLite) database.

Covers the end-to-end slot query (schedule rows + bookings -> slots) and
schedule management.
"""

from datetime import date, datetime, time

import pytest
import pytz

from slotengine.core.exceptions import (
    InvalidTimezoneException,
    NotFoundException,
    RepositoryTimeoutException,
    StorageTimeoutException,
    ValidationException,
)
from slotengine.core.timezone_utils import END_OF_DAY
from slotengine.models import BookingStatus
from slotengine.services.availability_service import AvailabilityService

UTC = pytz.UTC
MONDAY = date(2024, 3, 4)
NOW = datetime(2024, 3, 1, tzinfo=UTC)


@pytest.fixture
def service(db):
    return AvailabilityService(db)


def starts(result):
    return [slot["start"] for slot in result["slots"]]


class TestGetAvailableSlots:
    def test_plain_weekday(self, service, weekday_host):
        host, event_type = weekday_host
        result = service.get_available_slots(host.id, event_type.id, "2024-03-04", "UTC", now=NOW)

        assert result["date"] == "2024-03-04"
        assert len(result["slots"]) == 16
        assert result["slots"][0] == {
            "start": "09:00",
            "end": "09:30",
            "start_instant": "2024-03-04T09:00:00.000Z",
        }

    def test_booking_buffers_block_time(
        self, service, weekday_host, make_event_type, make_booking
    ):
        host, event_type = weekday_host
        buffered = make_event_type(host, duration=30, buffer_before=15, buffer_after=15)
        make_booking(
            host,
            buffered,
            datetime(2024, 3, 4, 12, 0, tzinfo=UTC),
            datetime(2024, 3, 4, 12, 30, tzinfo=UTC),
        )

        result = service.get_available_slots(host.id, event_type.id, MONDAY, "UTC", now=NOW)

        assert "11:30" not in starts(result)
        assert "12:30" not in starts(result)
        assert "11:00" in starts(result)
        assert "13:00" in starts(result)
        assert len(result["slots"]) == 13

    def test_cancelled_booking_does_not_block(
        self, service, weekday_host, make_booking
    ):
        host, event_type = weekday_host
        make_booking(
            host,
            event_type,
            datetime(2024, 3, 4, 9, 0, tzinfo=UTC),
            datetime(2024, 3, 4, 9, 30, tzinfo=UTC),
            status=BookingStatus.CANCELLED.value,
        )
        result = service.get_available_slots(host.id, event_type.id, MONDAY, "UTC", now=NOW)
        assert len(result["slots"]) == 16

    def test_unavailable_override_closes_day(self, service, weekday_host, make_override):
        host, event_type = weekday_host
        make_override(host, MONDAY, is_available=False)

        result = service.get_available_slots(host.id, event_type.id, MONDAY, "UTC", now=NOW)
        assert result == {"date": "2024-03-04", "slots": []}

    def test_available_override_replaces_weekly_rules(
        self, service, weekday_host, make_override
    ):
        host, event_type = weekday_host
        make_override(host, MONDAY, is_available=True, start=time(18), end=time(19))

        result = service.get_available_slots(host.id, event_type.id, MONDAY, "UTC", now=NOW)
        assert starts(result) == ["18:00", "18:30"]

    def test_booker_in_other_timezone(self, service, weekday_host):
        host, event_type = weekday_host
        result = service.get_available_slots(
            host.id, event_type.id, MONDAY, "America/New_York", now=NOW
        )
        # 09:00-17:00 UTC is 04:00-12:00 EST
        assert starts(result)[0] == "04:00"
        assert result["slots"][-1]["end"] == "12:00"

    def test_host_timezone_drives_rules(self, service, make_host, make_event_type, make_rule):
        host = make_host("Asia/Tokyo")
        event_type = make_event_type(host, duration=60)
        make_rule(host, 1, time(9), time(11))

        result = service.get_available_slots(host.id, event_type.id, MONDAY, "UTC", now=NOW)
        # Tokyo Monday 09:00-11:00 is 00:00-02:00 UTC the same day
        assert starts(result) == ["00:00", "01:00"]

    def test_only_host_day_at_booker_day_midpoint_is_used(
        self, service, make_host, make_event_type, make_rule
    ):
        host = make_host("UTC")
        event_type = make_event_type(host, duration=30)
        make_rule(host, 1, time(15), time(17))
        make_rule(host, 2, time(1), time(3))

        result = service.get_available_slots(
            host.id, event_type.id, "2024-03-05", "Asia/Tokyo", now=NOW
        )
        # Tokyo Tuesday runs Mon 15:00Z to Tue 15:00Z; its midpoint falls on
        # the host's Tuesday, so Monday's 15:00-17:00Z rule never applies
        assert starts(result) == ["10:00", "10:30", "11:00", "11:30"]
        assert not {"00:00", "00:30", "01:00", "01:30"} & set(starts(result))

    def test_default_timezone_used_when_omitted(self, service, weekday_host):
        host, event_type = weekday_host
        result = service.get_available_slots(host.id, event_type.id, MONDAY, now=NOW)
        assert starts(result)[0] == "09:00"

    def test_past_day_is_empty(self, service, weekday_host):
        host, event_type = weekday_host
        later = datetime(2024, 3, 10, tzinfo=UTC)
        result = service.get_available_slots(host.id, event_type.id, MONDAY, "UTC", now=later)
        assert result["slots"] == []

    def test_no_rules_for_weekday(self, service, weekday_host):
        host, event_type = weekday_host
        result = service.get_available_slots(host.id, event_type.id, "2024-03-05", "UTC", now=NOW)
        assert result["slots"] == []

    def test_unknown_host(self, service, weekday_host):
        _, event_type = weekday_host
        with pytest.raises(NotFoundException) as exc_info:
            service.get_available_slots("missing", event_type.id, MONDAY, "UTC", now=NOW)
        assert exc_info.value.code == "HOST_NOT_FOUND"

    def test_inactive_event_type_is_not_found(self, service, weekday_host, make_event_type):
        host, _ = weekday_host
        inactive = make_event_type(host, is_active=False)
        with pytest.raises(NotFoundException) as exc_info:
            service.get_available_slots(host.id, inactive.id, MONDAY, "UTC", now=NOW)
        assert exc_info.value.code == "EVENT_TYPE_NOT_FOUND"

    def test_event_type_of_other_host_is_not_found(
        self, service, weekday_host, make_host, make_event_type
    ):
        host, _ = weekday_host
        foreign = make_event_type(make_host())
        with pytest.raises(NotFoundException):
            service.get_available_slots(host.id, foreign.id, MONDAY, "UTC", now=NOW)

    def test_invalid_booker_timezone(self, service, weekday_host):
        host, event_type = weekday_host
        with pytest.raises(InvalidTimezoneException):
            service.get_available_slots(host.id, event_type.id, MONDAY, "Moon/Base", now=NOW)

    def test_malformed_date(self, service, weekday_host):
        host, event_type = weekday_host
        with pytest.raises(ValidationException):
            service.get_available_slots(host.id, event_type.id, "04/03/2024", "UTC", now=NOW)

    def test_storage_timeout_surfaces_as_retryable(self, service, weekday_host, monkeypatch):
        host, event_type = weekday_host

        def slow(*args, **kwargs):
            raise RepositoryTimeoutException("get weekly rules", 0.5)

        monkeypatch.setattr(service.availability_repository, "get_weekly_rules", slow)
        with pytest.raises(StorageTimeoutException) as exc_info:
            service.get_available_slots(host.id, event_type.id, MONDAY, "UTC", now=NOW)
        assert exc_info.value.details["retryable"] is True


class TestScheduleManagement:
    def test_create_rules_and_read_schedule(self, service, make_host):
        host = make_host()
        service.create_weekly_rule(host.id, 3, "13:00", "17:00")
        service.create_weekly_rule(host.id, 1, "09:00", "24:00")
        service.create_date_override(host.id, "2024-03-06", False)

        schedule = service.get_schedule(host.id)

        assert [(r["day_of_week"], r["start_time"], r["end_time"]) for r in schedule["weekly"]] == [
            (1, "09:00", "24:00"),
            (3, "13:00", "17:00"),
        ]
        assert schedule["overrides"] == [
            {
                "id": schedule["overrides"][0]["id"],
                "date": "2024-03-06",
                "start_time": None,
                "end_time": None,
                "is_available": False,
            }
        ]

    def test_end_of_day_rule_is_stored_as_end_of_day(self, service, make_host):
        rule = service.create_weekly_rule(make_host().id, 1, "22:00", "24:00")
        assert rule.end_time == END_OF_DAY

    def test_invalid_weekday(self, service, make_host):
        with pytest.raises(ValidationException) as exc_info:
            service.create_weekly_rule(make_host().id, 7, "09:00", "10:00")
        assert exc_info.value.code == "INVALID_DAY_OF_WEEK"

    def test_start_must_precede_end(self, service, make_host):
        with pytest.raises(ValidationException) as exc_info:
            service.create_weekly_rule(make_host().id, 1, "10:00", "10:00")
        assert exc_info.value.code == "INVALID_TIME_RANGE"

    def test_available_override_requires_times(self, service, make_host):
        with pytest.raises(ValidationException):
            service.create_date_override(make_host().id, "2024-03-04", True, start_time="09:00")

    def test_rule_for_unknown_host(self, service):
        with pytest.raises(NotFoundException):
            service.create_weekly_rule("missing", 1, "09:00", "10:00")
