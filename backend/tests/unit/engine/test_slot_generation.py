"""
Unit tests for availability windows and slot generation (pure engine).

Schedule rows are plain SimpleNamespace objects; no database involved.
"""

from datetime import date, datetime, time, timedelta
from types import SimpleNamespace

import pytest
import pytz

from slotengine.core.exceptions import InvalidTimezoneException, ValidationException
from slotengine.engine import (
    EventTypeConfig,
    ReservedBooking,
    build_availability_windows,
    generate_slots,
    resolve_search_window,
)

UTC = pytz.UTC
MONDAY = date(2024, 3, 4)
LONG_AGO = datetime(2024, 1, 1, tzinfo=UTC)


def rule(start: time, end: time, weekday: int = 1):
    return SimpleNamespace(day_of_week=weekday, start_time=start, end_time=end, id="rule")


def override(is_available: bool, start: time = None, end: time = None):
    return SimpleNamespace(is_available=is_available, start_time=start, end_time=end, id="ovr")


def resolve(
    target: date,
    rules,
    overrides=(),
    bookings=(),
    event_type=None,
    booker_tz: str = "UTC",
    host_tz: str = "UTC",
    now: datetime = LONG_AGO,
):
    event_type = event_type or EventTypeConfig(duration_minutes=30)
    search = resolve_search_window(target, booker_tz, host_tz)
    windows = build_availability_windows(search, host_tz, rules, list(overrides), bookings)
    return generate_slots(windows, event_type, booker_tz, target, now)


def starts(slots):
    return [slot.start for slot in slots]


class TestScenarios:
    def test_scenario_a_plain_weekday(self):
        slots = resolve(MONDAY, [rule(time(9), time(17))])

        assert len(slots) == 16
        assert starts(slots)[0] == "09:00"
        assert starts(slots)[-1] == "16:30"
        assert slots[-1].end == "17:00"
        assert slots[0].to_dict()["start_instant"] == "2024-03-04T09:00:00.000Z"

    def test_scenario_b_booking_with_buffers_removes_window(self):
        booking = ReservedBooking(
            start=datetime(2024, 3, 4, 12, 0, tzinfo=UTC),
            end=datetime(2024, 3, 4, 12, 30, tzinfo=UTC),
            buffer_before_minutes=15,
            buffer_after_minutes=15,
        )
        slots = resolve(MONDAY, [rule(time(9), time(17))], bookings=[booking])

        blocked_start = datetime(2024, 3, 4, 11, 45, tzinfo=UTC)
        blocked_end = datetime(2024, 3, 4, 12, 45, tzinfo=UTC)
        for slot in slots:
            slot_end = slot.start_instant + timedelta(minutes=30)
            assert not (slot.start_instant < blocked_end and slot_end > blocked_start)

        assert "11:00" in starts(slots)
        assert "11:30" not in starts(slots)
        # Right remainder stays on the 09:00 grid
        assert "12:45" not in starts(slots)
        assert starts(slots)[5] == "13:00"
        assert len(slots) == 5 + 8

    def test_scenario_c_unavailable_override_closes_day(self):
        slots = resolve(MONDAY, [rule(time(9), time(17))], overrides=[override(False)])
        assert slots == []

    def test_available_override_replaces_rules(self):
        slots = resolve(
            MONDAY,
            [rule(time(9), time(17))],
            overrides=[override(False), override(True, time(13), time(14))],
        )
        assert starts(slots) == ["13:00", "13:30"]

    def test_scenario_d_only_midpoint_host_day_is_used(self):
        """
        Booker in Asia/Tokyo (UTC+9) asks for Tuesday 2024-03-05.

        That booker day is [Mon 15:00Z, Tue 15:00Z); its midpoint (Tue 03:00Z)
        falls on host Tuesday. Monday's 15:00-17:00Z tail would be visible to
        the booker, but only Tuesday's rules are consulted.
        """
        tuesday = date(2024, 3, 5)
        search = resolve_search_window(tuesday, "Asia/Tokyo", "UTC")
        assert search.host_day == tuesday

        tuesday_rules = [rule(time(1), time(3), weekday=2)]
        slots = resolve(tuesday, tuesday_rules, booker_tz="Asia/Tokyo")

        assert starts(slots) == ["10:00", "10:30", "11:00", "11:30"]
        assert "00:00" not in starts(slots)


class TestAlignment:
    def test_clipped_window_keeps_host_grid(self):
        """
        Booker at UTC-5 asks for 2024-03-04: day is [05:00Z, next 05:00Z).
        The host window 04:10-08:00Z is clipped to 05:00Z, but slots stay on
        the 04:10 + 30n grid.
        """
        slots = resolve(
            MONDAY,
            [rule(time(4, 10), time(8))],
            booker_tz="Etc/GMT+5",
        )
        assert starts(slots) == ["00:10", "00:40", "01:10", "01:40", "02:10"]

    def test_buffers_shift_grid_and_widen_step(self):
        event_type = EventTypeConfig(30, buffer_before_minutes=10, buffer_after_minutes=20)
        slots = resolve(MONDAY, [rule(time(9), time(12))], event_type=event_type)
        # step 60 min; first start 09:10; last must leave room for buffer_after
        assert starts(slots) == ["09:10", "10:10", "11:10"]

    def test_minimum_notice_filters_early_slots(self):
        event_type = EventTypeConfig(30, min_notice_minutes=60)
        now = datetime(2024, 3, 4, 9, 15, tzinfo=UTC)
        slots = resolve(MONDAY, [rule(time(9), time(12))], event_type=event_type, now=now)
        assert starts(slots)[0] == "10:30"

    def test_restartable(self):
        rules = [rule(time(9), time(17))]
        assert resolve(MONDAY, rules) == resolve(MONDAY, rules)


class TestDaylightSaving:
    def test_spring_forward_host_day(self):
        # 2024-03-10 is a 23 hour day in New York
        sunday = date(2024, 3, 10)
        slots = resolve(
            sunday,
            [rule(time(1), time(5), weekday=0)],
            booker_tz="America/New_York",
            host_tz="America/New_York",
        )
        # 01:00 EST .. 05:00 EDT is three real hours
        assert len(slots) == 6
        assert starts(slots)[0] == "01:00"
        assert "04:30" in starts(slots)

    def test_end_of_day_rule(self):
        slots = resolve(MONDAY, [rule(time(23), time.max)])
        assert starts(slots) == ["23:00", "23:30"]


class TestValidation:
    def test_invalid_booker_timezone(self):
        with pytest.raises(InvalidTimezoneException):
            resolve(MONDAY, [rule(time(9), time(17))], booker_tz="Mars/Olympus")

    def test_available_row_without_times_rejected(self):
        with pytest.raises(ValidationException):
            resolve(MONDAY, [rule(time(9), time(17))], overrides=[override(True)])

    def test_event_type_duration_must_be_positive(self):
        with pytest.raises(ValidationException):
            EventTypeConfig(duration_minutes=0)
