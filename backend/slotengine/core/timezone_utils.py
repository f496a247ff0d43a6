# backend/slotengine/core/timezone_utils.py
"""
Timezone utilities for the scheduling engine.

Converts between civil (wall-clock) time in a named IANA timezone and
absolute UTC instants. All functions are pure: the current time and the
timezone are always passed in, never read from the environment.

Absolute instants are timezone-aware datetimes in UTC. A naive datetime
passed where an instant is expected is assumed to already be UTC.
"""

from datetime import date, datetime, time, timedelta, tzinfo
import re
from typing import List, Tuple, Union

import pytz

from .exceptions import InvalidTimeFormatException, InvalidTimezoneException, ValidationException

TimezoneLike = Union[str, tzinfo]
TimeLike = Union[str, time]

MINUTES_PER_DAY = 24 * 60

# TIME columns cannot hold 24:00
END_OF_DAY = time.max

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2})(?:\.\d+)?)?$")

# Two passes absorb the case where the first offset estimate lands on the
# other side of a transition.
_REFINEMENT_PASSES = 2


def get_timezone(timezone_name: TimezoneLike) -> tzinfo:
    """
    Resolve an IANA timezone name to a tzinfo.

    Args:
        timezone_name: IANA name (e.g. 'America/New_York') or a tzinfo

    Returns:
        tzinfo for the zone

    Raises:
        InvalidTimezoneException: If the identifier is not recognized
    """
    if isinstance(timezone_name, tzinfo):
        return timezone_name
    if not isinstance(timezone_name, str) or not timezone_name.strip():
        raise InvalidTimezoneException(timezone_name)
    try:
        return pytz.timezone(timezone_name.strip())
    except pytz.UnknownTimeZoneError as exc:
        raise InvalidTimezoneException(timezone_name) from exc


def parse_time_minutes(value: TimeLike) -> int:
    """
    Parse a civil time into minutes after midnight.

    Accepts datetime.time objects and 'HH:MM' / 'HH:MM:SS' strings. '24:00'
    is accepted as the end of the day; stored rows carry it as END_OF_DAY.

    Raises:
        InvalidTimeFormatException: If the value is not a valid time
    """
    if isinstance(value, time):
        if value == END_OF_DAY:
            return MINUTES_PER_DAY
        return value.hour * 60 + value.minute
    if not isinstance(value, str):
        raise InvalidTimeFormatException(value)

    match = _TIME_RE.match(value.strip())
    if not match:
        raise InvalidTimeFormatException(value)

    hours, minutes = int(match.group(1)), int(match.group(2))
    seconds = int(match.group(3) or 0)
    if minutes > 59 or seconds > 59:
        raise InvalidTimeFormatException(value)
    if hours > 24 or (hours == 24 and (minutes or seconds)):
        raise InvalidTimeFormatException(value)
    return hours * 60 + minutes


def parse_civil_time(value: TimeLike) -> time:
    """Parse 'HH:MM' into a datetime.time, mapping '24:00' to END_OF_DAY."""
    minutes = parse_time_minutes(value)
    if minutes == MINUTES_PER_DAY:
        return END_OF_DAY
    return time(minutes // 60, minutes % 60)


def format_civil_time(value: time) -> str:
    """Inverse of parse_civil_time."""
    if value == END_OF_DAY:
        return "24:00"
    return value.strftime("%H:%M")


def parse_civil_date(value: Union[str, date]) -> date:
    """Parse a 'YYYY-MM-DD' civil date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError as exc:
        raise ValidationException(
            f"Invalid date format: {value!r} (expected YYYY-MM-DD)",
            code="INVALID_DATE_FORMAT",
            details={"value": str(value)},
        ) from exc


def ensure_utc(instant: datetime) -> datetime:
    """Normalize an instant to an aware UTC datetime."""
    if instant.tzinfo is None:
        return pytz.UTC.localize(instant)
    return instant.astimezone(pytz.UTC)


def parse_instant(value: Union[str, datetime]) -> datetime:
    """Parse an ISO-8601 instant ('...Z' or with offset) into aware UTC."""
    if isinstance(value, datetime):
        return ensure_utc(value)
    raw = str(value).strip()
    if raw.endswith(("Z", "z")):
        raw = raw[:-1] + "+00:00"
    try:
        return ensure_utc(datetime.fromisoformat(raw))
    except ValueError as exc:
        raise ValidationException(
            f"Invalid instant format: {value!r} (expected ISO-8601)",
            code="INVALID_INSTANT_FORMAT",
            details={"value": str(value)},
        ) from exc


def format_instant_iso(instant: datetime) -> str:
    """Serialize an instant as ISO-8601 UTC with millisecond precision and 'Z'."""
    utc = ensure_utc(instant)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"


def _offset_at(naive_utc: datetime, zone: tzinfo) -> timedelta:
    offset = pytz.UTC.localize(naive_utc).astimezone(zone).utcoffset()
    return offset or timedelta(0)


def civil_to_instant(civil_date: date, civil_time: TimeLike, timezone_name: TimezoneLike) -> datetime:
    """
    Convert a wall-clock date+time in a named timezone to an absolute instant.

    The wall time is first read as if it were UTC (the nominal instant). The
    zone's offset at that instant is subtracted, then the offset is
    re-evaluated at the corrected instant and subtracted from the nominal
    instant again. Ambiguous fall-back wall times resolve to one of their
    two occurrences (the earlier one west of UTC, the later one east of it)
    and still round-trip. Wall times inside a spring-forward gap do not
    exist and do not round-trip through format_instant.

    Args:
        civil_date: Calendar date in the zone
        civil_time: Wall-clock time ('HH:MM' or datetime.time)
        timezone_name: IANA timezone name

    Returns:
        Aware UTC datetime
    """
    zone = get_timezone(timezone_name)
    minutes = parse_time_minutes(civil_time)
    nominal = datetime.combine(parse_civil_date(civil_date), time.min) + timedelta(minutes=minutes)

    utc_guess = nominal
    for _ in range(_REFINEMENT_PASSES):
        utc_guess = nominal - _offset_at(utc_guess, zone)

    return pytz.UTC.localize(utc_guess)


def civil_day_bounds_utc(civil_date: date, timezone_name: TimezoneLike) -> Tuple[datetime, datetime]:
    """
    Return the absolute [start, end) range of a civil day in a timezone.

    Days are 23 or 25 hours long across DST transitions.
    """
    day = parse_civil_date(civil_date)
    start = civil_to_instant(day, "00:00", timezone_name)
    end = civil_to_instant(day + timedelta(days=1), "00:00", timezone_name)
    return start, end


def to_civil(instant: datetime, timezone_name: TimezoneLike) -> datetime:
    """Convert an absolute instant to an aware datetime in the given zone."""
    return ensure_utc(instant).astimezone(get_timezone(timezone_name))


def civil_date_of(instant: datetime, timezone_name: TimezoneLike) -> date:
    """Return the civil calendar date an instant falls on in the given zone."""
    return to_civil(instant, timezone_name).date()


def format_instant(instant: datetime, timezone_name: TimezoneLike) -> str:
    """Render an instant as 24-hour, zero-padded 'HH:MM' wall time in the zone."""
    return to_civil(instant, timezone_name).strftime("%H:%M")


def day_of_week(civil_date: date) -> int:
    """Weekday index with 0=Sunday .. 6=Saturday."""
    return parse_civil_date(civil_date).isoweekday() % 7


def utc_dates_spanning(start: datetime, end: datetime, pad_days: int = 1) -> List[date]:
    """
    UTC civil dates touched by [start, end), widened by pad_days on each side.

    Bookings are stored by UTC date, so this is the set of booking dates
    that can hold a booking overlapping the range (buffers included).
    """
    first = ensure_utc(start).date() - timedelta(days=pad_days)
    last = ensure_utc(end).date() + timedelta(days=pad_days)
    return [first + timedelta(days=offset) for offset in range((last - first).days + 1)]
