"""
Timestamp utilities for converting schedule wall-clock times to instants.

Schedule times are naive local times in a named reference timezone. The
conversion never uses the host's local timezone and never hardcodes a UTC
offset, since the reference zone observes daylight saving.
"""

import re
import datetime
import pytz
from config import config
from utils.error_handling import ParseError, ConfigError

_DATE_RE = re.compile(r"^\s*(\d{4})-(\d{1,2})-(\d{1,2})\s*$")
_TIME_RE = re.compile(r"^\s*(\d{1,2}):(\d{1,2})\s*$")


def pad_date(date_str: str) -> str:
    """Zero-pad month and day: "2025-3-4" -> "2025-03-04"

    Raises:
        ParseError: If the string is not a year-month-day date
    """
    match = _DATE_RE.match(date_str or "")
    if not match:
        raise ParseError(f"Invalid date: {date_str!r}")
    year, month, day = match.groups()
    return f"{year}-{month.zfill(2)}-{day.zfill(2)}"


def _parse_naive(date_str: str, time_str: str) -> datetime.datetime:
    if not isinstance(date_str, str) or not isinstance(time_str, str):
        raise ParseError(f"Date and time must be strings, got {date_str!r} {time_str!r}")

    padded = pad_date(date_str)
    match = _TIME_RE.match(time_str)
    if not match:
        raise ParseError(f"Invalid start time: {time_str!r}")
    hour, minute = (int(part) for part in match.groups())

    try:
        year, month, day = (int(part) for part in padded.split("-"))
        return datetime.datetime(year, month, day, hour, minute)
    except ValueError as e:
        raise ParseError(f"Invalid date/time {date_str!r} {time_str!r}: {e}") from e


def _zone_offset(naive_utc: datetime.datetime, zone) -> datetime.timedelta:
    """Signed difference between the zone's wall clock and UTC at an instant"""
    local = pytz.utc.localize(naive_utc).astimezone(zone)
    return local.replace(tzinfo=None) - naive_utc


def get_zone(tz_name: str = None):
    """Look up a reference timezone by IANA name

    Raises:
        ConfigError: If the name is unknown
    """
    name = tz_name or config.SCHEDULE_TIMEZONE
    try:
        return pytz.timezone(name)
    except pytz.UnknownTimeZoneError as e:
        raise ConfigError(f"Unknown timezone: {name!r}") from e


def normalize(date_str: str, time_str: str, tz_name: str = None) -> datetime.datetime:
    """Convert a schedule date and start time to an aware UTC datetime

    The wall clock is first read as if it were UTC. That instant is rendered
    through the reference zone, and the difference between the two wall
    clocks is the zone's offset, which is subtracted. The offset is then
    recomputed at the estimated instant so wall times just after a DST
    transition pick up the right offset.

    Args:
        date_str: "YYYY-M-D", padding optional
        time_str: "H:MM" 24h wall clock, padding optional
        tz_name: IANA timezone name (default: configured reference timezone)

    Returns:
        Timezone-aware datetime in UTC

    Raises:
        ParseError: If the date or time is malformed
        ConfigError: If the timezone name is unknown
    """
    naive = _parse_naive(date_str, time_str)
    zone = get_zone(tz_name)

    estimate = naive - _zone_offset(naive, zone)
    instant = naive - _zone_offset(estimate, zone)
    return instant.replace(tzinfo=datetime.timezone.utc)


def to_discord_timestamp(instant: datetime.datetime, style: str = "F") -> str:
    """Render an instant as a Discord timestamp markup (<t:epoch:style>)"""
    return f"<t:{int(instant.timestamp())}:{style}>"
