"""Time utilities for cadence."""

from datetime import UTC, datetime, time, timedelta, tzinfo
from zoneinfo import ZoneInfo


def utc_now() -> datetime:
    """
    Get current UTC time (timezone-aware).

    Returns:
        Current UTC datetime
    """
    return datetime.now(UTC)


def get_timezone(tz_name: str) -> ZoneInfo:
    """
    Get timezone object from IANA timezone name.

    Args:
        tz_name: IANA timezone name (e.g., "Asia/Seoul", "America/New_York")

    Returns:
        Timezone object

    Raises:
        ValueError: Invalid timezone name
    """
    try:
        return ZoneInfo(tz_name)
    except Exception as e:
        raise ValueError(f"Invalid timezone '{tz_name}': {e}") from e


def to_utc(value: datetime) -> datetime:
    """Normalize a datetime to aware UTC; naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def is_wall_time_valid(naive: datetime, tz: tzinfo) -> bool:
    """
    Check whether a wall-clock time exists in a timezone.

    Times inside a daylight-saving gap (e.g. 02:30 on a spring-forward day)
    do not survive a round trip through UTC.
    """
    aware = naive.replace(tzinfo=tz)
    round_trip = aware.astimezone(UTC).astimezone(tz).replace(tzinfo=None)
    return round_trip == naive


def localize(naive: datetime, tz: tzinfo) -> datetime:
    """
    Attach a timezone to a wall-clock time and return it in UTC.

    Ambiguous times resolve to their first occurrence. Nonexistent times are
    moved forward minute by minute to the first valid wall-clock time.

    Args:
        naive: Wall-clock datetime without tzinfo
        tz: Target timezone

    Returns:
        Timezone-aware UTC datetime
    """
    shifted = naive
    while not is_wall_time_valid(shifted, tz):
        shifted += timedelta(minutes=1)
    return shifted.replace(tzinfo=tz, fold=0).astimezone(UTC)


def to_wall_time(value: datetime, tz: tzinfo) -> datetime:
    """Convert an aware instant to naive wall-clock time in ``tz``."""
    return to_utc(value).astimezone(tz).replace(tzinfo=None, fold=0)


def parse_time_of_day(value: str | time) -> time:
    """
    Parse ``HH:MM[:SS[.ffffff]]`` into a time of day.

    Args:
        value: Time string or an existing time

    Returns:
        Parsed time without tzinfo

    Raises:
        ValueError: Malformed time string
    """
    if isinstance(value, time):
        return value
    try:
        parsed = time.fromisoformat(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid time of day '{value}': expected HH:MM[:SS]") from e
    if parsed.tzinfo is not None:
        raise ValueError(f"Invalid time of day '{value}': offsets are not allowed")
    return parsed
