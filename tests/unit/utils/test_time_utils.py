"""Pure unit tests for time utilities."""

from datetime import UTC, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from cadence.utils.time import (
    get_timezone,
    is_wall_time_valid,
    localize,
    parse_time_of_day,
    to_utc,
    to_wall_time,
    utc_now,
)

NEW_YORK = ZoneInfo("America/New_York")


class TestGetTimezoneErrorHandling:
    """Test get_timezone error handling."""

    def test_invalid_timezone_raises_valueerror(self):
        """Test that invalid timezone name raises ValueError with proper message."""
        with pytest.raises(ValueError) as exc_info:
            get_timezone("Invalid/Nonexistent/Timezone")

        error_msg = str(exc_info.value)
        assert "Invalid timezone" in error_msg
        assert "Invalid/Nonexistent/Timezone" in error_msg

    def test_none_like_timezone_raises_valueerror(self):
        """Test that various invalid inputs raise ValueError."""
        invalid_names = ["", " ", "123", "UTC/Invalid"]

        for invalid_name in invalid_names:
            with pytest.raises(ValueError):
                get_timezone(invalid_name)

    def test_valid_timezone(self):
        """IANA names resolve to ZoneInfo."""
        assert get_timezone("Asia/Seoul") == ZoneInfo("Asia/Seoul")


class TestUtcNow:
    """Test utc_now function."""

    def test_utc_now_returns_timezone_aware_datetime(self):
        """Test that utc_now returns timezone-aware datetime."""
        now = utc_now()

        assert now.tzinfo is not None

    def test_utc_now_is_utc_timezone(self):
        """Test that utc_now returns UTC timezone."""
        now = utc_now()

        # UTC offset should be 0
        assert now.utcoffset().total_seconds() == 0


class TestToUtc:
    """Test UTC normalization."""

    def test_naive_is_taken_as_utc(self):
        """Naive datetimes get UTC attached."""
        assert to_utc(datetime(2024, 1, 1, 9)) == datetime(2024, 1, 1, 9, tzinfo=UTC)

    def test_aware_is_converted(self):
        """Offsets are converted, not dropped."""
        kst = timezone(timedelta(hours=9))
        converted = to_utc(datetime(2024, 1, 1, 9, tzinfo=kst))
        assert converted == datetime(2024, 1, 1, 0, tzinfo=UTC)
        assert converted.tzinfo is UTC


class TestWallTime:
    """Wall-clock conversions around daylight-saving changes."""

    def test_gap_is_invalid(self):
        """02:30 does not exist on the spring-forward day."""
        assert not is_wall_time_valid(datetime(2024, 3, 10, 2, 30), NEW_YORK)
        assert is_wall_time_valid(datetime(2024, 3, 10, 3, 30), NEW_YORK)

    def test_overlap_is_valid(self):
        """01:30 exists twice on the fall-back day."""
        assert is_wall_time_valid(datetime(2024, 11, 3, 1, 30), NEW_YORK)

    def test_localize_moves_past_gap(self):
        """Nonexistent times move to the first valid minute."""
        assert localize(datetime(2024, 3, 10, 2, 30), NEW_YORK) == datetime(
            2024, 3, 10, 7, tzinfo=UTC
        )

    def test_localize_overlap_first_occurrence(self):
        """Ambiguous times resolve to the daylight-saving occurrence."""
        assert localize(datetime(2024, 11, 3, 1, 30), NEW_YORK) == datetime(
            2024, 11, 3, 5, 30, tzinfo=UTC
        )

    def test_to_wall_time(self):
        """Instants become naive local times."""
        wall = to_wall_time(datetime(2024, 11, 3, 6, 30, tzinfo=UTC), NEW_YORK)
        assert wall == datetime(2024, 11, 3, 1, 30)
        assert wall.tzinfo is None
        assert wall.fold == 0


class TestParseTimeOfDay:
    """Test parse_time_of_day."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("08:30", time(8, 30)),
            ("17:00:05", time(17, 0, 5)),
            (time(9), time(9)),
        ],
    )
    def test_valid(self, value, expected):
        """HH:MM and HH:MM:SS are accepted."""
        assert parse_time_of_day(value) == expected

    @pytest.mark.parametrize("value", ["25:00", "noon", "08:00+09:00"])
    def test_invalid(self, value):
        """Malformed values raise ValueError."""
        with pytest.raises(ValueError, match="Invalid time of day"):
            parse_time_of_day(value)
