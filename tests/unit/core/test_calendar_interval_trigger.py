"""Unit tests for CalendarIntervalTrigger."""

from datetime import UTC, datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from cadence.core.common.exceptions import ValidationError
from cadence.core.common.types import IntervalUnit
from cadence.core.triggers import CalendarIntervalTrigger

NEW_YORK = ZoneInfo("America/New_York")


def dt(year, month, day, hour=0, minute=0, second=0, tz=UTC):
    return datetime(year, month, day, hour, minute, second, tzinfo=tz)


def fire_times(trigger, count):
    """First ``count`` fire times, driving the trigger like a scheduler."""
    times = [trigger.compute_first_fire_time()]
    while len(times) < count and trigger.next_fire_time is not None:
        trigger.triggered()
        times.append(trigger.next_fire_time)
    return times


class TestCalendarIntervalValidation:
    """Constructor validation."""

    def test_interval_must_be_positive(self):
        """Zero units between fires is meaningless."""
        with pytest.raises(ValidationError, match="Repeat interval"):
            CalendarIntervalTrigger("t", repeat_interval=0)

    def test_repeat_count(self):
        """Counts below -1 are rejected."""
        with pytest.raises(ValidationError, match="Repeat count"):
            CalendarIntervalTrigger("t", repeat_count=-5)

    def test_unknown_unit(self):
        """Units are validated."""
        with pytest.raises(ValueError):
            CalendarIntervalTrigger("t", repeat_interval_unit="fortnight")

    def test_unit_from_string(self):
        """Units may be given by value."""
        trigger = CalendarIntervalTrigger("t", repeat_interval_unit="week")
        assert trigger.repeat_interval_unit is IntervalUnit.WEEK


class TestCalendarIntervalStepping:
    """Calendar arithmetic."""

    def test_monthly_clips_without_drift(self, clock):
        """Jan 31 -> Feb 29 -> Mar 31 -> Apr 30."""
        trigger = CalendarIntervalTrigger(
            "t",
            start_time=dt(2024, 1, 31, 10),
            repeat_interval_unit=IntervalUnit.MONTH,
            clock=clock,
        )
        assert fire_times(trigger, 4) == [
            dt(2024, 1, 31, 10),
            dt(2024, 2, 29, 10),
            dt(2024, 3, 31, 10),
            dt(2024, 4, 30, 10),
        ]

    def test_yearly_from_leap_day(self, clock):
        """Feb 29 clips to Feb 28 and comes back in leap years."""
        trigger = CalendarIntervalTrigger(
            "t",
            start_time=dt(2024, 2, 29),
            repeat_interval_unit=IntervalUnit.YEAR,
            clock=clock,
        )
        assert fire_times(trigger, 5) == [
            dt(2024, 2, 29),
            dt(2025, 2, 28),
            dt(2026, 2, 28),
            dt(2027, 2, 28),
            dt(2028, 2, 29),
        ]

    def test_every_two_hours(self):
        """Hour units step in elapsed time."""
        trigger = CalendarIntervalTrigger(
            "t",
            start_time=dt(2024, 1, 1),
            repeat_interval=2,
            repeat_interval_unit=IntervalUnit.HOUR,
        )
        assert trigger.get_fire_time_after(dt(2024, 1, 1, 3)) == dt(2024, 1, 1, 4)

    def test_weekly(self):
        """Week units keep the weekday."""
        trigger = CalendarIntervalTrigger(
            "t", start_time=dt(2024, 1, 1, 9), repeat_interval_unit=IntervalUnit.WEEK
        )
        assert trigger.get_fire_time_after(dt(2024, 1, 20)) == dt(2024, 1, 22, 9)

    def test_before_start_returns_start(self):
        """The first fire is the start time."""
        trigger = CalendarIntervalTrigger("t", start_time=dt(2024, 1, 1, 9))
        assert trigger.get_fire_time_after(dt(2023, 1, 1)) == dt(2024, 1, 1, 9)

    def test_far_reference_time(self):
        """Large gaps are estimated, not iterated one by one."""
        trigger = CalendarIntervalTrigger(
            "t", start_time=dt(2000, 1, 15), repeat_interval_unit=IntervalUnit.MONTH
        )
        assert trigger.get_fire_time_after(dt(2090, 6, 20)) == dt(2090, 7, 15)


class TestCalendarIntervalDaylightSaving:
    """Wall-clock stepping across DST changes."""

    def test_daily_keeps_hour_across_spring_forward(self, clock):
        """09:00 stays 09:00 local, so the UTC hour moves."""
        trigger = CalendarIntervalTrigger(
            "t",
            start_time=dt(2024, 3, 9, 9, tz=NEW_YORK),
            timezone="America/New_York",
            clock=clock,
        )
        times = fire_times(trigger, 2)
        assert times == [dt(2024, 3, 9, 14), dt(2024, 3, 10, 13)]
        assert [t.astimezone(NEW_YORK).hour for t in times] == [9, 9]

    def test_nonexistent_hour_moves_past_gap(self):
        """02:30 on the spring-forward day fires at 03:00."""
        trigger = CalendarIntervalTrigger(
            "t",
            start_time=dt(2024, 3, 9, 2, 30, tz=NEW_YORK),
            timezone="America/New_York",
        )
        fire_time = trigger.get_fire_time_after(dt(2024, 3, 9, 7, 30))
        assert fire_time.astimezone(NEW_YORK) == dt(2024, 3, 10, 3, tz=NEW_YORK)

    def test_skip_day_if_hour_does_not_exist(self):
        """With the flag the missing day is skipped entirely."""
        trigger = CalendarIntervalTrigger(
            "t",
            start_time=dt(2024, 3, 9, 2, 30, tz=NEW_YORK),
            timezone="America/New_York",
            skip_day_if_hour_does_not_exist=True,
        )
        fire_time = trigger.get_fire_time_after(dt(2024, 3, 9, 7, 30))
        assert fire_time.astimezone(NEW_YORK) == dt(2024, 3, 11, 2, 30, tz=NEW_YORK)


class TestCalendarIntervalBounds:
    """Repeat count, end time and final fire time."""

    def test_repeat_count_limits_fires(self, clock):
        """repeat_count=2 -> three fires."""
        trigger = CalendarIntervalTrigger(
            "t", start_time=dt(2024, 1, 1), repeat_count=2, clock=clock
        )
        assert fire_times(trigger, 10) == [
            dt(2024, 1, 1),
            dt(2024, 1, 2),
            dt(2024, 1, 3),
            None,
        ]
        assert trigger.times_triggered == 3

    def test_end_time_is_exclusive(self):
        """A fire at the end time is dropped."""
        trigger = CalendarIntervalTrigger(
            "t", start_time=dt(2024, 1, 1), end_time=dt(2024, 1, 3)
        )
        assert trigger.get_fire_time_after(dt(2024, 1, 1)) == dt(2024, 1, 2)
        assert trigger.get_fire_time_after(dt(2024, 1, 2)) is None

    def test_final_fire_time_from_count(self):
        """start + count * interval."""
        trigger = CalendarIntervalTrigger(
            "t",
            start_time=dt(2024, 1, 31),
            repeat_interval_unit=IntervalUnit.MONTH,
            repeat_count=1,
        )
        assert trigger.final_fire_time == dt(2024, 2, 29)

    def test_final_fire_time_from_end(self):
        """Last fire strictly before the end time."""
        trigger = CalendarIntervalTrigger(
            "t", start_time=dt(2024, 1, 1), end_time=dt(2024, 1, 5)
        )
        assert trigger.final_fire_time == dt(2024, 1, 4)

    def test_final_fire_time_unbounded(self):
        """No count and no end -> None."""
        assert CalendarIntervalTrigger("t", start_time=dt(2024, 1, 1)).final_fire_time is None

    def test_to_dict(self):
        """Snapshot carries the interval definition."""
        trigger = CalendarIntervalTrigger(
            "t",
            start_time=dt(2024, 1, 1),
            repeat_interval=3,
            repeat_interval_unit=IntervalUnit.MONTH,
            timezone="Europe/Berlin",
        )
        data = trigger.to_dict()
        assert data["trigger_args"] == {
            "repeat_interval": 3,
            "repeat_interval_unit": "month",
            "repeat_count": -1,
            "timezone": "Europe/Berlin",
            "skip_day_if_hour_does_not_exist": False,
        }
        assert data["times_triggered"] == 0


class TestCalendarIntervalCalendar:
    """Exclusion calendars."""

    def test_weekend_days_are_skipped(self, clock, weekends):
        """Daily schedule with a weekday calendar."""
        # 2024-01-05 is a Friday
        trigger = CalendarIntervalTrigger("t", start_time=dt(2024, 1, 5, 9), clock=clock)
        trigger.compute_first_fire_time(weekends)
        trigger.triggered(weekends)
        assert trigger.next_fire_time == dt(2024, 1, 8, 9)

    def test_update_with_new_calendar(self, clock, holidays):
        """A new calendar re-validates the pending fire time."""
        trigger = CalendarIntervalTrigger("t", start_time=dt(2024, 1, 1, 9), clock=clock)
        trigger.compute_first_fire_time()
        trigger.triggered()
        assert trigger.next_fire_time == dt(2024, 1, 2, 9)

        holidays.add_excluded_date(dt(2024, 1, 2).date())
        trigger.update_with_new_calendar(holidays, timedelta(minutes=1))
        assert trigger.next_fire_time == dt(2024, 1, 3, 9)
