"""Unit tests for RecurrenceTrigger."""

from datetime import UTC, datetime
from zoneinfo import ZoneInfo

import pytest

from cadence.core.common.exceptions import ValidationError
from cadence.core.triggers import RecurrenceTrigger

NEW_YORK = ZoneInfo("America/New_York")


def dt(year, month, day, hour=0, minute=0, second=0, tz=UTC):
    return datetime(year, month, day, hour, minute, second, tzinfo=tz)


class TestRecurrenceTrigger:
    """RRULE based schedules."""

    def test_invalid_rule(self):
        """Unparseable rules fail at construction."""
        with pytest.raises(ValidationError, match="Invalid recurrence rule"):
            RecurrenceTrigger("t", recurrence_rule="FREQ=SOMETIMES")

    def test_count_limited_rule(self, clock):
        """COUNT ends the schedule."""
        trigger = RecurrenceTrigger(
            "t", recurrence_rule="FREQ=DAILY;COUNT=3", start_time=dt(2024, 1, 1, 9), clock=clock
        )
        fires = [trigger.compute_first_fire_time()]
        while trigger.next_fire_time is not None:
            trigger.triggered()
            fires.append(trigger.next_fire_time)

        assert fires == [dt(2024, 1, 1, 9), dt(2024, 1, 2, 9), dt(2024, 1, 3, 9), None]

    def test_last_weekday_of_month(self):
        """BYSETPOS picks the last business day."""
        trigger = RecurrenceTrigger(
            "t",
            recurrence_rule="RRULE:FREQ=MONTHLY;BYDAY=MO,TU,WE,TH,FR;BYSETPOS=-1",
            start_time=dt(2024, 1, 1, 17),
        )
        assert trigger.get_fire_time_after(dt(2024, 1, 1)) == dt(2024, 1, 31, 17)
        assert trigger.get_fire_time_after(dt(2024, 1, 31, 17)) == dt(2024, 2, 29, 17)
        assert trigger.get_fire_time_after(dt(2024, 2, 29, 17)) == dt(2024, 3, 29, 17)

    def test_wall_clock_across_dst(self):
        """Occurrences keep the local time of day."""
        trigger = RecurrenceTrigger(
            "t",
            recurrence_rule="FREQ=DAILY",
            timezone="America/New_York",
            start_time=dt(2024, 3, 9, 9, tz=NEW_YORK),
        )
        assert trigger.get_fire_time_after(dt(2024, 3, 9, 14)) == dt(2024, 3, 10, 13)

    def test_end_time(self):
        """The end time is exclusive."""
        trigger = RecurrenceTrigger(
            "t",
            recurrence_rule="FREQ=DAILY",
            start_time=dt(2024, 1, 1, 9),
            end_time=dt(2024, 1, 5, 9),
        )
        assert trigger.get_fire_time_after(dt(2024, 1, 4, 9)) is None
        assert trigger.final_fire_time == dt(2024, 1, 4, 9)

    def test_final_fire_time_until(self):
        """UNTIL bounds the schedule."""
        trigger = RecurrenceTrigger(
            "t",
            recurrence_rule="FREQ=WEEKLY;UNTIL=20240201T000000",
            start_time=dt(2024, 1, 1, 9),
        )
        assert trigger.final_fire_time == dt(2024, 1, 29, 9)

    def test_final_fire_time_unbounded(self):
        """Open-ended rules have no final fire time."""
        trigger = RecurrenceTrigger("t", recurrence_rule="FREQ=HOURLY", start_time=dt(2024, 1, 1))
        assert trigger.final_fire_time is None

    def test_rule_follows_start_time(self):
        """Changing the start time re-anchors the rule."""
        trigger = RecurrenceTrigger(
            "t", recurrence_rule="FREQ=DAILY", start_time=dt(2024, 1, 1, 9)
        )
        trigger.start_time = dt(2024, 1, 10, 15)
        assert trigger.get_fire_time_after(dt(2024, 1, 10, 15)) == dt(2024, 1, 11, 15)

    def test_to_dict(self):
        """Snapshot carries the rule text."""
        trigger = RecurrenceTrigger(
            "t", recurrence_rule="FREQ=YEARLY", timezone="Asia/Seoul", start_time=dt(2024, 1, 1)
        )
        assert trigger.to_dict()["trigger_args"] == {
            "recurrence_rule": "FREQ=YEARLY",
            "timezone": "Asia/Seoul",
        }

    def test_utc_until(self):
        """A UTC UNTIL is accepted and is inclusive."""
        trigger = RecurrenceTrigger(
            "t", recurrence_rule="FREQ=DAILY;UNTIL=20240105T000000Z", start_time=dt(2024, 1, 1)
        )
        assert trigger.get_fire_time_after(dt(2024, 1, 4)) == dt(2024, 1, 5)
        assert trigger.get_fire_time_after(dt(2024, 1, 5)) is None
        assert trigger.final_fire_time == dt(2024, 1, 5)

    def test_utc_until_in_zoned_rule(self):
        """The UTC UNTIL is compared against zoned occurrences as an instant."""
        trigger = RecurrenceTrigger(
            "t",
            recurrence_rule="FREQ=DAILY;UNTIL=20240105T140000Z",
            timezone="America/New_York",
            start_time=dt(2024, 1, 1, 9, tz=NEW_YORK),
        )
        # 14:00Z is 09:00 in New York, so the fifth occurrence is the last
        assert trigger.final_fire_time == dt(2024, 1, 5, 14)
        assert trigger.get_fire_time_after(dt(2024, 1, 5, 14)) is None
