"""Unit tests for SimpleTrigger."""

from datetime import UTC, datetime, timedelta

import pytest

from cadence.core.common.constants import REPEAT_INDEFINITELY
from cadence.core.common.exceptions import ValidationError
from cadence.core.triggers import SimpleTrigger

START = datetime(2024, 1, 1, tzinfo=UTC)
TEN_MINUTES = timedelta(minutes=10)


def at(minutes):
    return START + timedelta(minutes=minutes)


def make_trigger(clock=None, **kwargs):
    kwargs.setdefault("start_time", START)
    kwargs.setdefault("repeat_interval", TEN_MINUTES)
    return SimpleTrigger("t", clock=clock, **kwargs)


class TestSimpleTriggerValidation:
    """Constructor validation."""

    def test_negative_repeat_count(self):
        """Only -1 is allowed below zero."""
        with pytest.raises(ValidationError, match="Repeat count"):
            make_trigger(repeat_count=-2)

    def test_repeating_needs_positive_interval(self):
        """A zero interval only makes sense for a single fire."""
        with pytest.raises(ValidationError, match="positive"):
            make_trigger(repeat_count=3, repeat_interval=timedelta(0))

    def test_negative_interval(self):
        """Negative intervals are rejected."""
        with pytest.raises(ValidationError, match="negative"):
            make_trigger(repeat_interval=timedelta(seconds=-1))

    def test_end_before_start(self):
        """The end time may not precede the start time."""
        with pytest.raises(ValidationError, match="End time"):
            make_trigger(end_time=START - timedelta(seconds=1))

    def test_empty_name(self):
        """Names are required."""
        with pytest.raises(ValidationError):
            SimpleTrigger("")

    def test_one_shot_without_interval(self):
        """repeat_count=0 needs no interval."""
        trigger = SimpleTrigger("t", start_time=START)
        assert trigger.repeat_interval == timedelta(0)


class TestSimpleTriggerFiring:
    """Fire sequence."""

    def test_fires_repeat_count_plus_one_times(self, clock):
        """Three repeats -> four fires."""
        trigger = make_trigger(clock, repeat_count=3)
        fires = [trigger.compute_first_fire_time()]
        while True:
            trigger.triggered()
            if trigger.next_fire_time is None:
                break
            fires.append(trigger.next_fire_time)

        assert fires == [at(0), at(10), at(20), at(30)]
        assert trigger.times_triggered == 4

    def test_one_shot(self, clock):
        """repeat_count=0 fires once at the start time."""
        trigger = make_trigger(clock, repeat_count=0)
        assert trigger.compute_first_fire_time() == START
        trigger.triggered()
        assert trigger.next_fire_time is None

    def test_indefinite_until_end_time(self, clock):
        """The end time stops an indefinite trigger; it is exclusive."""
        trigger = make_trigger(clock, repeat_count=REPEAT_INDEFINITELY, end_time=at(30))
        trigger.compute_first_fire_time()
        seen = []
        while trigger.next_fire_time is not None:
            seen.append(trigger.next_fire_time)
            trigger.triggered()

        assert seen == [at(0), at(10), at(20)]

    def test_get_fire_time_after_between_fires(self):
        """Lands on the next interval boundary."""
        trigger = make_trigger(repeat_count=REPEAT_INDEFINITELY)
        assert trigger.get_fire_time_after(at(15)) == at(20)
        assert trigger.get_fire_time_after(at(20)) == at(30)

    def test_get_fire_time_after_before_start(self):
        """Any reference before the start returns the start."""
        trigger = make_trigger(repeat_count=5)
        assert trigger.get_fire_time_after(START - timedelta(days=1)) == START

    def test_get_fire_time_after_count_exhausted(self):
        """Past the last repeat there is nothing."""
        trigger = make_trigger(repeat_count=2)
        assert trigger.get_fire_time_after(at(20)) is None

    def test_calendar_skips_excluded(self, clock, exclude_instants):
        """Excluded fire times are skipped over."""
        calendar = exclude_instants(at(10))
        trigger = make_trigger(clock, repeat_count=REPEAT_INDEFINITELY)
        trigger.compute_first_fire_time(calendar)
        trigger.triggered(calendar)
        assert trigger.next_fire_time == at(20)
        assert trigger.previous_fire_time == at(0)


class TestSimpleTriggerBounds:
    """Final and previous fire times."""

    def test_final_fire_time_with_count(self):
        """start + count * interval."""
        assert make_trigger(repeat_count=3).final_fire_time == at(30)

    def test_final_fire_time_one_shot(self):
        """The start time itself."""
        assert make_trigger(repeat_count=0).final_fire_time == START

    def test_final_fire_time_indefinite(self):
        """Unbounded -> None."""
        assert make_trigger(repeat_count=REPEAT_INDEFINITELY).final_fire_time is None

    def test_final_fire_time_cut_by_end(self):
        """The end time wins over a larger count."""
        trigger = make_trigger(repeat_count=10, end_time=at(25))
        assert trigger.final_fire_time == at(20)

    def test_final_fire_time_end_on_boundary(self):
        """A fire exactly at the end time is excluded."""
        trigger = make_trigger(repeat_count=REPEAT_INDEFINITELY, end_time=at(30))
        assert trigger.final_fire_time == at(20)

    def test_get_fire_time_before(self):
        """Last fire strictly before the bound."""
        trigger = make_trigger(repeat_count=REPEAT_INDEFINITELY)
        assert trigger.get_fire_time_before(START) is None
        assert trigger.get_fire_time_before(at(15)) == at(10)
        assert trigger.get_fire_time_before(at(20)) == at(10)

    def test_compute_num_times_fired_between(self):
        """Whole intervals only; never negative."""
        trigger = make_trigger(repeat_count=REPEAT_INDEFINITELY)
        assert trigger.compute_num_times_fired_between(at(0), at(35)) == 3
        assert trigger.compute_num_times_fired_between(at(35), at(0)) == 0


class TestSimpleTriggerSnapshot:
    """to_dict output."""

    def test_to_dict(self, clock):
        """Includes interval args and the fire count."""
        trigger = make_trigger(clock, repeat_count=3, job_name="report", description="every 10m")
        trigger.compute_first_fire_time()
        trigger.triggered()
        data = trigger.to_dict()

        assert data["trigger_type"] == "simple"
        assert data["trigger_args"] == {"repeat_count": 3, "repeat_interval_seconds": 600.0}
        assert data["times_triggered"] == 1
        assert data["job_name"] == "report"
        assert data["job_group"] == "DEFAULT"
        assert data["previous_fire_time"] == START.isoformat()
        assert data["next_fire_time"] == at(10).isoformat()
