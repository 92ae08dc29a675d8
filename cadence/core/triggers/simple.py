"""Fixed-interval trigger."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any

from cadence.core.calendars.base import ExclusionCalendar
from cadence.core.common.constants import DEFAULT_GROUP, REPEAT_INDEFINITELY
from cadence.core.common.exceptions import ValidationError
from cadence.core.common.types import TriggerType
from cadence.core.triggers.base import Trigger
from cadence.type_defs import TriggerStateData
from cadence.utils.time import to_utc


class SimpleTrigger(Trigger):
    """
    Trigger firing at ``start_time`` and then every ``repeat_interval``.

    Fires ``repeat_count + 1`` times in total, or until the end time when
    the count is REPEAT_INDEFINITELY.

    Args:
        name: Trigger name
        group: Trigger group
        repeat_count: Number of repeats after the first fire, or REPEAT_INDEFINITELY
        repeat_interval: Time between fires; must be positive if the trigger repeats
        **kwargs: Common trigger arguments (see :class:`Trigger`)
    """

    trigger_type = TriggerType.SIMPLE

    REPEAT_INDEFINITELY = REPEAT_INDEFINITELY

    def __init__(
        self,
        name: str,
        group: str = DEFAULT_GROUP,
        *,
        repeat_count: int = 0,
        repeat_interval: timedelta = timedelta(0),
        **kwargs: Any,
    ) -> None:
        super().__init__(name, group, **kwargs)
        self.repeat_count = repeat_count
        self.repeat_interval = repeat_interval
        self.times_triggered = 0

        if self._repeat_count != 0 and self._repeat_interval <= timedelta(0):
            raise ValidationError("Repeat interval must be positive for a repeating trigger")

    @property
    def repeat_count(self) -> int:
        return self._repeat_count

    @repeat_count.setter
    def repeat_count(self, value: int) -> None:
        if value < 0 and value != REPEAT_INDEFINITELY:
            raise ValidationError(
                f"Repeat count must be >= 0 or REPEAT_INDEFINITELY ({REPEAT_INDEFINITELY}), got {value}"
            )
        self._repeat_count = value

    @property
    def repeat_interval(self) -> timedelta:
        return self._repeat_interval

    @repeat_interval.setter
    def repeat_interval(self, value: timedelta) -> None:
        if value < timedelta(0):
            raise ValidationError("Repeat interval cannot be negative")
        self._repeat_interval = value

    def get_fire_time_after(self, after: datetime | None = None) -> datetime | None:
        if self.repeat_count != REPEAT_INDEFINITELY and self.times_triggered > self.repeat_count:
            return None

        after = to_utc(after) if after is not None else self.now()

        if self.repeat_count == 0 and after >= self.start_time:
            return None
        if self.end_time is not None and self.end_time <= after:
            return None
        if after < self.start_time:
            return self.start_time

        num_times_executed = (after - self.start_time) // self.repeat_interval + 1
        if self.repeat_count != REPEAT_INDEFINITELY and num_times_executed > self.repeat_count:
            return None

        fire_time = self.start_time + num_times_executed * self.repeat_interval
        if self.end_time is not None and fire_time >= self.end_time:
            return None
        return fire_time

    def get_fire_time_before(self, before: datetime) -> datetime | None:
        """
        Get the last fire time strictly before ``before``.

        Args:
            before: Exclusive upper bound

        Returns:
            Fire time, or None if the trigger does not fire before it
        """
        before = to_utc(before)
        if before <= self.start_time:
            return None
        if self.repeat_count == 0:
            return self.start_time

        num_fires = (before - self.start_time) // self.repeat_interval
        if self.start_time + num_fires * self.repeat_interval >= before:
            num_fires -= 1
        if self.repeat_count != REPEAT_INDEFINITELY:
            num_fires = min(num_fires, self.repeat_count)
        return self.start_time + num_fires * self.repeat_interval

    def compute_num_times_fired_between(self, start: datetime, end: datetime) -> int:
        """Number of whole intervals between ``start`` and ``end`` (0 if not positive)."""
        if self.repeat_interval <= timedelta(0) or end <= start:
            return 0
        return (end - start) // self.repeat_interval

    @property
    def final_fire_time(self) -> datetime | None:
        if self.repeat_count == 0:
            return self.start_time

        if self.repeat_count == REPEAT_INDEFINITELY:
            if self.end_time is None:
                return None
            return self.get_fire_time_before(self.end_time)

        last_fire = self.start_time + self.repeat_count * self.repeat_interval
        if self.end_time is None or last_fire < self.end_time:
            return last_fire
        return self.get_fire_time_before(self.end_time)

    def triggered(self, calendar: ExclusionCalendar | None = None) -> None:
        if self.next_fire_time is not None:
            self.times_triggered += 1
        super().triggered(calendar)

    def _trigger_args(self) -> dict[str, Any]:
        return {
            "repeat_count": self.repeat_count,
            "repeat_interval_seconds": self.repeat_interval.total_seconds(),
        }

    def to_dict(self) -> TriggerStateData:
        data = super().to_dict()
        data["times_triggered"] = self.times_triggered
        return data
