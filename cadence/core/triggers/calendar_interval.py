"""Calendar interval trigger."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any

from dateutil.relativedelta import relativedelta

from cadence.core.calendars.base import ExclusionCalendar
from cadence.core.common.constants import (
    DEFAULT_GROUP,
    REPEAT_INDEFINITELY,
    YEAR_TO_GIVE_UP_SCHEDULING_AT,
)
from cadence.core.common.exceptions import ValidationError
from cadence.core.common.types import IntervalUnit, TriggerType
from cadence.core.triggers.base import Trigger
from cadence.type_defs import TriggerStateData
from cadence.utils.time import get_timezone, is_wall_time_valid, localize, to_utc, to_wall_time

# Units stepped in elapsed time; the others step the wall-clock calendar
ELAPSED_UNITS = {
    IntervalUnit.SECOND: timedelta(seconds=1),
    IntervalUnit.MINUTE: timedelta(minutes=1),
    IntervalUnit.HOUR: timedelta(hours=1),
}

# Average unit lengths, only used to estimate how many intervals have passed
APPROXIMATE_UNITS = {
    **ELAPSED_UNITS,
    IntervalUnit.DAY: timedelta(days=1),
    IntervalUnit.WEEK: timedelta(weeks=1),
    IntervalUnit.MONTH: timedelta(days=30.436875),
    IntervalUnit.YEAR: timedelta(days=365.2425),
}


class CalendarIntervalTrigger(Trigger):
    """
    Trigger repeating every N seconds, minutes, hours, days, weeks, months or years.

    Day and larger units are added to the start time's wall-clock time in
    the trigger's timezone, so a daily trigger keeps its hour of day across
    daylight-saving changes. Every fire time is computed from the start time
    (``start + k * N units``): monthly steps clip to the last day of shorter
    months without drifting, e.g. Jan 31, Feb 29, Mar 31.

    Args:
        name: Trigger name
        group: Trigger group
        repeat_interval: Number of units between fires (>= 1)
        repeat_interval_unit: Interval unit
        repeat_count: Number of repeats after the first fire, or REPEAT_INDEFINITELY
        timezone: IANA timezone for calendar arithmetic
        skip_day_if_hour_does_not_exist: Skip a fire whose wall-clock time falls
            into a daylight-saving gap instead of moving it past the gap
        **kwargs: Common trigger arguments (see :class:`Trigger`)
    """

    trigger_type = TriggerType.CALENDAR_INTERVAL

    def __init__(
        self,
        name: str,
        group: str = DEFAULT_GROUP,
        *,
        repeat_interval: int = 1,
        repeat_interval_unit: IntervalUnit | str = IntervalUnit.DAY,
        repeat_count: int = REPEAT_INDEFINITELY,
        timezone: str = "UTC",
        skip_day_if_hour_does_not_exist: bool = False,
        **kwargs: Any,
    ) -> None:
        super().__init__(name, group, **kwargs)
        if repeat_interval < 1:
            raise ValidationError(f"Repeat interval must be >= 1, got {repeat_interval}")
        if repeat_count < 0 and repeat_count != REPEAT_INDEFINITELY:
            raise ValidationError(
                f"Repeat count must be >= 0 or REPEAT_INDEFINITELY ({REPEAT_INDEFINITELY}), got {repeat_count}"
            )

        self.repeat_interval = repeat_interval
        self.repeat_interval_unit = IntervalUnit(repeat_interval_unit)
        self.repeat_count = repeat_count
        self.timezone = timezone
        self.tz = get_timezone(timezone)
        self.skip_day_if_hour_does_not_exist = skip_day_if_hour_does_not_exist
        self.times_triggered = 0

    # ---------------------------------------------------------------------------
    # Interval arithmetic
    # ---------------------------------------------------------------------------

    def _step(self, index: int) -> relativedelta:
        amount = index * self.repeat_interval
        unit = self.repeat_interval_unit
        if unit is IntervalUnit.DAY:
            return relativedelta(days=amount)
        if unit is IntervalUnit.WEEK:
            return relativedelta(weeks=amount)
        if unit is IntervalUnit.MONTH:
            return relativedelta(months=amount)
        return relativedelta(years=amount)

    def _fire_time(self, index: int) -> tuple[datetime, bool]:
        """
        Get the ``index``-th fire time (0 is the start time).

        Returns:
            (fire_time, exists) where ``exists`` is False if the wall-clock
            time fell into a daylight-saving gap and was moved past it
        """
        if index == 0:
            return self.start_time, True

        unit = self.repeat_interval_unit
        if unit in ELAPSED_UNITS:
            return self.start_time + index * self.repeat_interval * ELAPSED_UNITS[unit], True

        wall = to_wall_time(self.start_time, self.tz) + self._step(index)
        return localize(wall, self.tz), is_wall_time_valid(wall, self.tz)

    def _first_index_after(self, after: datetime) -> int:
        """Smallest index >= 1 whose fire time is strictly after ``after``."""
        interval = APPROXIMATE_UNITS[self.repeat_interval_unit] * self.repeat_interval
        index = max(1, int((after - self.start_time) / interval))
        while index > 1 and self._fire_time(index - 1)[0] > after:
            index -= 1
        while self._fire_time(index)[0] <= after:
            index += 1
        return index

    def _is_exhausted(self, index: int) -> bool:
        return self.repeat_count != REPEAT_INDEFINITELY and index > self.repeat_count

    # ---------------------------------------------------------------------------
    # Schedule
    # ---------------------------------------------------------------------------

    def get_fire_time_after(self, after: datetime | None = None) -> datetime | None:
        if self._is_exhausted(self.times_triggered):
            return None

        after = to_utc(after) if after is not None else self.now()
        if self.end_time is not None and after >= self.end_time:
            return None
        if after < self.start_time:
            return self.start_time

        index = self._first_index_after(after)
        while True:
            if self._is_exhausted(index):
                return None
            fire_time, exists = self._fire_time(index)
            if fire_time.year > YEAR_TO_GIVE_UP_SCHEDULING_AT:
                return None
            if self.end_time is not None and fire_time >= self.end_time:
                return None
            if exists or not self.skip_day_if_hour_does_not_exist:
                return fire_time
            index += 1

    @property
    def final_fire_time(self) -> datetime | None:
        if self.repeat_count == REPEAT_INDEFINITELY and self.end_time is None:
            return None
        if self.end_time is not None and self.end_time <= self.start_time:
            return None

        candidates = []
        if self.repeat_count != REPEAT_INDEFINITELY:
            candidates.append(self.repeat_count)
        if self.end_time is not None:
            candidates.append(self._first_index_after(self.end_time - timedelta(microseconds=1)) - 1)

        index = min(candidates)
        while index >= 0:
            fire_time, exists = self._fire_time(index)
            if exists or not self.skip_day_if_hour_does_not_exist:
                return fire_time
            index -= 1
        return None

    def triggered(self, calendar: ExclusionCalendar | None = None) -> None:
        if self.next_fire_time is not None:
            self.times_triggered += 1
        super().triggered(calendar)

    def _trigger_args(self) -> dict[str, Any]:
        return {
            "repeat_interval": self.repeat_interval,
            "repeat_interval_unit": self.repeat_interval_unit.value,
            "repeat_count": self.repeat_count,
            "timezone": self.timezone,
            "skip_day_if_hour_does_not_exist": self.skip_day_if_hour_does_not_exist,
        }

    def to_dict(self) -> TriggerStateData:
        data = super().to_dict()
        data["times_triggered"] = self.times_triggered
        return data
