"""Daily time interval trigger."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from datetime import date, datetime, time, timedelta
from typing import Any

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
from cadence.utils.time import get_timezone, localize, parse_time_of_day, to_utc, to_wall_time

UNIT_LENGTHS = {
    IntervalUnit.SECOND: timedelta(seconds=1),
    IntervalUnit.MINUTE: timedelta(minutes=1),
    IntervalUnit.HOUR: timedelta(hours=1),
}

MAX_REPEAT_STEP = timedelta(days=1)

# Python weekday numbering, Monday = 0
ALL_DAYS = frozenset(range(7))


class DailyTimeIntervalTrigger(Trigger):
    """
    Trigger repeating every N seconds, minutes or hours inside a daily window.

    On each selected day of the week the trigger fires at the window start and
    then every interval until the window end (inclusive), e.g. 08:00, 09:12
    and 10:24 for a 72 minute interval between 08:00 and 11:00. The grid
    restarts at the window start every day and is laid out in wall-clock time
    in the trigger's timezone. A slot inside a daylight-saving gap moves to
    the first valid minute; a repeated wall-clock time fires once.

    Args:
        name: Trigger name
        group: Trigger group
        repeat_interval: Number of units between fires (>= 1, at most a day)
        repeat_interval_unit: SECOND, MINUTE or HOUR
        start_time_of_day: Window start, ``HH:MM[:SS]``
        end_time_of_day: Window end, ``HH:MM[:SS]``
        days_of_week: Weekdays to fire on (``calendar.MONDAY`` = 0 ...
            ``calendar.SUNDAY`` = 6); every day by default
        repeat_count: Number of repeats after the first fire, or REPEAT_INDEFINITELY
        timezone: IANA timezone of the window
        **kwargs: Common trigger arguments (see :class:`Trigger`)
    """

    trigger_type = TriggerType.DAILY_TIME_INTERVAL

    def __init__(
        self,
        name: str,
        group: str = DEFAULT_GROUP,
        *,
        repeat_interval: int = 1,
        repeat_interval_unit: IntervalUnit | str = IntervalUnit.MINUTE,
        start_time_of_day: str | time = "00:00:00",
        end_time_of_day: str | time = "23:59:59",
        days_of_week: Iterable[int] | None = None,
        repeat_count: int = REPEAT_INDEFINITELY,
        timezone: str = "UTC",
        **kwargs: Any,
    ) -> None:
        super().__init__(name, group, **kwargs)
        try:
            unit = IntervalUnit(repeat_interval_unit)
        except ValueError:
            raise ValidationError(f"Invalid repeat interval unit: {repeat_interval_unit}") from None
        if unit not in UNIT_LENGTHS:
            raise ValidationError(
                f"Repeat interval unit must be second, minute or hour, got {unit.value}"
            )
        if repeat_interval < 1:
            raise ValidationError(f"Repeat interval must be >= 1, got {repeat_interval}")
        if repeat_interval * UNIT_LENGTHS[unit] > MAX_REPEAT_STEP:
            raise ValidationError(
                f"Repeat interval cannot exceed 24 hours, got {repeat_interval} {unit.value}s"
            )
        if repeat_count < 0 and repeat_count != REPEAT_INDEFINITELY:
            raise ValidationError(
                f"Repeat count must be >= 0 or REPEAT_INDEFINITELY ({REPEAT_INDEFINITELY}), got {repeat_count}"
            )

        try:
            self.start_time_of_day = parse_time_of_day(start_time_of_day).replace(microsecond=0)
            self.end_time_of_day = parse_time_of_day(end_time_of_day).replace(microsecond=0)
        except ValueError as e:
            raise ValidationError(str(e)) from e
        if self.end_time_of_day < self.start_time_of_day:
            raise ValidationError(
                f"Start time of day {self.start_time_of_day} is after "
                f"end time of day {self.end_time_of_day}"
            )

        days = ALL_DAYS if days_of_week is None else frozenset(days_of_week)
        if not days:
            raise ValidationError("At least one day of the week is required")
        if not days <= ALL_DAYS:
            raise ValidationError(
                f"Days of the week must be between 0 (Monday) and 6 (Sunday), got {sorted(days)}"
            )

        self.repeat_interval = repeat_interval
        self.repeat_interval_unit = unit
        self.days_of_week = days
        self.repeat_count = repeat_count
        self.timezone = timezone
        self.tz = get_timezone(timezone)
        self.times_triggered = 0

    @property
    def repeat_step(self) -> timedelta:
        return self.repeat_interval * UNIT_LENGTHS[self.repeat_interval_unit]

    def _slots(self, day: date, not_before: datetime | None = None) -> Iterator[datetime]:
        """
        Yield the wall-clock fire times of ``day`` in order.

        With ``not_before`` the walk starts at the last slot at or before it.
        """
        slot = datetime.combine(day, self.start_time_of_day)
        window_end = datetime.combine(day, self.end_time_of_day)
        if not_before is not None and not_before > slot:
            slot += (not_before - slot) // self.repeat_step * self.repeat_step
        while slot <= window_end:
            yield slot
            slot += self.repeat_step

    def _is_exhausted(self, fires: int) -> bool:
        return self.repeat_count != REPEAT_INDEFINITELY and fires > self.repeat_count

    def _next_fire_time(self, after: datetime) -> datetime | None:
        """First fire time strictly after ``after``, regardless of the fire count."""
        if after < self.start_time:
            after = self._before_start()

        wall = to_wall_time(after, self.tz)
        day = wall.date()
        while day.year <= YEAR_TO_GIVE_UP_SCHEDULING_AT:
            if day.weekday() in self.days_of_week:
                for slot in self._slots(day, wall if day == wall.date() else None):
                    fire_time = localize(slot, self.tz)
                    if fire_time <= after:
                        continue
                    if self.end_time is not None and fire_time >= self.end_time:
                        return None
                    return fire_time
            day += timedelta(days=1)
        return None

    # ---------------------------------------------------------------------------
    # Schedule
    # ---------------------------------------------------------------------------

    def get_fire_time_after(self, after: datetime | None = None) -> datetime | None:
        if self._is_exhausted(self.times_triggered):
            return None

        after = to_utc(after) if after is not None else self.now()
        if self.end_time is not None and after >= self.end_time:
            return None
        return self._next_fire_time(after)

    @property
    def final_fire_time(self) -> datetime | None:
        if self.repeat_count != REPEAT_INDEFINITELY:
            final = None
            fire_time = self._next_fire_time(self._before_start())
            for _ in range(self.repeat_count + 1):
                if fire_time is None:
                    break
                final = fire_time
                fire_time = self._next_fire_time(fire_time)
            return final

        if self.end_time is None:
            return None

        first_day = to_wall_time(self.start_time, self.tz).date()
        day = to_wall_time(self.end_time, self.tz).date()
        while day >= first_day:
            if day.weekday() in self.days_of_week:
                for slot in reversed(list(self._slots(day))):
                    fire_time = localize(slot, self.tz)
                    if self.start_time <= fire_time < self.end_time:
                        return fire_time
            day -= timedelta(days=1)
        return None

    def triggered(self, calendar: ExclusionCalendar | None = None) -> None:
        if self.next_fire_time is not None:
            self.times_triggered += 1
        super().triggered(calendar)

    def _trigger_args(self) -> dict[str, Any]:
        return {
            "repeat_interval": self.repeat_interval,
            "repeat_interval_unit": self.repeat_interval_unit.value,
            "start_time_of_day": self.start_time_of_day.isoformat(),
            "end_time_of_day": self.end_time_of_day.isoformat(),
            "days_of_week": sorted(self.days_of_week),
            "repeat_count": self.repeat_count,
            "timezone": self.timezone,
        }

    def to_dict(self) -> TriggerStateData:
        data = super().to_dict()
        data["times_triggered"] = self.times_triggered
        return data
