"""Nth included day trigger."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Any

from dateutil.relativedelta import relativedelta

from cadence.core.calendars.base import ExclusionCalendar, is_included
from cadence.core.common.constants import (
    DEFAULT_GROUP,
    DEFAULT_NEXT_FIRE_CUTOFF_INTERVAL,
    YEAR_TO_GIVE_UP_SCHEDULING_AT,
)
from cadence.core.common.exceptions import ValidationError
from cadence.core.common.types import NthIncludedDayInterval, TriggerType
from cadence.core.triggers.base import Trigger
from cadence.utils.time import get_timezone, localize, parse_time_of_day, to_utc, to_wall_time

# Largest n that can occur in a period
MAX_N = {
    NthIncludedDayInterval.WEEKLY: 7,
    NthIncludedDayInterval.MONTHLY: 31,
    NthIncludedDayInterval.YEARLY: 366,
}


class NthIncludedDayTrigger(Trigger):
    """
    Trigger firing on the nth day of each week, month or year that the
    exclusion calendar includes.

    For example, with a business-day calendar, ``n=10`` and a monthly interval
    the trigger fires on the tenth business day of every month. Without a
    calendar every day counts, so this is simply the nth day of the period.

    Weeks follow ISO 8601: they start on Monday, and week 1 is the first week
    with at least four days in the new year.

    Args:
        name: Trigger name
        group: Trigger group
        n: Which included day to fire on (1-based)
        interval_type: Period scanned for the nth included day
        fire_at_time: Time of day to fire, ``HH:MM[:SS]``
        next_fire_cutoff_interval: Number of periods to scan before giving up
        timezone: IANA timezone of the days and ``fire_at_time``
        **kwargs: Common trigger arguments (see :class:`Trigger`)
    """

    trigger_type = TriggerType.NTH_INCLUDED_DAY

    def __init__(
        self,
        name: str,
        group: str = DEFAULT_GROUP,
        *,
        n: int = 1,
        interval_type: NthIncludedDayInterval | int = NthIncludedDayInterval.MONTHLY,
        fire_at_time: str | time = "12:00:00",
        next_fire_cutoff_interval: int = DEFAULT_NEXT_FIRE_CUTOFF_INTERVAL,
        timezone: str = "UTC",
        **kwargs: Any,
    ) -> None:
        super().__init__(name, group, **kwargs)
        try:
            self.interval_type = NthIncludedDayInterval(interval_type)
        except ValueError:
            raise ValidationError(f"Invalid interval type: {interval_type}") from None

        if not 1 <= n <= MAX_N[self.interval_type]:
            raise ValidationError(
                f"n must be between 1 and {MAX_N[self.interval_type]} "
                f"for a {self.interval_type.name.lower()} interval, got {n}"
            )
        if next_fire_cutoff_interval < 1:
            raise ValidationError("Next fire cutoff interval must be >= 1")

        try:
            self.fire_at_time = parse_time_of_day(fire_at_time).replace(microsecond=0)
        except ValueError as e:
            raise ValidationError(str(e)) from e

        self.n = n
        self.next_fire_cutoff_interval = next_fire_cutoff_interval
        self.timezone = timezone
        self.tz = get_timezone(timezone)
        self.calendar: ExclusionCalendar | None = None

    def _use_calendar(self, calendar: ExclusionCalendar | None) -> None:
        self.calendar = calendar

    # ---------------------------------------------------------------------------
    # Periods
    # ---------------------------------------------------------------------------

    def _period_start(self, day: date) -> date:
        if self.interval_type is NthIncludedDayInterval.WEEKLY:
            return day - timedelta(days=day.weekday())
        if self.interval_type is NthIncludedDayInterval.MONTHLY:
            return day.replace(day=1)
        return day.replace(month=1, day=1)

    def _next_period(self, start: date) -> date:
        if self.interval_type is NthIncludedDayInterval.WEEKLY:
            return start + timedelta(weeks=1)
        if self.interval_type is NthIncludedDayInterval.MONTHLY:
            return start + relativedelta(months=1)
        return start + relativedelta(years=1)

    def _nth_included_day(self, period_start: date) -> tuple[datetime | None, bool]:
        """
        Find the nth included day of the period starting at ``period_start``.

        Returns:
            (fire_time, past_end): fire_time is None if the period has fewer
            than n included days; past_end is True once the end time is reached
        """
        period_end = self._next_period(period_start)
        count = 0
        day = period_start
        while day < period_end:
            fire_time = localize(datetime.combine(day, self.fire_at_time), self.tz)
            if self.end_time is not None and fire_time >= self.end_time:
                return None, True
            if is_included(self.calendar, fire_time):
                count += 1
                if count == self.n:
                    return fire_time, False
            day += timedelta(days=1)
        return None, False

    # ---------------------------------------------------------------------------
    # Schedule
    # ---------------------------------------------------------------------------

    def get_fire_time_after(self, after: datetime | None = None) -> datetime | None:
        after = to_utc(after) if after is not None else self.now()
        if after < self.start_time:
            after = self._before_start()

        period = self._period_start(to_wall_time(after, self.tz).date())
        for _ in range(self.next_fire_cutoff_interval):
            if period.year > YEAR_TO_GIVE_UP_SCHEDULING_AT:
                return None
            fire_time, past_end = self._nth_included_day(period)
            if past_end:
                return None
            if fire_time is not None and fire_time > after:
                return fire_time
            period = self._next_period(period)

        self.logger.debug(
            "No included day found within the cutoff",
            after=after.isoformat(),
            periods=self.next_fire_cutoff_interval,
        )
        return None

    @property
    def final_fire_time(self) -> datetime | None:
        if self.end_time is None:
            return None

        # Fires are at least a day apart, so walk back a day at a time
        current = self.end_time
        while current > self.start_time:
            current -= timedelta(days=1)
            fire_time = self.get_fire_time_after(current)
            if fire_time is not None:
                return fire_time
        return None

    def _trigger_args(self) -> dict[str, Any]:
        return {
            "n": self.n,
            "interval_type": int(self.interval_type),
            "fire_at_time": self.fire_at_time.isoformat(),
            "next_fire_cutoff_interval": self.next_fire_cutoff_interval,
            "timezone": self.timezone,
        }
