"""
Next-fire-time calculation for parsed cron expressions.

The search walks the wall-clock fields from least to most significant
(second, minute, hour, day, month, year). Whenever a field has to move
forward, every less significant field is reset and the walk restarts from
the seconds, so lower fields are always re-checked after a carry.
"""

from __future__ import annotations

from calendar import monthrange
from collections.abc import Callable
from datetime import UTC, date, datetime, timedelta, tzinfo

from cadence.core.common.constants import YEAR_TO_GIVE_UP_SCHEDULING_AT
from cadence.core.common.exceptions import CronEvaluationError
from cadence.core.cron.fields import CronFieldSet
from cadence.utils.time import get_timezone, to_utc, to_wall_time

ONE_SECOND = timedelta(seconds=1)

# Lower bound used when searching backwards
EPOCH = datetime(1970, 1, 1, tzinfo=UTC)

Progressor = Callable[[datetime], tuple[datetime | None, bool]]


def cron_day_of_week(value: date) -> int:
    """Convert a date's weekday to cron numbering (1=SUN ... 7=SAT)."""
    return (value.weekday() + 1) % 7 + 1


def nearest_weekday(year: int, month: int, day: int) -> int:
    """
    Get the weekday closest to ``day`` without leaving the month.

    The day is first clamped to the month's length. Saturday moves back to
    Friday unless it is the 1st (then forward to Monday the 3rd); Sunday moves
    forward to Monday unless it is the last day (then back to Friday).
    """
    last_day = monthrange(year, month)[1]
    day = min(day, last_day)
    weekday = date(year, month, day).weekday()
    if weekday == 5:
        return day - 1 if day > 1 else day + 2
    if weekday == 6:
        return day + 1 if day < last_day else day - 2
    return day


def _first_of_next_month(value: datetime) -> datetime:
    if value.month == 12:
        return datetime(value.year + 1, 1, 1)
    return datetime(value.year, value.month + 1, 1)


class CronTimeComputer:
    """
    Fire time calculator for a cron field set in a given timezone.

    Args:
        fields: Parsed cron expression
        timezone: IANA timezone name or tzinfo in which the fields are read
    """

    def __init__(self, fields: CronFieldSet, timezone: str | tzinfo = "UTC") -> None:
        self.fields = fields
        self.tz = get_timezone(timezone) if isinstance(timezone, str) else timezone
        self._progressors: list[Progressor] = [
            self._progress_second,
            self._progress_minute,
            self._progress_hour,
            self._progress_day,
            self._progress_month,
            self._progress_year,
        ]

    # ---------------------------------------------------------------------------
    # Public API
    # ---------------------------------------------------------------------------

    def next_fire_time(self, after: datetime) -> datetime | None:
        """
        Calculate the first fire time strictly after ``after``.

        Args:
            after: Reference instant (naive values are taken as UTC)

        Returns:
            Next fire time in UTC, or None if the schedule never fires again

        Raises:
            CronEvaluationError: Both day-of-month and day-of-week are constrained
        """
        self.check_day_fields()
        after = to_utc(after)
        # Start at the wall time of ``after`` itself: after a DST fall-back the
        # wall clock repeats, so ``after`` may map to an already passed wall time
        wall = to_wall_time(after, self.tz).replace(microsecond=0)

        while True:
            candidate = self._next_wall_time(wall)
            if candidate is None:
                return None

            resolved = self._resolve_wall_time(candidate)
            if resolved > after:
                return resolved
            wall = candidate + ONE_SECOND

    def is_satisfied_by(self, instant: datetime) -> bool:
        """
        Check whether ``instant`` (to the whole second) is a fire time.

        Args:
            instant: Instant to test

        Returns:
            True if the schedule fires at that second
        """
        instant = to_utc(instant).replace(microsecond=0)
        return self.next_fire_time(instant - ONE_SECOND) == instant

    def previous_fire_time(self, before: datetime) -> datetime | None:
        """
        Calculate the latest fire time strictly before ``before``.

        Finds any earlier fire time by widening a look-back window, then
        narrows the gap between it and ``before`` by bisection.

        Args:
            before: Exclusive upper bound

        Returns:
            Previous fire time in UTC, or None if there is none after 1970
        """
        self.check_day_fields()
        before = to_utc(before)

        lower = None
        window = timedelta(minutes=1)
        while lower is None:
            window_start = max(before - window, EPOCH)
            found = self.next_fire_time(window_start - ONE_SECOND)
            if found is not None and found < before:
                lower = found
            elif window_start == EPOCH:
                return None
            else:
                window *= 2

        upper = before
        while upper - lower > ONE_SECOND:
            middle = (lower + (upper - lower) / 2).replace(microsecond=0)
            if middle <= lower:
                middle = lower + ONE_SECOND
            found = self.next_fire_time(middle - ONE_SECOND)
            if found is not None and found < before:
                lower = found
            else:
                upper = middle
        return lower

    # ---------------------------------------------------------------------------
    # Wall clock search
    # ---------------------------------------------------------------------------

    def check_day_fields(self) -> None:
        if self.fields.is_day_ambiguous:
            raise CronEvaluationError(
                "Support for specifying both a day-of-week AND a day-of-month "
                f"parameter is not implemented: '{self.fields.expression}' "
                "(use '?' in one of the two fields)"
            )

    def _next_wall_time(self, start: datetime) -> datetime | None:
        """Get the first matching wall-clock time at or after ``start``."""
        current = start
        fieldnum = 0
        while fieldnum < len(self._progressors):
            current, restart = self._progressors[fieldnum](current)
            if current is None or current.year > YEAR_TO_GIVE_UP_SCHEDULING_AT:
                return None
            fieldnum = 0 if restart else fieldnum + 1
        return current

    def _resolve_wall_time(self, wall: datetime) -> datetime:
        """
        Map a wall-clock time to one UTC instant.

        A time in a DST gap is shifted forward by the gap length; a repeated
        time resolves to its first occurrence.
        """
        return wall.replace(tzinfo=self.tz, fold=0).astimezone(UTC)

    def _progress_second(self, current: datetime) -> tuple[datetime | None, bool]:
        seconds = self.fields.seconds
        second = seconds.next_value_from(current.second)
        if second is None:
            return current.replace(second=seconds.min) + timedelta(minutes=1), False
        return current.replace(second=second), False

    def _progress_minute(self, current: datetime) -> tuple[datetime | None, bool]:
        minutes = self.fields.minutes
        minute = minutes.next_value_from(current.minute)
        if minute == current.minute:
            return current, False
        if minute is None:
            rolled = current.replace(minute=minutes.min, second=0) + timedelta(hours=1)
            return rolled, True
        return current.replace(minute=minute, second=0), True

    def _progress_hour(self, current: datetime) -> tuple[datetime | None, bool]:
        hours = self.fields.hours
        hour = hours.next_value_from(current.hour)
        if hour == current.hour:
            return current, False
        if hour is None:
            rolled = current.replace(hour=hours.min, minute=0, second=0) + timedelta(days=1)
            return rolled, True
        return current.replace(hour=hour, minute=0, second=0), True

    def _progress_day(self, current: datetime) -> tuple[datetime | None, bool]:
        if self.fields.day_of_week.is_unspecified:
            day = self._next_day_of_month(current)
        else:
            day = self._next_day_of_week(current)

        if day is None:
            return _first_of_next_month(current), True
        if day == current.day:
            return current, False
        return datetime(current.year, current.month, day), True

    def _progress_month(self, current: datetime) -> tuple[datetime | None, bool]:
        months = self.fields.months
        month = months.next_value_from(current.month)
        if month == current.month:
            return current, False
        if month is None:
            return datetime(current.year + 1, months.min, 1), True
        return datetime(current.year, month, 1), True

    def _progress_year(self, current: datetime) -> tuple[datetime | None, bool]:
        year = self.fields.years.next_value_from(current.year)
        if year is None:
            return None, False
        if year == current.year:
            return current, False
        return datetime(year, 1, 1), True

    # ---------------------------------------------------------------------------
    # Day resolution
    # ---------------------------------------------------------------------------

    def days_of_month(self, year: int, month: int) -> list[int]:
        """
        Get the sorted days of a month matched by the day-of-month field.

        Args:
            year: Calendar year
            month: Month (1-12)

        Returns:
            Matching days, after applying the L, L-n and W rules
        """
        fields = self.fields
        last_day = monthrange(year, month)[1]

        if fields.nearest_weekday and not fields.last_day_of_month:
            return [nearest_weekday(year, month, fields.day_of_month.min)]

        days = {day for day in range(1, last_day + 1) if day in fields.day_of_month}
        if fields.last_day_of_month:
            target = max(1, last_day - fields.last_day_offset)
            if fields.nearest_weekday:
                target = nearest_weekday(year, month, target)
            days.add(target)
        return sorted(days)

    def _next_day_of_month(self, current: datetime) -> int | None:
        for day in self.days_of_month(current.year, current.month):
            if day >= current.day:
                return day
        return None

    def _next_day_of_week(self, current: datetime) -> int | None:
        days_of_week = self.fields.day_of_week
        last_day = monthrange(current.year, current.month)[1]
        weekday = cron_day_of_week(current)
        day = current.day

        if self.fields.last_day_of_week:
            target = days_of_week.min
            day += (target - weekday) % 7
            if day > last_day:
                return None
            while day + 7 <= last_day:
                day += 7
            return day

        if self.fields.nth_day_of_week:
            target = days_of_week.min
            day += (target - weekday) % 7
            week_of_month = day // 7 + (1 if day % 7 else 0)
            days_to_add = (self.fields.nth_day_of_week - week_of_month) * 7
            day += days_to_add
            if days_to_add < 0 or day > last_day:
                return None
            return day

        target = days_of_week.next_value_from(weekday)
        if target is None:
            target = days_of_week.min
        day += (target - weekday) % 7
        if day > last_day:
            return None
        return day
