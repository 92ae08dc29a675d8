"""Calendar excluding the same days every year."""

from collections.abc import Iterable
from datetime import date, datetime

from cadence.core.calendars.base import BaseCalendar, ExclusionCalendar


class AnnualCalendar(BaseCalendar):
    """Excludes (month, day) pairs regardless of the year, e.g. December 25."""

    def __init__(
        self,
        excluded_days: Iterable[date | tuple[int, int]] = (),
        base_calendar: ExclusionCalendar | None = None,
        timezone: str = "UTC",
        description: str | None = None,
    ) -> None:
        super().__init__(base_calendar, timezone, description)
        self._excluded: set[tuple[int, int]] = set()
        for day in excluded_days:
            self.set_day_excluded(day, True)

    @staticmethod
    def _month_day(day: date | tuple[int, int]) -> tuple[int, int]:
        if isinstance(day, date):
            return day.month, day.day
        month, day_of_month = day
        # Leap year so that February 29 is accepted
        date(2000, month, day_of_month)
        return month, day_of_month

    def set_day_excluded(self, day: date | tuple[int, int], excluded: bool) -> None:
        key = self._month_day(day)
        if excluded:
            self._excluded.add(key)
        else:
            self._excluded.discard(key)

    def is_day_excluded(self, day: date | tuple[int, int]) -> bool:
        return self._month_day(day) in self._excluded

    def _includes(self, local_time: datetime) -> bool:
        return (local_time.month, local_time.day) not in self._excluded
