"""Calendar excluding days of the week."""

import calendar
from collections.abc import Iterable
from datetime import datetime

from cadence.core.calendars.base import BaseCalendar, ExclusionCalendar

WEEKEND = (calendar.SATURDAY, calendar.SUNDAY)


class WeeklyCalendar(BaseCalendar):
    """
    Excludes days of the week.

    Weekdays use Python numbering (``calendar.MONDAY`` = 0 ...
    ``calendar.SUNDAY`` = 6). Saturday and Sunday are excluded by default.
    """

    def __init__(
        self,
        excluded_days: Iterable[int] = WEEKEND,
        base_calendar: ExclusionCalendar | None = None,
        timezone: str = "UTC",
        description: str | None = None,
    ) -> None:
        super().__init__(base_calendar, timezone, description)
        self._excluded = [False] * 7
        for weekday in excluded_days:
            self.set_day_excluded(weekday, True)

    def set_day_excluded(self, weekday: int, excluded: bool) -> None:
        if not 0 <= weekday <= 6:
            raise ValueError(f"Weekday must be between 0 (Monday) and 6 (Sunday), got {weekday}")
        self._excluded[weekday] = excluded

    def is_day_excluded(self, weekday: int) -> bool:
        return self._excluded[weekday]

    @property
    def are_all_days_excluded(self) -> bool:
        return all(self._excluded)

    def _includes(self, local_time: datetime) -> bool:
        return not self._excluded[local_time.weekday()]
