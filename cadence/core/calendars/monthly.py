"""Calendar excluding days of the month."""

from collections.abc import Iterable
from datetime import datetime

from cadence.core.calendars.base import BaseCalendar, ExclusionCalendar


class MonthlyCalendar(BaseCalendar):
    """Excludes days of the month (1-31) in every month."""

    def __init__(
        self,
        excluded_days: Iterable[int] = (),
        base_calendar: ExclusionCalendar | None = None,
        timezone: str = "UTC",
        description: str | None = None,
    ) -> None:
        super().__init__(base_calendar, timezone, description)
        self._excluded: set[int] = set()
        for day in excluded_days:
            self.set_day_excluded(day, True)

    def set_day_excluded(self, day: int, excluded: bool) -> None:
        if not 1 <= day <= 31:
            raise ValueError(f"Day of month must be between 1 and 31, got {day}")
        if excluded:
            self._excluded.add(day)
        else:
            self._excluded.discard(day)

    def is_day_excluded(self, day: int) -> bool:
        return day in self._excluded

    @property
    def are_all_days_excluded(self) -> bool:
        return len(self._excluded) == 31

    def _includes(self, local_time: datetime) -> bool:
        return local_time.day not in self._excluded
