"""Calendar excluding a set of dates."""

from collections.abc import Iterable
from datetime import date, datetime

from cadence.core.calendars.base import BaseCalendar, ExclusionCalendar


class HolidayCalendar(BaseCalendar):
    """Excludes whole days, such as public holidays."""

    def __init__(
        self,
        excluded_dates: Iterable[date] = (),
        base_calendar: ExclusionCalendar | None = None,
        timezone: str = "UTC",
        description: str | None = None,
    ) -> None:
        super().__init__(base_calendar, timezone, description)
        self._excluded: set[date] = set()
        for excluded in excluded_dates:
            self.add_excluded_date(excluded)

    @property
    def excluded_dates(self) -> list[date]:
        return sorted(self._excluded)

    def add_excluded_date(self, excluded: date) -> None:
        if isinstance(excluded, datetime):
            excluded = excluded.date()
        self._excluded.add(excluded)

    def remove_excluded_date(self, excluded: date) -> None:
        if isinstance(excluded, datetime):
            excluded = excluded.date()
        self._excluded.discard(excluded)

    def _includes(self, local_time: datetime) -> bool:
        return local_time.date() not in self._excluded
