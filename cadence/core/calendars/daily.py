"""Calendar excluding a time-of-day range."""

from datetime import datetime, time

from cadence.core.calendars.base import BaseCalendar, ExclusionCalendar
from cadence.utils.time import parse_time_of_day


class DailyCalendar(BaseCalendar):
    """
    Excludes a range of each day, inclusive at both ends.

    With ``invert_time_range`` the meaning flips: only the range is included.

    Args:
        range_start: Start of the range, e.g. ``"08:00"``
        range_end: End of the range, e.g. ``"17:00:00"``; must be after the start
        invert_time_range: Include only the range instead of excluding it
    """

    def __init__(
        self,
        range_start: str | time,
        range_end: str | time,
        invert_time_range: bool = False,
        base_calendar: ExclusionCalendar | None = None,
        timezone: str = "UTC",
        description: str | None = None,
    ) -> None:
        super().__init__(base_calendar, timezone, description)
        self.range_start = parse_time_of_day(range_start)
        self.range_end = parse_time_of_day(range_end)
        if self.range_start >= self.range_end:
            raise ValueError(
                f"Invalid time range: {self.range_start} must be before {self.range_end}"
            )
        self.invert_time_range = invert_time_range

    def _includes(self, local_time: datetime) -> bool:
        in_range = self.range_start <= local_time.time() <= self.range_end
        return in_range if self.invert_time_range else not in_range
