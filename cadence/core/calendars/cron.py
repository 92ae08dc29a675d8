"""Calendar excluding the instants matched by a cron expression."""

from datetime import datetime

from cadence.core.calendars.base import BaseCalendar, ExclusionCalendar
from cadence.core.cron.computer import CronTimeComputer
from cadence.core.cron.fields import CronFieldSet


class CronCalendar(BaseCalendar):
    """
    Excludes every second matched by a cron expression.

    For example ``"* * 0-7,18-23 ? * *"`` excludes everything outside
    business hours.
    """

    def __init__(
        self,
        cron_expression: str,
        base_calendar: ExclusionCalendar | None = None,
        timezone: str = "UTC",
        description: str | None = None,
    ) -> None:
        super().__init__(base_calendar, timezone, description)
        self.fields = CronFieldSet(cron_expression)
        self._computer = CronTimeComputer(self.fields, self.tz)
        self._computer.check_day_fields()

    @property
    def cron_expression(self) -> str:
        return self.fields.expression

    def _includes(self, local_time: datetime) -> bool:
        return not self._computer.is_satisfied_by(local_time)
