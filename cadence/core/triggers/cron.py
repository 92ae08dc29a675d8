"""Cron trigger."""

from __future__ import annotations

import copy
from datetime import UTC, datetime
from typing import Any

from cadence.core.common.constants import DEFAULT_GROUP, YEAR_TO_GIVE_UP_SCHEDULING_AT
from cadence.core.common.types import TriggerType
from cadence.core.cron.computer import CronTimeComputer
from cadence.core.cron.fields import CronFieldSet
from cadence.core.triggers.base import ONE_SECOND, Trigger
from cadence.utils.time import get_timezone, localize, to_utc, to_wall_time


class CronTrigger(Trigger):
    """
    Trigger firing on the seconds matched by a cron expression.

    Args:
        name: Trigger name
        group: Trigger group
        cron_expression: Six or seven field cron expression (or a parsed field set)
        timezone: IANA timezone in which the expression is evaluated
        **kwargs: Common trigger arguments (see :class:`Trigger`)

    Raises:
        CronFormatError: Malformed expression
        CronEvaluationError: Both day-of-month and day-of-week are constrained
    """

    trigger_type = TriggerType.CRON

    def __init__(
        self,
        name: str,
        group: str = DEFAULT_GROUP,
        *,
        cron_expression: str | CronFieldSet,
        timezone: str = "UTC",
        **kwargs: Any,
    ) -> None:
        self.timezone = timezone
        self.tz = get_timezone(timezone)
        if isinstance(cron_expression, CronFieldSet):
            self.fields = cron_expression
        else:
            self.fields = CronFieldSet(cron_expression)
        self._computer = CronTimeComputer(self.fields, self.tz)
        self._computer.check_day_fields()
        super().__init__(name, group, **kwargs)

    @property
    def cron_expression(self) -> str:
        return self.fields.expression

    def get_fire_time_after(self, after: datetime | None = None) -> datetime | None:
        after = to_utc(after) if after is not None else self.now()
        if after < self.start_time:
            after = self._before_start()
        if self.end_time is not None and after >= self.end_time:
            return None

        fire_time = self._computer.next_fire_time(after)
        if fire_time is None:
            return None
        if self.end_time is not None and fire_time >= self.end_time:
            return None
        return fire_time

    @property
    def final_fire_time(self) -> datetime | None:
        """
        Last fire time before the end time.

        Without an end time the schedule only ends if its year field is bounded.
        """
        if self.end_time is not None:
            before = self.end_time
        elif not self.fields.years.is_all:
            before = datetime(YEAR_TO_GIVE_UP_SCHEDULING_AT + 1, 1, 2, tzinfo=UTC)
        else:
            return None

        final = self._computer.previous_fire_time(before)
        if final is None or final < self.start_time:
            return None
        return final

    def get_previous_fire_time_before(self, before: datetime) -> datetime | None:
        """Latest fire time strictly before ``before`` and not before the start time."""
        previous = self._computer.previous_fire_time(before)
        if previous is None or previous < self.start_time:
            return None
        return previous

    def will_fire_on(self, instant: datetime, day_only: bool = False) -> bool:
        """
        Check whether the trigger fires at ``instant``.

        Args:
            instant: Instant to test (whole seconds)
            day_only: Only check whether it fires at any time on that local day

        Returns:
            True if the trigger fires at that instant (or on that day)
        """
        instant = to_utc(instant).replace(microsecond=0)
        if not day_only:
            return self.get_fire_time_after(instant - ONE_SECOND) == instant

        local_day = to_wall_time(instant, self.tz).date()
        day_start = localize(datetime.combine(local_day, datetime.min.time()), self.tz)
        fire_time = self.get_fire_time_after(day_start - ONE_SECOND)
        if fire_time is None:
            return False
        return to_wall_time(fire_time, self.tz).date() == local_day

    def clone(self) -> CronTrigger:
        """Copy the trigger with a freshly parsed expression."""
        cloned = copy.copy(self)
        cloned.fields = CronFieldSet.parse(self.fields.expression)
        cloned._computer = CronTimeComputer(cloned.fields, self.tz)
        return cloned

    def _trigger_args(self) -> dict[str, Any]:
        return {"cron_expression": self.cron_expression, "timezone": self.timezone}

