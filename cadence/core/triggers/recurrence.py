"""Recurrence rule (RFC 5545 RRULE) trigger."""

from __future__ import annotations

import re
from datetime import UTC, datetime, tzinfo
from typing import Any

from dateutil.rrule import rrule, rruleset, rrulestr

from cadence.core.common.constants import DEFAULT_GROUP, YEAR_TO_GIVE_UP_SCHEDULING_AT
from cadence.core.common.exceptions import ValidationError
from cadence.core.common.types import TriggerType
from cadence.core.triggers.base import Trigger
from cadence.utils.time import get_timezone, localize, to_utc, to_wall_time

BOUNDED_RULE = re.compile(r"\b(?:COUNT|UNTIL)=", re.IGNORECASE)
UTC_UNTIL = re.compile(r"\bUNTIL=(\d{8}T\d{6})Z", re.IGNORECASE)


def parse_recurrence_rule(rule: str, dtstart: datetime, tz: tzinfo) -> rrule | rruleset:
    """
    Parse an RRULE against a wall-clock start time.

    Occurrences are generated in wall-clock time so that they keep their
    local time of day across DST changes. A UTC ``UNTIL`` (``...Z``, the
    RFC 5545 form for zoned rules) is converted to wall-clock time in ``tz``
    first.

    Args:
        rule: RRULE text, with or without the ``RRULE:`` prefix
        dtstart: Naive wall-clock start time
        tz: Timezone the rule is evaluated in

    Returns:
        Parsed rule

    Raises:
        ValueError: The rule cannot be parsed
    """

    def to_wall_until(match: re.Match[str]) -> str:
        until = datetime.strptime(match.group(1), "%Y%m%dT%H%M%S").replace(tzinfo=UTC)
        return "UNTIL=" + to_wall_time(until, tz).strftime("%Y%m%dT%H%M%S")

    try:
        return rrulestr(UTC_UNTIL.sub(to_wall_until, rule), dtstart=dtstart)
    except TypeError as e:
        raise ValueError(str(e)) from e


class RecurrenceTrigger(Trigger):
    """
    Trigger firing on the occurrences of an iCalendar recurrence rule.

    The rule is anchored at the start time's wall-clock time in the trigger's
    timezone, e.g. ``"FREQ=MONTHLY;BYDAY=MO,TU,WE,TH,FR;BYSETPOS=-1"`` fires on
    the last weekday of every month at the start time's hour.

    Args:
        name: Trigger name
        group: Trigger group
        recurrence_rule: RRULE text, with or without the ``RRULE:`` prefix
        timezone: IANA timezone the rule is evaluated in
        **kwargs: Common trigger arguments (see :class:`Trigger`)

    Raises:
        ValidationError: The rule cannot be parsed
    """

    trigger_type = TriggerType.RECURRENCE

    def __init__(
        self,
        name: str,
        group: str = DEFAULT_GROUP,
        *,
        recurrence_rule: str,
        timezone: str = "UTC",
        **kwargs: Any,
    ) -> None:
        super().__init__(name, group, **kwargs)
        self.recurrence_rule = recurrence_rule
        self.timezone = timezone
        self.tz = get_timezone(timezone)
        self._rule_start = self.start_time
        self._rule = self._build_rule()

    @property
    def rule(self) -> rrule | rruleset:
        """Parsed rule, rebuilt when the start time changes."""
        if self._rule_start != self.start_time:
            self._rule = self._build_rule()
            self._rule_start = self.start_time
        return self._rule

    def _build_rule(self) -> rrule | rruleset:
        dtstart = to_wall_time(self.start_time, self.tz).replace(microsecond=0)
        try:
            return parse_recurrence_rule(self.recurrence_rule, dtstart, self.tz)
        except ValueError as e:
            raise ValidationError(f"Invalid recurrence rule '{self.recurrence_rule}': {e}") from e

    def get_fire_time_after(self, after: datetime | None = None) -> datetime | None:
        after = to_utc(after) if after is not None else self.now()
        if after < self.start_time:
            after = self._before_start()
        if self.end_time is not None and after >= self.end_time:
            return None

        wall = to_wall_time(after, self.tz)
        while True:
            occurrence = self.rule.after(wall, inc=False)
            if occurrence is None or occurrence.year > YEAR_TO_GIVE_UP_SCHEDULING_AT:
                return None
            fire_time = localize(occurrence, self.tz)
            if fire_time > after:
                break
            wall = occurrence

        if self.end_time is not None and fire_time >= self.end_time:
            return None
        return fire_time

    @property
    def final_fire_time(self) -> datetime | None:
        if self.end_time is not None:
            occurrence = self.rule.before(to_wall_time(self.end_time, self.tz), inc=False)
            while occurrence is not None and localize(occurrence, self.tz) >= self.end_time:
                occurrence = self.rule.before(occurrence, inc=False)
        elif BOUNDED_RULE.search(self.recurrence_rule):
            occurrence = None
            for candidate in self.rule:
                if candidate.year > YEAR_TO_GIVE_UP_SCHEDULING_AT:
                    break
                occurrence = candidate
        else:
            return None

        if occurrence is None:
            return None
        final = localize(occurrence, self.tz)
        if final < self.start_time:
            return None
        return final

    def _trigger_args(self) -> dict[str, Any]:
        return {"recurrence_rule": self.recurrence_rule, "timezone": self.timezone}
