"""Exclusion calendar interface and chaining base class."""

from __future__ import annotations

import copy
from datetime import datetime, tzinfo
from typing import Protocol, runtime_checkable

from cadence.utils.time import get_timezone, to_utc


@runtime_checkable
class ExclusionCalendar(Protocol):
    """
    Predicate over instants used to skip otherwise-due fire times.

    Triggers only ever call :meth:`is_time_included`; ``None`` in place of a
    calendar means every instant is included.
    """

    def is_time_included(self, time: datetime) -> bool: ...


def is_included(calendar: ExclusionCalendar | None, time: datetime) -> bool:
    """Evaluate ``calendar`` at ``time``, treating a missing calendar as all-inclusive."""
    return calendar is None or calendar.is_time_included(time)


class BaseCalendar:
    """
    Base class for concrete calendars.

    An instant is included only if this calendar and its optional base
    calendar both include it, so calendars can be stacked (e.g. weekends
    on top of public holidays).

    Args:
        base_calendar: Calendar consulted before this one
        timezone: IANA timezone in which dates and times of day are read
        description: Free-form description
    """

    def __init__(
        self,
        base_calendar: ExclusionCalendar | None = None,
        timezone: str = "UTC",
        description: str | None = None,
    ) -> None:
        self.base_calendar = base_calendar
        self.timezone = timezone
        self.tz: tzinfo = get_timezone(timezone)
        self.description = description

    def is_time_included(self, time: datetime) -> bool:
        """
        Check whether ``time`` is included.

        Args:
            time: Instant to test (naive values are taken as UTC)

        Returns:
            True if neither this calendar nor its base excludes the instant
        """
        if self.base_calendar is not None and not self.base_calendar.is_time_included(time):
            return False
        return self._includes(self.to_local(time))

    def _includes(self, local_time: datetime) -> bool:
        return True

    def to_local(self, time: datetime) -> datetime:
        """Convert an instant to this calendar's timezone."""
        return to_utc(time).astimezone(self.tz)

    def clone(self) -> BaseCalendar:
        return copy.deepcopy(self)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(timezone={self.timezone!r}, description={self.description!r})"
