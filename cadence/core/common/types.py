"""Common type definitions for cadence."""

from enum import Enum, IntEnum
from typing import NamedTuple

from cadence.core.common.constants import DEFAULT_GROUP


class TriggerType(Enum):
    """Trigger family tag."""

    CRON = "cron"  # Cron expression
    SIMPLE = "simple"  # Fixed interval with repeat count
    CALENDAR_INTERVAL = "calendar_interval"  # Calendar-aware interval
    NTH_INCLUDED_DAY = "nth_included_day"  # Nth calendar-included day of a period
    RECURRENCE = "recurrence"  # RFC 5545 recurrence rule
    DAILY_TIME_INTERVAL = "daily_time_interval"  # Interval inside a daily time window


class IntervalUnit(Enum):
    """Unit for calendar interval triggers."""

    SECOND = "second"
    MINUTE = "minute"
    HOUR = "hour"
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


class NthIncludedDayInterval(IntEnum):
    """Period scanned by the nth-included-day trigger."""

    MONTHLY = 1
    YEARLY = 2
    WEEKLY = 3


class TriggerKey(NamedTuple):
    """Composite identity of a trigger or job."""

    name: str
    group: str = DEFAULT_GROUP

    def __str__(self) -> str:
        return f"{self.group}.{self.name}"
