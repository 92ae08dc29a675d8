"""Trigger class lookup and construction."""

from typing import Any

from cadence.core.common.types import TriggerType
from cadence.core.triggers.base import Trigger
from cadence.core.triggers.calendar_interval import CalendarIntervalTrigger
from cadence.core.triggers.cron import CronTrigger
from cadence.core.triggers.daily_time_interval import DailyTimeIntervalTrigger
from cadence.core.triggers.nth_included_day import NthIncludedDayTrigger
from cadence.core.triggers.recurrence import RecurrenceTrigger
from cadence.core.triggers.simple import SimpleTrigger


class TriggerFactory:
    """Map trigger types to trigger classes."""

    _TRIGGER_CLASSES: dict[TriggerType, type[Trigger]] = {
        TriggerType.CRON: CronTrigger,
        TriggerType.SIMPLE: SimpleTrigger,
        TriggerType.CALENDAR_INTERVAL: CalendarIntervalTrigger,
        TriggerType.NTH_INCLUDED_DAY: NthIncludedDayTrigger,
        TriggerType.RECURRENCE: RecurrenceTrigger,
        TriggerType.DAILY_TIME_INTERVAL: DailyTimeIntervalTrigger,
    }

    @classmethod
    def get_trigger_class(cls, trigger_type: TriggerType | str) -> type[Trigger]:
        """
        Get trigger class for the specified trigger type.

        Args:
            trigger_type: Trigger type or its value ("cron", "simple", ...)

        Returns:
            Trigger class

        Raises:
            ValueError: If trigger type is unknown
        """
        try:
            return cls._TRIGGER_CLASSES[TriggerType(trigger_type)]
        except (KeyError, ValueError):
            raise ValueError(f"Unknown trigger type: {trigger_type}") from None

    @classmethod
    def create(cls, trigger_type: TriggerType | str, name: str, **kwargs: Any) -> Trigger:
        """
        Construct a trigger.

        Args:
            trigger_type: Trigger type or its value
            name: Trigger name
            **kwargs: Constructor arguments of the trigger class

        Returns:
            New trigger (first fire time not yet computed)
        """
        return cls.get_trigger_class(trigger_type)(name, **kwargs)
