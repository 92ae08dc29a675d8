"""Trigger implementations."""

from cadence.core.triggers.base import Trigger
from cadence.core.triggers.calendar_interval import CalendarIntervalTrigger
from cadence.core.triggers.cron import CronTrigger
from cadence.core.triggers.daily_time_interval import DailyTimeIntervalTrigger
from cadence.core.triggers.definition import TriggerDefinition
from cadence.core.triggers.factory import TriggerFactory
from cadence.core.triggers.nth_included_day import NthIncludedDayTrigger
from cadence.core.triggers.recurrence import RecurrenceTrigger
from cadence.core.triggers.simple import SimpleTrigger

__all__ = [
    "Trigger",
    "CronTrigger",
    "SimpleTrigger",
    "CalendarIntervalTrigger",
    "NthIncludedDayTrigger",
    "RecurrenceTrigger",
    "DailyTimeIntervalTrigger",
    "TriggerDefinition",
    "TriggerFactory",
]
