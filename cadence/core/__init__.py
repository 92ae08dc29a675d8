"""Core scheduling components."""

from cadence.core.calendars import (
    AnnualCalendar,
    BaseCalendar,
    CronCalendar,
    DailyCalendar,
    ExclusionCalendar,
    HolidayCalendar,
    MonthlyCalendar,
    WeeklyCalendar,
)
from cadence.core.common import (
    REPEAT_INDEFINITELY,
    CronEvaluationError,
    CronFormatError,
    IntervalUnit,
    InvalidMisfireInstructionError,
    NthIncludedDayInterval,
    SchedulerError,
    TriggerKey,
    TriggerType,
    ValidationError,
)
from cadence.core.cron import CronFieldSet, CronTimeComputer, parse_cron_expression
from cadence.core.misfire import (
    MISFIRE_RESOLVER,
    CronTriggerMisfire,
    MisfireClassifier,
    MisfireInstruction,
    MisfirePolicy,
    MisfireResolver,
    SimpleTriggerMisfire,
)
from cadence.core.triggers import (
    CalendarIntervalTrigger,
    CronTrigger,
    DailyTimeIntervalTrigger,
    NthIncludedDayTrigger,
    RecurrenceTrigger,
    SimpleTrigger,
    Trigger,
    TriggerDefinition,
    TriggerFactory,
)

__all__ = [
    # Common Types
    "TriggerType",
    "TriggerKey",
    "IntervalUnit",
    "NthIncludedDayInterval",
    "REPEAT_INDEFINITELY",
    # Exceptions
    "SchedulerError",
    "ValidationError",
    "CronFormatError",
    "CronEvaluationError",
    "InvalidMisfireInstructionError",
    # Cron
    "CronFieldSet",
    "CronTimeComputer",
    "parse_cron_expression",
    # Calendars
    "ExclusionCalendar",
    "BaseCalendar",
    "AnnualCalendar",
    "CronCalendar",
    "DailyCalendar",
    "HolidayCalendar",
    "MonthlyCalendar",
    "WeeklyCalendar",
    # Misfire
    "MisfireInstruction",
    "SimpleTriggerMisfire",
    "CronTriggerMisfire",
    "MisfirePolicy",
    "MisfireResolver",
    "MisfireClassifier",
    "MISFIRE_RESOLVER",
    # Triggers
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
