"""
Cadence - Trigger Time Computation Engine

Computes when scheduled work should fire: cron expressions, fixed and
calendar intervals, repeating windows within the day, the nth included
day of a period and RFC 5545 recurrence rules, with exclusion calendars
and misfire handling.

Usage:
    from datetime import datetime, timedelta, UTC
    from cadence import CronTrigger, SimpleTrigger, WeeklyCalendar

    # Cron trigger - 10:15 on the last Friday of every month, Seoul time
    trigger = CronTrigger(
        "monthly-close",
        cron_expression="0 15 10 ? * 6L",
        timezone="Asia/Seoul",
    )
    trigger.compute_first_fire_time()

    # Simple trigger - every 30 seconds, 10 times, skipping weekends
    weekdays = WeeklyCalendar()
    heartbeat = SimpleTrigger(
        "heartbeat",
        start_time=datetime(2025, 1, 6, tzinfo=UTC),
        repeat_interval=timedelta(seconds=30),
        repeat_count=9,
    )
    heartbeat.compute_first_fire_time(weekdays)

    # The scheduler drives the lifecycle
    heartbeat.triggered(weekdays)               # after firing
    heartbeat.update_after_misfire(weekdays)    # after a missed fire
"""

# Core classes
from cadence.core import (
    REPEAT_INDEFINITELY,
    AnnualCalendar,
    CalendarIntervalTrigger,
    CronCalendar,
    CronEvaluationError,
    CronFieldSet,
    CronFormatError,
    CronTimeComputer,
    CronTrigger,
    DailyCalendar,
    DailyTimeIntervalTrigger,
    ExclusionCalendar,
    HolidayCalendar,
    IntervalUnit,
    InvalidMisfireInstructionError,
    MisfirePolicy,
    MonthlyCalendar,
    NthIncludedDayInterval,
    NthIncludedDayTrigger,
    RecurrenceTrigger,
    SchedulerError,
    SimpleTrigger,
    Trigger,
    TriggerDefinition,
    TriggerKey,
    TriggerType,
    ValidationError,
    WeeklyCalendar,
)

__all__ = [
    # Triggers
    "Trigger",
    "CronTrigger",
    "SimpleTrigger",
    "CalendarIntervalTrigger",
    "NthIncludedDayTrigger",
    "RecurrenceTrigger",
    "DailyTimeIntervalTrigger",
    "TriggerDefinition",
    # Types
    "TriggerType",
    "TriggerKey",
    "IntervalUnit",
    "NthIncludedDayInterval",
    "MisfirePolicy",
    "REPEAT_INDEFINITELY",
    # Cron
    "CronFieldSet",
    "CronTimeComputer",
    # Calendars
    "ExclusionCalendar",
    "AnnualCalendar",
    "CronCalendar",
    "DailyCalendar",
    "HolidayCalendar",
    "MonthlyCalendar",
    "WeeklyCalendar",
    # Exceptions
    "SchedulerError",
    "ValidationError",
    "CronFormatError",
    "CronEvaluationError",
    "InvalidMisfireInstructionError",
]
