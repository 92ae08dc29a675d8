"""Cron expression parsing and fire time calculation."""

from cadence.core.cron.computer import CronTimeComputer, cron_day_of_week, nearest_weekday
from cadence.core.cron.fields import (
    DAYS_OF_WEEK,
    MONTHS,
    CronField,
    CronFieldSet,
    parse_cron_expression,
)

__all__ = [
    "CronTimeComputer",
    "CronField",
    "CronFieldSet",
    "DAYS_OF_WEEK",
    "MONTHS",
    "cron_day_of_week",
    "nearest_weekday",
    "parse_cron_expression",
]
