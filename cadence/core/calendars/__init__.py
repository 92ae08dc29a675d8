"""Exclusion calendars."""

from cadence.core.calendars.annual import AnnualCalendar
from cadence.core.calendars.base import BaseCalendar, ExclusionCalendar, is_included
from cadence.core.calendars.cron import CronCalendar
from cadence.core.calendars.daily import DailyCalendar
from cadence.core.calendars.holiday import HolidayCalendar
from cadence.core.calendars.monthly import MonthlyCalendar
from cadence.core.calendars.weekly import WeeklyCalendar

__all__ = [
    "AnnualCalendar",
    "BaseCalendar",
    "CronCalendar",
    "DailyCalendar",
    "ExclusionCalendar",
    "HolidayCalendar",
    "MonthlyCalendar",
    "WeeklyCalendar",
    "is_included",
]
