"""Fixtures shared by unit tests."""

from datetime import datetime

import pytest

from cadence.core.calendars import HolidayCalendar, WeeklyCalendar
from cadence.utils.time import to_utc


class ExcludeInstants:
    """Calendar excluding an explicit set of instants."""

    def __init__(self, *instants: datetime) -> None:
        self.excluded = {to_utc(instant) for instant in instants}
        self.calls = 0

    def is_time_included(self, time: datetime) -> bool:
        self.calls += 1
        return to_utc(time) not in self.excluded


class ExcludeEverything:
    """Calendar excluding every instant."""

    def is_time_included(self, time: datetime) -> bool:
        return False


class ExcludeBefore:
    """Calendar excluding every instant before a cutoff."""

    def __init__(self, cutoff: datetime) -> None:
        self.cutoff = cutoff

    def is_time_included(self, time: datetime) -> bool:
        return to_utc(time) >= self.cutoff


@pytest.fixture
def weekends():
    """Weekly calendar excluding Saturday and Sunday (UTC)."""
    return WeeklyCalendar()


@pytest.fixture
def holidays():
    """Empty holiday calendar to add dates to."""
    return HolidayCalendar()


@pytest.fixture
def exclude_instants():
    """Factory for calendars excluding explicit instants."""
    return ExcludeInstants


@pytest.fixture
def exclude_everything():
    """Calendar excluding every instant."""
    return ExcludeEverything()


@pytest.fixture
def exclude_before():
    """Factory for calendars excluding everything before a cutoff."""
    return ExcludeBefore
