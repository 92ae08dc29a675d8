"""Common test fixtures and utilities."""

from datetime import UTC, datetime, timedelta

import pytest


class FrozenClock:
    """
    Manually advanced clock for deterministic tests.

    Passed to triggers as ``clock=...``; the trigger calls it to read "now".

    Example:
        clock = FrozenClock(datetime(2024, 1, 1, tzinfo=UTC))
        trigger = SimpleTrigger("t", clock=clock)
        clock.advance(timedelta(minutes=5))
    """

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> datetime:
        self.now += delta
        return self.now

    def set(self, now: datetime) -> None:
        self.now = now


@pytest.fixture
def clock():
    """Clock frozen at 2024-01-01 00:00 UTC."""
    return FrozenClock(datetime(2024, 1, 1, tzinfo=UTC))
