"""Misfire classification utilities."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from cadence.core.common.constants import DEFAULT_MISFIRE_THRESHOLD
from cadence.utils.time import to_utc

if TYPE_CHECKING:
    from cadence.core.triggers.base import Trigger


class MisfireClassifier:
    """
    Pure misfire classification logic.

    Used by the scheduler loop to decide whether a due trigger gets
    ``triggered`` or ``update_after_misfire``.
    """

    @staticmethod
    def classify_due_triggers(
        triggers: Iterable[Trigger],
        current_time: datetime,
        threshold: timedelta = DEFAULT_MISFIRE_THRESHOLD,
    ) -> tuple[list[Trigger], list[Trigger]]:
        """
        Classify triggers into normal and misfired.

        Args:
            triggers: Due triggers (next fire time <= current time)
            current_time: Current time (timezone-aware datetime)
            threshold: How late a fire may be before it counts as missed

        Returns:
            (normal_triggers, misfired_triggers) tuple
        """
        normal = []
        misfired = []

        for trigger in triggers:
            if MisfireClassifier.is_misfired(trigger, current_time, threshold):
                misfired.append(trigger)
            else:
                normal.append(trigger)

        return normal, misfired

    @staticmethod
    def is_misfired(
        trigger: Trigger,
        current_time: datetime,
        threshold: timedelta = DEFAULT_MISFIRE_THRESHOLD,
    ) -> bool:
        """
        Check if a single trigger is misfired.

        A trigger is misfired if:
        next_fire_time + threshold < current_time

        Args:
            trigger: Trigger to check
            current_time: Current time (timezone-aware datetime)
            threshold: Misfire threshold

        Returns:
            True if misfired, False otherwise
        """
        if trigger.next_fire_time is None:
            return False
        return trigger.next_fire_time + threshold < to_utc(current_time)

    @staticmethod
    def get_misfire_delay(
        trigger: Trigger,
        current_time: datetime,
        threshold: timedelta = DEFAULT_MISFIRE_THRESHOLD,
    ) -> timedelta | None:
        """
        Get how late a trigger is.

        Args:
            trigger: Trigger to check
            current_time: Current time (timezone-aware datetime)
            threshold: Misfire threshold

        Returns:
            Delay duration if misfired, None otherwise
        """
        if not MisfireClassifier.is_misfired(trigger, current_time, threshold):
            return None
        return to_utc(current_time) - trigger.next_fire_time  # type: ignore[operator]
