"""Misfire resolution: decide a trigger's new schedule after a missed fire."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from cadence.core.calendars.base import ExclusionCalendar, is_included
from cadence.core.common.constants import REPEAT_INDEFINITELY
from cadence.core.common.types import TriggerType
from cadence.core.misfire.instructions import (
    CronTriggerMisfire,
    MisfireInstruction,
    SimpleTriggerMisfire,
)
from cadence.utils.logging import ContextLogger, get_logger

if TYPE_CHECKING:
    from cadence.core.triggers.base import Trigger
    from cadence.core.triggers.simple import SimpleTrigger


class MisfireResolver:
    """
    Apply a trigger's misfire instruction.

    Updates the trigger in place (next fire time, and for fixed-interval
    triggers possibly start time, repeat count and fire count). Every
    resolved fire time is re-checked against the calendar; if no included
    fire time remains the trigger ends up with no next fire time.
    """

    def __init__(self, logger: ContextLogger | None = None) -> None:
        self.logger = logger or get_logger("MisfireResolver")

    def resolve(self, trigger: Trigger, calendar: ExclusionCalendar | None = None) -> datetime | None:
        """
        Resolve a misfire.

        Args:
            trigger: Trigger whose next fire time was missed
            calendar: Exclusion calendar associated with the trigger

        Returns:
            The trigger's new next fire time (None if it will not fire again)
        """
        instruction = self.effective_instruction(trigger)
        if instruction == MisfireInstruction.IGNORE_MISFIRE_POLICY:
            return trigger.next_fire_time

        missed = trigger.next_fire_time
        now = trigger.now()
        if trigger.trigger_type is TriggerType.SIMPLE:
            self._resolve_simple(trigger, SimpleTriggerMisfire(instruction), now, calendar)  # type: ignore[arg-type]
        elif instruction == CronTriggerMisfire.FIRE_ONCE_NOW:
            trigger.next_fire_time = self._fire_now(trigger, now, calendar)
        else:
            trigger.next_fire_time = trigger.skip_excluded(trigger.get_fire_time_after(now), calendar)

        self.logger.info(
            "Misfire resolved",
            trigger=str(trigger.key),
            instruction=int(instruction),
            missed_fire_time=missed.isoformat() if missed else None,
            next_fire_time=(
                trigger.next_fire_time.isoformat() if trigger.next_fire_time else None
            ),
        )
        return trigger.next_fire_time

    @staticmethod
    def effective_instruction(trigger: Trigger) -> int:
        """
        Resolve the smart policy to the family's concrete instruction.

        Args:
            trigger: Trigger to inspect

        Returns:
            Concrete instruction code (never SMART_POLICY)
        """
        instruction = trigger.misfire_instruction
        if trigger.trigger_type is not TriggerType.SIMPLE:
            if instruction == MisfireInstruction.SMART_POLICY:
                return CronTriggerMisfire.FIRE_ONCE_NOW
            return instruction

        repeat_count = trigger.repeat_count  # type: ignore[attr-defined]
        if instruction == MisfireInstruction.SMART_POLICY:
            if repeat_count == 0:
                return SimpleTriggerMisfire.FIRE_NOW
            if repeat_count == REPEAT_INDEFINITELY:
                return SimpleTriggerMisfire.RESCHEDULE_NEXT_WITH_REMAINING_COUNT
            return SimpleTriggerMisfire.RESCHEDULE_NOW_WITH_EXISTING_REPEAT_COUNT
        if instruction == SimpleTriggerMisfire.FIRE_NOW and repeat_count != 0:
            return SimpleTriggerMisfire.RESCHEDULE_NOW_WITH_REMAINING_REPEAT_COUNT
        return instruction

    # ------------------------------------------------------------------------------
    # Families
    # ------------------------------------------------------------------------------

    @staticmethod
    def _fire_now(
        trigger: Trigger, now: datetime, calendar: ExclusionCalendar | None
    ) -> datetime | None:
        if is_included(calendar, now):
            return now
        return trigger.skip_excluded(trigger.get_fire_time_after(now), calendar)

    def _resolve_simple(
        self,
        trigger: SimpleTrigger,
        instruction: SimpleTriggerMisfire,
        now: datetime,
        calendar: ExclusionCalendar | None,
    ) -> None:
        if instruction == SimpleTriggerMisfire.FIRE_NOW:
            trigger.next_fire_time = self._fire_now(trigger, now, calendar)

        elif instruction == SimpleTriggerMisfire.RESCHEDULE_NEXT_WITH_EXISTING_COUNT:
            trigger.next_fire_time = trigger.skip_excluded(
                trigger.get_fire_time_after(now), calendar
            )

        elif instruction == SimpleTriggerMisfire.RESCHEDULE_NEXT_WITH_REMAINING_COUNT:
            new_fire_time = trigger.skip_excluded(trigger.get_fire_time_after(now), calendar)
            if new_fire_time is not None and trigger.next_fire_time is not None:
                trigger.times_triggered += trigger.compute_num_times_fired_between(
                    trigger.next_fire_time, new_fire_time
                )
            trigger.next_fire_time = new_fire_time

        elif instruction == SimpleTriggerMisfire.RESCHEDULE_NOW_WITH_EXISTING_REPEAT_COUNT:
            if trigger.repeat_count not in (0, REPEAT_INDEFINITELY):
                trigger.repeat_count = max(0, trigger.repeat_count - trigger.times_triggered)
                trigger.times_triggered = 0
            self._restart_at(trigger, now, calendar)

        elif instruction == SimpleTriggerMisfire.RESCHEDULE_NOW_WITH_REMAINING_REPEAT_COUNT:
            if trigger.repeat_count not in (0, REPEAT_INDEFINITELY):
                times_missed = 0
                if trigger.next_fire_time is not None:
                    times_missed = trigger.compute_num_times_fired_between(
                        trigger.next_fire_time, now
                    )
                remaining = trigger.repeat_count - (trigger.times_triggered + times_missed)
                trigger.repeat_count = max(0, remaining)
                trigger.times_triggered = 0
            self._restart_at(trigger, now, calendar)

    def _restart_at(
        self, trigger: SimpleTrigger, now: datetime, calendar: ExclusionCalendar | None
    ) -> None:
        """Move the trigger's start to ``now`` unless its end has already passed."""
        if trigger.end_time is not None and trigger.end_time < now:
            trigger.next_fire_time = None
            return
        trigger.start_time = now
        trigger.next_fire_time = self._fire_now(trigger, now, calendar)


# Shared stateless instance
MISFIRE_RESOLVER = MisfireResolver()
