"""Base trigger class."""

from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any, ClassVar

from cadence.core.calendars.base import ExclusionCalendar, is_included
from cadence.core.common.constants import (
    DEFAULT_GROUP,
    DEFAULT_MISFIRE_THRESHOLD,
    DEFAULT_PRIORITY,
    YEAR_TO_GIVE_UP_SCHEDULING_AT,
)
from cadence.core.common.exceptions import InvalidMisfireInstructionError, ValidationError
from cadence.core.common.types import TriggerKey, TriggerType
from cadence.core.misfire.handler import MISFIRE_RESOLVER
from cadence.core.misfire.instructions import (
    MisfireInstruction,
    MisfirePolicy,
    resolve_instruction,
    valid_instructions,
)
from cadence.type_defs import TriggerStateData
from cadence.utils.logging import get_logger
from cadence.utils.time import to_utc, utc_now

ONE_SECOND = timedelta(seconds=1)

Clock = Callable[[], datetime]


def _isoformat(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


class Trigger(ABC):
    """
    Abstract trigger: a schedule plus its fire-time state.

    The owning scheduler drives the lifecycle::

        trigger.compute_first_fire_time(calendar)   # once, before activation
        trigger.triggered(calendar)                 # each time next_fire_time is reached
        trigger.update_after_misfire(calendar)      # instead, when the fire was missed
        trigger.update_with_new_calendar(calendar, threshold)

    Triggers are not thread-safe: the scheduler must serialize calls that
    mutate a given trigger.

    Args:
        name: Trigger name
        group: Trigger group; name and group form the key
        start_time: Earliest instant the trigger may fire (default: now)
        end_time: Instant at which the trigger stops firing (exclusive)
        job_name: Name of the job fired by this trigger
        job_group: Group of that job
        description: Free-form description
        priority: Tie-breaker between triggers due at the same instant (higher first)
        misfire_instruction: Instruction code or friendly MisfirePolicy
        clock: Callable returning the current UTC time
    """

    trigger_type: ClassVar[TriggerType]

    def __init__(
        self,
        name: str,
        group: str = DEFAULT_GROUP,
        *,
        start_time: datetime | None = None,
        end_time: datetime | None = None,
        job_name: str | None = None,
        job_group: str = DEFAULT_GROUP,
        description: str | None = None,
        priority: int = DEFAULT_PRIORITY,
        misfire_instruction: int | MisfirePolicy | str = MisfireInstruction.SMART_POLICY,
        clock: Clock | None = None,
    ) -> None:
        if not name:
            raise ValidationError("Trigger name cannot be empty")
        if not group:
            raise ValidationError("Trigger group cannot be empty")

        self.key = TriggerKey(name, group)
        self.job_key = TriggerKey(job_name, job_group) if job_name else None
        self.description = description
        self.priority = priority
        self._clock = clock or utc_now
        self.logger = get_logger(type(self).__name__, trigger=str(self.key))

        self._start_time = to_utc(start_time) if start_time is not None else self.now()
        self._end_time: datetime | None = None
        self.end_time = end_time
        self.misfire_instruction = misfire_instruction  # type: ignore[assignment]

        self.next_fire_time: datetime | None = None
        self.previous_fire_time: datetime | None = None

    # ---------------------------------------------------------------------------
    # Properties
    # ---------------------------------------------------------------------------

    @property
    def name(self) -> str:
        return self.key.name

    @property
    def group(self) -> str:
        return self.key.group

    @property
    def start_time(self) -> datetime:
        return self._start_time

    @start_time.setter
    def start_time(self, value: datetime) -> None:
        value = to_utc(value)
        if self._end_time is not None and self._end_time < value:
            raise ValidationError("End time cannot be before start time")
        self._start_time = value

    @property
    def end_time(self) -> datetime | None:
        return self._end_time

    @end_time.setter
    def end_time(self, value: datetime | None) -> None:
        if value is not None:
            value = to_utc(value)
            if value < self._start_time:
                raise ValidationError("End time cannot be before start time")
        self._end_time = value

    @property
    def misfire_instruction(self) -> int:
        return self._misfire_instruction

    @misfire_instruction.setter
    def misfire_instruction(self, value: int | MisfirePolicy | str) -> None:
        if isinstance(value, str):
            value = resolve_instruction(value, self.trigger_type)
        if int(value) not in valid_instructions(self.trigger_type):
            raise InvalidMisfireInstructionError(int(value), self.trigger_type.value)
        self._misfire_instruction = int(value)

    def now(self) -> datetime:
        """Current time according to the trigger's clock."""
        return to_utc(self._clock())

    # ---------------------------------------------------------------------------
    # Schedule
    # ---------------------------------------------------------------------------

    @abstractmethod
    def get_fire_time_after(self, after: datetime | None = None) -> datetime | None:
        """
        Get the first time the trigger fires strictly after ``after``.

        The trigger's state is not changed; calendars are not consulted.

        Args:
            after: Reference instant (default: now)

        Returns:
            Fire time in UTC, or None if the trigger never fires after ``after``
        """

    @property
    @abstractmethod
    def final_fire_time(self) -> datetime | None:
        """Last time the trigger will fire, or None if it repeats forever."""

    @abstractmethod
    def _trigger_args(self) -> dict[str, Any]:
        """Variant-specific schedule parameters for :meth:`to_dict`."""

    def _before_start(self) -> datetime:
        """Latest instant whose following fire time cannot precede the start time."""
        if self._start_time.microsecond:
            return self._start_time.replace(microsecond=0)
        return self._start_time - ONE_SECOND

    def _use_calendar(self, calendar: ExclusionCalendar | None) -> None:
        """Hook for triggers that consult the calendar while computing fire times."""

    def skip_excluded(
        self, candidate: datetime | None, calendar: ExclusionCalendar | None
    ) -> datetime | None:
        """
        Advance ``candidate`` past instants the calendar excludes.

        Args:
            candidate: First fire time to test
            calendar: Exclusion calendar (None includes everything)

        Returns:
            First included fire time, or None if the trigger runs out first
        """
        while candidate is not None and not is_included(calendar, candidate):
            candidate = self.get_fire_time_after(candidate)
            if candidate is not None and candidate.year > YEAR_TO_GIVE_UP_SCHEDULING_AT:
                self.logger.warning(
                    "Calendar excludes every fire time up to the scheduling limit",
                    year_limit=YEAR_TO_GIVE_UP_SCHEDULING_AT,
                )
                return None
        return candidate

    # ---------------------------------------------------------------------------
    # Lifecycle
    # ---------------------------------------------------------------------------

    def compute_first_fire_time(self, calendar: ExclusionCalendar | None = None) -> datetime | None:
        """
        Compute and store the first fire time.

        Called once by the scheduler when the trigger is added.

        Args:
            calendar: Exclusion calendar associated with the trigger

        Returns:
            First fire time, or None if the trigger will never fire
        """
        self._use_calendar(calendar)
        self.next_fire_time = self.skip_excluded(
            self.get_fire_time_after(self._before_start()), calendar
        )
        if self.next_fire_time is None:
            self.logger.debug("Trigger will never fire")
        return self.next_fire_time

    def triggered(self, calendar: ExclusionCalendar | None = None) -> None:
        """
        Advance the schedule after the trigger fired at ``next_fire_time``.

        Args:
            calendar: Exclusion calendar associated with the trigger
        """
        if self.next_fire_time is None:
            self.logger.debug("Exhausted trigger cannot fire")
            return

        self._use_calendar(calendar)
        self.previous_fire_time = self.next_fire_time
        self.next_fire_time = self.skip_excluded(
            self.get_fire_time_after(self.next_fire_time), calendar
        )
        self.logger.debug(
            "Trigger fired",
            previous_fire_time=_isoformat(self.previous_fire_time),
            next_fire_time=_isoformat(self.next_fire_time),
        )
        if self.next_fire_time is None:
            self.logger.debug("Trigger exhausted")

    def update_after_misfire(self, calendar: ExclusionCalendar | None = None) -> datetime | None:
        """
        Apply the misfire instruction after ``next_fire_time`` was missed.

        Args:
            calendar: Exclusion calendar associated with the trigger

        Returns:
            The new next fire time
        """
        self._use_calendar(calendar)
        return MISFIRE_RESOLVER.resolve(self, calendar)

    def update_with_new_calendar(
        self,
        calendar: ExclusionCalendar | None,
        misfire_threshold: timedelta = DEFAULT_MISFIRE_THRESHOLD,
    ) -> None:
        """
        Re-validate the next fire time after the calendar changed.

        Args:
            calendar: New exclusion calendar
            misfire_threshold: Fire times further in the past than this are skipped
        """
        self._use_calendar(calendar)
        # Before the first fire the schedule is re-derived from the start time
        after = self.previous_fire_time
        if after is None:
            after = self._before_start()
        next_fire_time = self.get_fire_time_after(after)
        if next_fire_time is None or calendar is None:
            self.next_fire_time = next_fire_time
            return

        now = self.now()
        while next_fire_time is not None and not calendar.is_time_included(next_fire_time):
            next_fire_time = self.get_fire_time_after(next_fire_time)
            if next_fire_time is None:
                break
            if next_fire_time.year > YEAR_TO_GIVE_UP_SCHEDULING_AT:
                next_fire_time = None
                break
            if next_fire_time < now and now - next_fire_time >= misfire_threshold:
                next_fire_time = self.get_fire_time_after(next_fire_time)

        self.next_fire_time = next_fire_time

    def may_fire_again(self) -> bool:
        """Whether the trigger has a next fire time."""
        return self.next_fire_time is not None

    # ---------------------------------------------------------------------------
    # Utilities
    # ---------------------------------------------------------------------------

    def clone(self) -> Trigger:
        """Copy the trigger, including its fire-time state."""
        return copy.copy(self)

    def sort_key(self) -> tuple:
        """
        Ordering used by the scheduler's due queue.

        Earlier next fire time first, then higher priority, then key.
        Triggers without a next fire time sort last.
        """
        next_fire_time = self.next_fire_time or datetime.max.replace(tzinfo=UTC)
        return (next_fire_time, -self.priority, self.key.group, self.key.name)

    def to_dict(self) -> TriggerStateData:
        """
        Convert to dictionary for an external store.

        Returns:
            Dictionary representation with ISO-8601 timestamps
        """
        return {
            "trigger_type": self.trigger_type.value,
            "name": self.key.name,
            "group": self.key.group,
            "job_name": self.job_key.name if self.job_key else None,
            "job_group": self.job_key.group if self.job_key else None,
            "description": self.description,
            "priority": self.priority,
            "misfire_instruction": self.misfire_instruction,
            "start_time": self.start_time.isoformat(),
            "end_time": _isoformat(self.end_time),
            "next_fire_time": _isoformat(self.next_fire_time),
            "previous_fire_time": _isoformat(self.previous_fire_time),
            "trigger_args": self._trigger_args(),
        }

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(key={str(self.key)!r}, "
            f"next_fire_time={_isoformat(self.next_fire_time)!r})"
        )

