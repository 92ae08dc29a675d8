"""Declarative trigger definitions validated with Pydantic."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from cadence.core.common.constants import DEFAULT_GROUP, DEFAULT_PRIORITY, REPEAT_INDEFINITELY
from cadence.core.common.types import IntervalUnit, NthIncludedDayInterval, TriggerType
from cadence.core.cron.fields import CronFieldSet
from cadence.core.misfire.instructions import MisfirePolicy, resolve_instruction, valid_instructions
from cadence.core.triggers.base import Clock, Trigger
from cadence.core.triggers.daily_time_interval import UNIT_LENGTHS
from cadence.core.triggers.factory import TriggerFactory
from cadence.core.triggers.recurrence import parse_recurrence_rule
from cadence.type_defs import TriggerStateData
from cadence.utils.time import get_timezone, parse_time_of_day, to_utc

# ------------------------------------------------------------------------------
# Trigger args
# ------------------------------------------------------------------------------


class _TriggerArgs(BaseModel):
    model_config = ConfigDict(extra="forbid")

    def to_kwargs(self) -> dict[str, Any]:
        return self.model_dump()


class CronArgs(_TriggerArgs):
    cron_expression: str

    @field_validator("cron_expression")
    @classmethod
    def validate_cron_expression(cls, v: str) -> str:
        # CronFormatError is a ValueError
        if CronFieldSet.parse(v).is_day_ambiguous:
            raise ValueError("Use '?' in either the day-of-month or the day-of-week field")
        return v


class SimpleArgs(_TriggerArgs):
    repeat_count: int = Field(default=0, ge=REPEAT_INDEFINITELY)
    repeat_interval_seconds: float = Field(default=0, ge=0)

    @model_validator(mode="after")
    def validate_interval(self) -> SimpleArgs:
        if self.repeat_count != 0 and self.repeat_interval_seconds <= 0:
            raise ValueError("Repeat interval must be positive for a repeating trigger")
        return self

    def to_kwargs(self) -> dict[str, Any]:
        return {
            "repeat_count": self.repeat_count,
            "repeat_interval": timedelta(seconds=self.repeat_interval_seconds),
        }


class CalendarIntervalArgs(_TriggerArgs):
    repeat_interval: int = Field(default=1, ge=1)
    repeat_interval_unit: IntervalUnit = IntervalUnit.DAY
    repeat_count: int = Field(default=REPEAT_INDEFINITELY, ge=REPEAT_INDEFINITELY)
    skip_day_if_hour_does_not_exist: bool = False


class NthIncludedDayArgs(_TriggerArgs):
    n: int = Field(default=1, ge=1, le=366)
    interval_type: NthIncludedDayInterval = NthIncludedDayInterval.MONTHLY
    fire_at_time: str = "12:00:00"
    next_fire_cutoff_interval: int = Field(default=12, ge=1)

    @field_validator("fire_at_time")
    @classmethod
    def validate_fire_at_time(cls, v: str) -> str:
        parse_time_of_day(v)
        return v


class RecurrenceArgs(_TriggerArgs):
    recurrence_rule: str = Field(min_length=1)

    @field_validator("recurrence_rule")
    @classmethod
    def validate_recurrence_rule(cls, v: str) -> str:
        try:
            # Syntax only; the trigger anchors the rule at its start time
            parse_recurrence_rule(v, datetime(2000, 1, 1), UTC)
        except ValueError as e:
            raise ValueError(f"Invalid recurrence rule '{v}': {e}") from e
        return v


class DailyTimeIntervalArgs(_TriggerArgs):
    repeat_interval: int = Field(default=1, ge=1)
    repeat_interval_unit: IntervalUnit = IntervalUnit.MINUTE
    start_time_of_day: str = "00:00:00"
    end_time_of_day: str = "23:59:59"
    days_of_week: list[Annotated[int, Field(ge=0, le=6)]] = Field(
        default_factory=lambda: list(range(7)), min_length=1
    )
    repeat_count: int = Field(default=REPEAT_INDEFINITELY, ge=REPEAT_INDEFINITELY)

    @field_validator("start_time_of_day", "end_time_of_day")
    @classmethod
    def validate_time_of_day(cls, v: str) -> str:
        parse_time_of_day(v)
        return v

    @model_validator(mode="after")
    def validate_window(self) -> DailyTimeIntervalArgs:
        if self.repeat_interval_unit not in UNIT_LENGTHS:
            raise ValueError("repeat_interval_unit must be second, minute or hour")
        if self.repeat_interval * UNIT_LENGTHS[self.repeat_interval_unit] > timedelta(days=1):
            raise ValueError("Repeat interval cannot exceed 24 hours")
        if parse_time_of_day(self.end_time_of_day) < parse_time_of_day(self.start_time_of_day):
            raise ValueError("start_time_of_day cannot be after end_time_of_day")
        return self


ARGS_MODELS: dict[TriggerType, type[_TriggerArgs]] = {
    TriggerType.CRON: CronArgs,
    TriggerType.SIMPLE: SimpleArgs,
    TriggerType.CALENDAR_INTERVAL: CalendarIntervalArgs,
    TriggerType.NTH_INCLUDED_DAY: NthIncludedDayArgs,
    TriggerType.RECURRENCE: RecurrenceArgs,
    TriggerType.DAILY_TIME_INTERVAL: DailyTimeIntervalArgs,
}

# Trigger types evaluated in a timezone
ZONED_TRIGGER_TYPES = frozenset(ARGS_MODELS) - {TriggerType.SIMPLE}


# ------------------------------------------------------------------------------
# Definition
# ------------------------------------------------------------------------------


class TriggerDefinition(BaseModel):
    """
    Serializable description of a trigger.

    Validates the variant-specific ``trigger_args`` against the trigger type
    and builds the trigger with :meth:`build`.

    Example:
        >>> definition = TriggerDefinition(
        ...     trigger_type="cron",
        ...     name="daily-report",
        ...     trigger_args={"cron_expression": "0 0 9 ? * MON-FRI"},
        ...     timezone="Asia/Seoul",
        ...     if_missed="skip",
        ... )
        >>> trigger = definition.build()
    """

    model_config = ConfigDict(extra="forbid")

    trigger_type: TriggerType
    name: str = Field(min_length=1)
    group: str = Field(default=DEFAULT_GROUP, min_length=1)
    trigger_args: dict[str, Any] = Field(default_factory=dict)
    timezone: str = "UTC"
    start_time: datetime | None = None
    end_time: datetime | None = None
    job_name: str | None = None
    job_group: str = DEFAULT_GROUP
    description: str | None = None
    priority: int = DEFAULT_PRIORITY
    if_missed: MisfirePolicy | int = MisfirePolicy.SMART

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        get_timezone(v)
        return v

    @model_validator(mode="after")
    def validate_definition(self) -> TriggerDefinition:
        args = ARGS_MODELS[self.trigger_type].model_validate(self.trigger_args)
        self.trigger_args = args.model_dump(mode="json")

        if self.start_time is not None and self.end_time is not None:
            if to_utc(self.end_time) < to_utc(self.start_time):
                raise ValueError("end_time cannot be before start_time")

        if isinstance(self.if_missed, int) and not isinstance(self.if_missed, MisfirePolicy):
            if self.if_missed not in valid_instructions(self.trigger_type):
                raise ValueError(
                    f"Misfire instruction {self.if_missed} is not valid for "
                    f"{self.trigger_type.value} triggers"
                )
        return self

    @property
    def misfire_instruction(self) -> int:
        """Instruction code the trigger is built with."""
        if isinstance(self.if_missed, MisfirePolicy):
            return resolve_instruction(self.if_missed, self.trigger_type)
        return self.if_missed

    def build(self, clock: Clock | None = None) -> Trigger:
        """
        Construct the trigger described by this definition.

        Args:
            clock: Callable returning the current UTC time (default: system clock)

        Returns:
            New trigger; call ``compute_first_fire_time`` before scheduling it
        """
        kwargs = ARGS_MODELS[self.trigger_type].model_validate(self.trigger_args).to_kwargs()
        if self.trigger_type in ZONED_TRIGGER_TYPES:
            kwargs["timezone"] = self.timezone

        return TriggerFactory.create(
            self.trigger_type,
            self.name,
            group=self.group,
            start_time=self.start_time,
            end_time=self.end_time,
            job_name=self.job_name,
            job_group=self.job_group,
            description=self.description,
            priority=self.priority,
            misfire_instruction=self.misfire_instruction,
            clock=clock,
            **kwargs,
        )

    @classmethod
    def from_state(cls, data: TriggerStateData) -> TriggerDefinition:
        """
        Recreate a definition from :meth:`Trigger.to_dict` output.

        Args:
            data: Stored trigger snapshot

        Returns:
            Definition of the same schedule (fire-time state is not carried over)
        """
        trigger_args = dict(data["trigger_args"])
        timezone = trigger_args.pop("timezone", "UTC")
        return cls(
            trigger_type=data["trigger_type"],
            name=data["name"],
            group=data["group"],
            trigger_args=trigger_args,
            timezone=timezone,
            start_time=data["start_time"],
            end_time=data["end_time"],
            job_name=data["job_name"],
            job_group=data["job_group"] or DEFAULT_GROUP,
            description=data["description"],
            priority=data["priority"],
            if_missed=data["misfire_instruction"],
        )
