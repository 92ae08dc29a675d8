"""Common types, constants and exceptions."""

from cadence.core.common.constants import (
    DEFAULT_GROUP,
    DEFAULT_MISFIRE_THRESHOLD,
    DEFAULT_NEXT_FIRE_CUTOFF_INTERVAL,
    DEFAULT_PRIORITY,
    REPEAT_INDEFINITELY,
    YEAR_TO_GIVE_UP_SCHEDULING_AT,
)
from cadence.core.common.exceptions import (
    CronEvaluationError,
    CronFormatError,
    InvalidMisfireInstructionError,
    SchedulerConfigurationError,
    SchedulerError,
    SchedulerStateError,
    ValidationError,
)
from cadence.core.common.types import (
    IntervalUnit,
    NthIncludedDayInterval,
    TriggerKey,
    TriggerType,
)

__all__ = [
    "DEFAULT_GROUP",
    "DEFAULT_MISFIRE_THRESHOLD",
    "DEFAULT_NEXT_FIRE_CUTOFF_INTERVAL",
    "DEFAULT_PRIORITY",
    "REPEAT_INDEFINITELY",
    "YEAR_TO_GIVE_UP_SCHEDULING_AT",
    "CronEvaluationError",
    "CronFormatError",
    "InvalidMisfireInstructionError",
    "SchedulerConfigurationError",
    "SchedulerError",
    "SchedulerStateError",
    "ValidationError",
    "IntervalUnit",
    "NthIncludedDayInterval",
    "TriggerKey",
    "TriggerType",
]
