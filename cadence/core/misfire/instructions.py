"""
Misfire instruction codes and user-facing policies.

Instruction codes are small integers namespaced per trigger family: -1 and 0
mean the same thing everywhere, 1 and up depend on the family. The numbers
are part of the stored-schedule contract and must not change.
"""

from enum import Enum, IntEnum

from cadence.core.common.types import TriggerType


class MisfireInstruction(IntEnum):
    """Instructions shared by every trigger family."""

    IGNORE_MISFIRE_POLICY = -1  # Leave the schedule alone, fire missed times asap
    SMART_POLICY = 0  # Let the trigger family pick


class SimpleTriggerMisfire(IntEnum):
    """Instructions of fixed-interval triggers."""

    FIRE_NOW = 1
    RESCHEDULE_NOW_WITH_EXISTING_REPEAT_COUNT = 2
    RESCHEDULE_NOW_WITH_REMAINING_REPEAT_COUNT = 3
    RESCHEDULE_NEXT_WITH_REMAINING_COUNT = 4
    RESCHEDULE_NEXT_WITH_EXISTING_COUNT = 5


class CronTriggerMisfire(IntEnum):
    """
    Instructions of cron triggers.

    Calendar interval, nth-included-day and recurrence triggers share these
    codes.
    """

    FIRE_ONCE_NOW = 1
    DO_NOTHING = 2


INSTRUCTIONS_BY_TRIGGER_TYPE: dict[TriggerType, type[IntEnum]] = {
    TriggerType.CRON: CronTriggerMisfire,
    TriggerType.SIMPLE: SimpleTriggerMisfire,
    TriggerType.CALENDAR_INTERVAL: CronTriggerMisfire,
    TriggerType.NTH_INCLUDED_DAY: CronTriggerMisfire,
    TriggerType.RECURRENCE: CronTriggerMisfire,
    TriggerType.DAILY_TIME_INTERVAL: CronTriggerMisfire,
}


def valid_instructions(trigger_type: TriggerType) -> set[int]:
    """Get every instruction code a trigger family accepts."""
    family = INSTRUCTIONS_BY_TRIGGER_TYPE[trigger_type]
    return {int(code) for code in MisfireInstruction} | {int(code) for code in family}


class MisfirePolicy(str, Enum):
    """
    User-friendly misfire policies.

    Policies:
    - SMART: Trigger family default (instruction 0)
    - IGNORE: Keep the missed schedule, fire every missed time (instruction -1)
    - RUN_ONCE: Fire once immediately, then resume the schedule
    - SKIP: Drop the missed fires, wait for the next regular fire time
    """

    SMART = "smart"
    IGNORE = "ignore"
    RUN_ONCE = "run_once"
    SKIP = "skip"


# Policy mapping from friendly names to per-family codes
POLICY_MAPPING: dict[MisfirePolicy, dict[type[IntEnum], int]] = {
    MisfirePolicy.RUN_ONCE: {
        SimpleTriggerMisfire: SimpleTriggerMisfire.FIRE_NOW,
        CronTriggerMisfire: CronTriggerMisfire.FIRE_ONCE_NOW,
    },
    MisfirePolicy.SKIP: {
        SimpleTriggerMisfire: SimpleTriggerMisfire.RESCHEDULE_NEXT_WITH_REMAINING_COUNT,
        CronTriggerMisfire: CronTriggerMisfire.DO_NOTHING,
    },
}

# Default policies by trigger type
DEFAULT_POLICIES = {
    TriggerType.CRON: MisfirePolicy.SMART,
    TriggerType.SIMPLE: MisfirePolicy.SMART,
    TriggerType.CALENDAR_INTERVAL: MisfirePolicy.SMART,
    TriggerType.NTH_INCLUDED_DAY: MisfirePolicy.SMART,
    TriggerType.RECURRENCE: MisfirePolicy.SMART,
    TriggerType.DAILY_TIME_INTERVAL: MisfirePolicy.SMART,
}


def get_default_policy(trigger_type: TriggerType) -> MisfirePolicy:
    """
    Get default misfire policy for a trigger type.

    Args:
        trigger_type: The trigger type

    Returns:
        Default misfire policy for that trigger type
    """
    return DEFAULT_POLICIES.get(trigger_type, MisfirePolicy.SMART)


def resolve_instruction(policy: MisfirePolicy | str, trigger_type: TriggerType) -> int:
    """
    Translate a friendly policy into the trigger family's instruction code.

    Args:
        policy: Policy or its string value (e.g. "skip")
        trigger_type: Family the code is for

    Returns:
        Instruction code

    Raises:
        ValueError: Unknown policy name
    """
    policy = MisfirePolicy(policy)
    if policy is MisfirePolicy.SMART:
        return MisfireInstruction.SMART_POLICY
    if policy is MisfirePolicy.IGNORE:
        return MisfireInstruction.IGNORE_MISFIRE_POLICY
    return POLICY_MAPPING[policy][INSTRUCTIONS_BY_TRIGGER_TYPE[trigger_type]]
