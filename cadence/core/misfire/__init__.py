"""Misfire handling module."""

from cadence.core.misfire.handler import MISFIRE_RESOLVER, MisfireResolver
from cadence.core.misfire.instructions import (
    DEFAULT_POLICIES,
    INSTRUCTIONS_BY_TRIGGER_TYPE,
    POLICY_MAPPING,
    CronTriggerMisfire,
    MisfireInstruction,
    MisfirePolicy,
    SimpleTriggerMisfire,
    get_default_policy,
    resolve_instruction,
    valid_instructions,
)
from cadence.core.misfire.utils import MisfireClassifier

__all__ = [
    "MISFIRE_RESOLVER",
    "MisfireResolver",
    "MisfireClassifier",
    "MisfireInstruction",
    "SimpleTriggerMisfire",
    "CronTriggerMisfire",
    "MisfirePolicy",
    "POLICY_MAPPING",
    "DEFAULT_POLICIES",
    "INSTRUCTIONS_BY_TRIGGER_TYPE",
    "get_default_policy",
    "resolve_instruction",
    "valid_instructions",
]
