"""Type definitions using TypedDict for internal data structures."""

from typing import Any, NotRequired, TypedDict


class TriggerStateData(TypedDict):
    """Snapshot of a trigger's definition and fire-time state."""

    trigger_type: str
    name: str
    group: str
    job_name: str | None
    job_group: str | None
    description: str | None
    priority: int
    misfire_instruction: int
    start_time: str
    end_time: str | None
    next_fire_time: str | None
    previous_fire_time: str | None
    trigger_args: dict[str, Any]
    # Interval-style triggers only
    times_triggered: NotRequired[int]

