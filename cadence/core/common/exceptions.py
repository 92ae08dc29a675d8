"""Custom exceptions for cadence."""


class SchedulerError(Exception):
    """Base exception for scheduler errors."""

    pass


# ------------------------------------------------------------------------------
# Categories
# ------------------------------------------------------------------------------


class SchedulerConfigurationError(SchedulerError):
    """A trigger or schedule was configured with invalid parameters."""

    pass


class SchedulerStateError(SchedulerError):
    """A schedule cannot be evaluated in its current state."""

    pass


# ------------------------------------------------------------------------------
# Configuration errors
# ------------------------------------------------------------------------------


class ValidationError(SchedulerConfigurationError, ValueError):
    """Invalid trigger parameter (bounds, counts, intervals)."""

    pass


class CronFormatError(SchedulerConfigurationError, ValueError):
    """
    Malformed cron expression.

    Attributes:
        reason: Message without the location details
        expression: The full expression being parsed
        field: Name of the field the offending token belongs to (if known)
        token: The offending token (if known)
    """

    def __init__(
        self,
        message: str,
        expression: str | None = None,
        field: str | None = None,
        token: str | None = None,
    ) -> None:
        self.reason = message
        self.expression = expression
        self.field = field
        self.token = token

        details = []
        if field:
            details.append(f"field '{field}'")
        if token is not None:
            details.append(f"token '{token}'")
        if expression is not None:
            details.append(f"in expression '{expression}'")

        full_message = f"{message} ({', '.join(details)})" if details else message
        super().__init__(full_message)


class InvalidMisfireInstructionError(SchedulerConfigurationError, ValueError):
    """Misfire instruction code not supported by the trigger family."""

    def __init__(self, instruction: int, trigger_type: str) -> None:
        self.instruction = instruction
        self.trigger_type = trigger_type
        super().__init__(
            f"Misfire instruction {instruction} is not valid for {trigger_type} triggers"
        )


# ------------------------------------------------------------------------------
# State errors
# ------------------------------------------------------------------------------


class CronEvaluationError(SchedulerStateError):
    """A parsed cron expression cannot be evaluated (ambiguous day fields)."""

    pass
