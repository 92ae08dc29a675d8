"""
Cron expression parser.

Parses Quartz-style expressions of six or seven whitespace-separated fields::

    second minute hour day-of-month month day-of-week [year]

into a :class:`CronFieldSet`: one :class:`CronField` of allowed values per
field plus the special-rule flags (``L``, ``W``, ``#``, ``C``).
"""

from __future__ import annotations

import re
from bisect import bisect_left
from types import MappingProxyType

from cadence.core.common.exceptions import CronFormatError

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

FIELD_NAMES = (
    "second",
    "minute",
    "hour",
    "day_of_month",
    "month",
    "day_of_week",
    "year",
)

MIN_VALUES = MappingProxyType(
    {
        "second": 0,
        "minute": 0,
        "hour": 0,
        "day_of_month": 1,
        "month": 1,
        "day_of_week": 1,
        "year": 1970,
    }
)
MAX_VALUES = MappingProxyType(
    {
        "second": 59,
        "minute": 59,
        "hour": 23,
        "day_of_month": 31,
        "month": 12,
        "day_of_week": 7,
        "year": 2099,
    }
)

# Largest accepted step per field; year steps are unbounded
MAX_INCREMENTS = MappingProxyType(
    {
        "second": 59,
        "minute": 59,
        "hour": 23,
        "day_of_month": 31,
        "month": 12,
        "day_of_week": 7,
    }
)

MONTHS = MappingProxyType(
    {
        "JAN": 1,
        "FEB": 2,
        "MAR": 3,
        "APR": 4,
        "MAY": 5,
        "JUN": 6,
        "JUL": 7,
        "AUG": 8,
        "SEP": 9,
        "OCT": 10,
        "NOV": 11,
        "DEC": 12,
    }
)
DAYS_OF_WEEK = MappingProxyType(
    {
        "SUN": 1,
        "MON": 2,
        "TUE": 3,
        "WED": 4,
        "THU": 5,
        "FRI": 6,
        "SAT": 7,
    }
)

# Day-of-week value of Saturday, also the meaning of a bare "L" in that field
SATURDAY = 7

MAX_LAST_DAY_OFFSET = 30

SEPARATOR = re.compile(r",")


def _asint(text: str | None) -> int | None:
    if text is not None:
        return int(text)
    return None


# ---------------------------------------------------------------------------
# Expressions
# ---------------------------------------------------------------------------


class AllExpression:
    value_re = re.compile(r"\*(?:/(?P<step>\d+))?$")

    def __init__(self, step: str | None = None):
        self.step = _asint(step)

    def apply(self, field: CronField) -> None:
        if self.step is None:
            field.mark_all()
        else:
            field.add_range(field.min_value, field.max_value, self.step)


class UnspecifiedExpression:
    value_re = re.compile(r"\?$")

    def apply(self, field: CronField) -> None:
        field.mark_unspecified()


class RangeExpression:
    value_re = re.compile(
        r"(?P<first>\d+|[A-Z]+)(?:-(?P<last>\d+|[A-Z]+))?(?:/(?P<step>\d+))?$"
    )

    def __init__(self, first: str, last: str | None = None, step: str | None = None):
        self.first = first
        self.last = last
        self.step = _asint(step)

    def apply(self, field: CronField) -> None:
        first = field.to_number(self.first)
        if self.last is None and self.step is None:
            field.add_value(first)
        elif self.last is None:
            field.add_range(first, field.max_value, self.step)
        else:
            field.add_range(first, field.to_number(self.last), self.step or 1)


class LastDayOfMonthExpression:
    value_re = re.compile(r"L(?:-(?P<offset>\d+))?(?P<weekday>W)?$")

    def __init__(self, offset: str | None = None, weekday: str | None = None):
        self.offset = _asint(offset) or 0
        self.weekday = weekday is not None

    def apply(self, field: DayOfMonthField) -> None:
        if field.last_day_of_month:
            raise ValueError("'L' may only be specified once")
        if self.offset > MAX_LAST_DAY_OFFSET:
            raise ValueError(f"Offset from last day must be <= {MAX_LAST_DAY_OFFSET}")
        field.last_day_of_month = True
        field.last_day_offset = self.offset
        if self.weekday:
            field.nearest_weekday = True


class NearestWeekdayExpression:
    value_re = re.compile(r"(?P<day>\d+)W$")

    def __init__(self, day: str):
        self.day = int(day)

    def apply(self, field: DayOfMonthField) -> None:
        field.add_value(self.day)
        field.nearest_weekday = True


class CalendarDayExpression:
    value_re = re.compile(r"(?P<day>\d+)C$")

    def __init__(self, day: str):
        self.day = int(day)

    def apply(self, field: DayOfMonthField | DayOfWeekField) -> None:
        field.add_value(self.day)
        field.calendar_day = True


class LastDayOfWeekExpression:
    value_re = re.compile(r"(?P<day>\d+|[A-Z]+)?L$")

    def __init__(self, day: str | None = None):
        self.day = day

    def apply(self, field: DayOfWeekField) -> None:
        field.has_special = True
        if self.day is None:
            field.add_value(SATURDAY)
            return
        field.add_value(field.to_number(self.day))
        field.last_day_of_week = True


class NthDayOfWeekExpression:
    value_re = re.compile(r"(?P<day>\d+|[A-Z]+)#(?P<nth>\d+)$")

    def __init__(self, day: str, nth: str):
        self.day = day
        self.nth = int(nth)

    def apply(self, field: DayOfWeekField) -> None:
        if not 1 <= self.nth <= 5:
            raise ValueError("A numeric value between 1 and 5 must follow the '#' option")
        field.has_special = True
        field.add_value(field.to_number(self.day))
        field.nth_day_of_week = self.nth


# ---------------------------------------------------------------------------
# Fields
# ---------------------------------------------------------------------------


class CronField:
    """
    One parsed cron field.

    Exposes the allowed values as a read-only projection; the special-rule
    flags of the day fields live on the subclasses.
    """

    COMPILERS: list[type] = [AllExpression, UnspecifiedExpression, RangeExpression]
    NAMES: MappingProxyType | None = None

    def __init__(self, name: str, text: str):
        self.name = name
        self.text = text
        self.min_value = MIN_VALUES[name]
        self.max_value = MAX_VALUES[name]
        self._values: set[int] = set()
        self._all = False
        self._unspecified = False

        atoms = SEPARATOR.split(text)
        self._atom_count = len(atoms)
        for atom in atoms:
            self._compile_expression(atom)
        self._validate()
        self.values: tuple[int, ...] = tuple(sorted(self._values))

    # -- parsing ----------------------------------------------------------

    def _compile_expression(self, expr: str) -> None:
        if expr.startswith("/"):
            expr = "*" + expr
        for compiler in self.COMPILERS:
            match = compiler.value_re.match(expr)
            if match:
                try:
                    compiler(**match.groupdict()).apply(self)
                except ValueError as exc:
                    raise CronFormatError(str(exc), field=self.name, token=expr) from None
                return
        raise CronFormatError("Unrecognized expression", field=self.name, token=expr)

    def _validate(self) -> None:
        if self._unspecified and self._atom_count > 1:
            raise CronFormatError("'?' must be the only value", field=self.name, token=self.text)

    def to_number(self, token: str) -> int:
        if token.isdigit():
            return int(token)
        if self.NAMES is not None and token in self.NAMES:
            return self.NAMES[token]
        raise ValueError(f"Invalid name '{token}'")

    def _check_value(self, value: int) -> None:
        if not self.min_value <= value <= self.max_value:
            raise ValueError(
                f"Value {value} out of range ({self.min_value}-{self.max_value})"
            )

    def _check_step(self, step: int) -> None:
        if step < 1:
            raise ValueError("Increment must be higher than 0")
        limit = MAX_INCREMENTS.get(self.name)
        if limit is not None and step > limit:
            raise ValueError(f"Increment must be <= {limit}")

    def add_value(self, value: int) -> None:
        self._check_value(value)
        self._values.add(value)

    def add_range(self, first: int, last: int, step: int) -> None:
        """Add ``first..last`` by ``step``; ranges wrap past the field maximum."""
        self._check_value(first)
        self._check_value(last)
        self._check_step(step)

        if last >= first:
            self._values.update(range(first, last + 1, step))
            return
        if self.name == "year":
            raise ValueError("Year ranges may not wrap around")

        span = self.max_value - self.min_value + 1
        for value in range(first, last + span + 1, step):
            self._values.add((value - self.min_value) % span + self.min_value)

    def mark_all(self) -> None:
        self._all = True

    def mark_unspecified(self) -> None:
        raise ValueError("'?' can only be specified for day-of-month or day-of-week")

    # -- projection -------------------------------------------------------

    @property
    def is_all(self) -> bool:
        return self._all

    @property
    def is_unspecified(self) -> bool:
        return self._unspecified

    @property
    def min(self) -> int:
        """Smallest allowed value."""
        if self._all or not self.values:
            return self.min_value
        return self.values[0]

    def next_value_from(self, value: int) -> int | None:
        """
        Get the least allowed value greater than or equal to ``value``.

        Args:
            value: Starting value (inclusive)

        Returns:
            The allowed value, or None if no allowed value is that large
        """
        if self._all:
            value = max(value, self.min_value)
            return value if value <= self.max_value else None
        index = bisect_left(self.values, value)
        if index < len(self.values):
            return self.values[index]
        return None

    def __contains__(self, value: int) -> bool:
        if self._all:
            return self.min_value <= value <= self.max_value
        return value in self._values

    def canonical_text(self) -> str:
        if self._unspecified:
            return "?"
        if self._all:
            return "*"
        return ",".join(str(v) for v in self.values)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, text={self.text!r})"


class DayOfMonthField(CronField):
    COMPILERS = [
        AllExpression,
        UnspecifiedExpression,
        LastDayOfMonthExpression,
        NearestWeekdayExpression,
        CalendarDayExpression,
        RangeExpression,
    ]

    def __init__(self, name: str, text: str):
        self.last_day_of_month = False
        self.last_day_offset = 0
        self.nearest_weekday = False
        self.calendar_day = False
        super().__init__(name, text)

    def mark_unspecified(self) -> None:
        self._unspecified = True

    def _validate(self) -> None:
        super()._validate()
        if self.nearest_weekday and self._atom_count > 1:
            raise CronFormatError(
                "'W' may not be combined with other day-of-month values",
                field=self.name,
                token=self.text,
            )

    def canonical_text(self) -> str:
        if self._unspecified or self._all:
            return super().canonical_text()

        suffix = "C" if self.calendar_day else ""
        parts = [f"{v}{suffix}" for v in self.values]
        if self.last_day_of_month:
            last = "L" if not self.last_day_offset else f"L-{self.last_day_offset}"
            parts.append(last + ("W" if self.nearest_weekday else ""))
        elif self.nearest_weekday:
            parts = [f"{v}W" for v in self.values]
        return ",".join(parts)


class DayOfWeekField(CronField):
    COMPILERS = [
        AllExpression,
        UnspecifiedExpression,
        LastDayOfWeekExpression,
        NthDayOfWeekExpression,
        CalendarDayExpression,
        RangeExpression,
    ]
    NAMES = DAYS_OF_WEEK

    def __init__(self, name: str, text: str):
        self.last_day_of_week = False
        self.nth_day_of_week = 0
        self.calendar_day = False
        self.has_special = False
        super().__init__(name, text)

    def mark_unspecified(self) -> None:
        self._unspecified = True

    def _validate(self) -> None:
        super()._validate()
        if self.has_special and self._atom_count > 1:
            raise CronFormatError(
                "'L' and '#' may not be combined with other day-of-week values",
                field=self.name,
                token=self.text,
            )

    def canonical_text(self) -> str:
        if self._unspecified or self._all:
            return super().canonical_text()
        if self.last_day_of_week:
            return f"{self.values[0]}L"
        if self.nth_day_of_week:
            return f"{self.values[0]}#{self.nth_day_of_week}"
        suffix = "C" if self.calendar_day else ""
        return ",".join(f"{v}{suffix}" for v in self.values)


class MonthField(CronField):
    NAMES = MONTHS


FIELDS_MAP: dict[str, type[CronField]] = {
    "second": CronField,
    "minute": CronField,
    "hour": CronField,
    "day_of_month": DayOfMonthField,
    "month": MonthField,
    "day_of_week": DayOfWeekField,
    "year": CronField,
}


# ---------------------------------------------------------------------------
# Field set
# ---------------------------------------------------------------------------


class CronFieldSet:
    """
    Immutable parsed form of a cron expression.

    Args:
        expression: Six or seven whitespace-separated cron fields

    Raises:
        CronFormatError: The expression is malformed or out of range
    """

    def __init__(self, expression: str):
        if not isinstance(expression, str):
            raise CronFormatError("Cron expression must be a string")

        tokens = expression.upper().split()
        if len(tokens) < 6:
            raise CronFormatError("Unexpected end of expression", expression=expression)
        if len(tokens) > 7:
            raise CronFormatError("Too many fields", expression=expression)
        if len(tokens) == 6:
            tokens.append("*")

        try:
            fields = [
                FIELDS_MAP[name](name, token) for name, token in zip(FIELD_NAMES, tokens)
            ]
        except CronFormatError as exc:
            raise CronFormatError(
                exc.reason, expression=expression, field=exc.field, token=exc.token
            ) from None

        self._expression = expression
        self._fields: dict[str, CronField] = dict(zip(FIELD_NAMES, fields))

        if self.day_of_month.is_unspecified and self.day_of_week.is_unspecified:
            raise CronFormatError(
                "'?' can only be specified for day-of-month -OR- day-of-week",
                expression=expression,
                field="day_of_week",
                token="?",
            )

    @classmethod
    def parse(cls, expression: str) -> CronFieldSet:
        """Parse ``expression`` into a fresh field set."""
        return cls(expression)

    @staticmethod
    def is_valid_expression(expression: str) -> bool:
        try:
            CronFieldSet(expression)
        except CronFormatError:
            return False
        return True

    # -- fields -------------------------------------------------------------

    @property
    def expression(self) -> str:
        return self._expression

    @property
    def seconds(self) -> CronField:
        return self._fields["second"]

    @property
    def minutes(self) -> CronField:
        return self._fields["minute"]

    @property
    def hours(self) -> CronField:
        return self._fields["hour"]

    @property
    def day_of_month(self) -> DayOfMonthField:
        return self._fields["day_of_month"]  # type: ignore[return-value]

    @property
    def months(self) -> CronField:
        return self._fields["month"]

    @property
    def day_of_week(self) -> DayOfWeekField:
        return self._fields["day_of_week"]  # type: ignore[return-value]

    @property
    def years(self) -> CronField:
        return self._fields["year"]

    def field(self, name: str) -> CronField:
        """Get a field by name (``second`` ... ``year``)."""
        try:
            return self._fields[name]
        except KeyError:
            raise ValueError(f"Unknown cron field: {name}") from None

    # -- flags --------------------------------------------------------------

    @property
    def last_day_of_month(self) -> bool:
        return self.day_of_month.last_day_of_month

    @property
    def last_day_offset(self) -> int:
        return self.day_of_month.last_day_offset

    @property
    def nearest_weekday(self) -> bool:
        return self.day_of_month.nearest_weekday

    @property
    def calendar_day_of_month(self) -> bool:
        return self.day_of_month.calendar_day

    @property
    def last_day_of_week(self) -> bool:
        return self.day_of_week.last_day_of_week

    @property
    def nth_day_of_week(self) -> int:
        return self.day_of_week.nth_day_of_week

    @property
    def calendar_day_of_week(self) -> bool:
        return self.day_of_week.calendar_day

    @property
    def is_day_ambiguous(self) -> bool:
        """True when neither day field is ``?`` (both carry constraints)."""
        return not (self.day_of_month.is_unspecified or self.day_of_week.is_unspecified)

    # -- rendering ----------------------------------------------------------

    def canonical_form(self) -> str:
        """Normalized seven-field expression matching the same instants."""
        return " ".join(self._fields[name].canonical_text() for name in FIELD_NAMES)

    def summary(self) -> str:
        lines = [f"{name}: {self._fields[name].canonical_text()}" for name in FIELD_NAMES]
        lines += [
            f"last_day_of_month: {self.last_day_of_month}",
            f"last_day_offset: {self.last_day_offset}",
            f"nearest_weekday: {self.nearest_weekday}",
            f"last_day_of_week: {self.last_day_of_week}",
            f"nth_day_of_week: {self.nth_day_of_week}",
            f"calendar_day_of_month: {self.calendar_day_of_month}",
            f"calendar_day_of_week: {self.calendar_day_of_week}",
        ]
        return "\n".join(lines)

    def __str__(self) -> str:
        return self._expression

    def __repr__(self) -> str:
        return f"CronFieldSet({self._expression!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CronFieldSet):
            return NotImplemented
        return self.canonical_form() == other.canonical_form()

    def __hash__(self) -> int:
        return hash(self.canonical_form())


def parse_cron_expression(expression: str) -> CronFieldSet:
    """
    Parse a cron expression.

    Args:
        expression: Six or seven whitespace-separated cron fields

    Returns:
        Parsed field set

    Raises:
        CronFormatError: The expression is malformed or out of range
    """
    return CronFieldSet(expression)
