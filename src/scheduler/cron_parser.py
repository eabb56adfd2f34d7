"""Cron expression parsing and matching."""

from croniter import croniter, CroniterBadCronError, CroniterBadDateError
from datetime import datetime
from typing import FrozenSet, Optional, Tuple
import logging

from .errors import ScheduleParseError

logger = logging.getLogger(__name__)

# (name, min, max) for each of the five positions
FIELDS: Tuple[Tuple[str, int, int], ...] = (
    ("minute", 0, 59),
    ("hour", 0, 23),
    ("day_of_month", 1, 31),
    ("month", 1, 12),
    ("day_of_week", 0, 6),
)

MONTH_NAMES = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
               "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]
DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday",
             "Thursday", "Friday", "Saturday"]


def _parse_int(token: str, expression: str, field: str) -> int:
    if not (token.isascii() and token.isdigit()):
        raise ScheduleParseError(f"invalid value '{token}'", expression, field)
    return int(token)


def _parse_field(text: str, index: int, expression: str) -> FrozenSet[int]:
    """Parse one field into the set of values it accepts."""
    field, low, high = FIELDS[index]
    values = set()

    for segment in text.split(","):
        if not segment:
            raise ScheduleParseError("empty list element", expression, field)

        step = 1
        base = segment
        if "/" in segment:
            base, _, step_text = segment.partition("/")
            if not base or "/" in step_text:
                raise ScheduleParseError(f"invalid step '{segment}'", expression, field)
            step = _parse_int(step_text, expression, field)
            if step <= 0:
                raise ScheduleParseError(f"step must be positive in '{segment}'", expression, field)

        if base == "*":
            start, end = low, high
        elif "-" in base:
            parts = base.split("-")
            if len(parts) != 2:
                raise ScheduleParseError(f"invalid range '{base}'", expression, field)
            start = _parse_int(parts[0], expression, field)
            end = _parse_int(parts[1], expression, field)
            if start > end:
                raise ScheduleParseError(f"inverted range '{base}'", expression, field)
        else:
            start = _parse_int(base, expression, field)
            # "a/n" runs from a to the end of the field
            end = high if "/" in segment else start

        if start < low or start > high or end > high:
            raise ScheduleParseError(
                f"value out of range [{low}-{high}] in '{segment}'", expression, field
            )
        values.update(range(start, end + 1, step))

    return frozenset(values)


class CronExpression:
    """A parsed five-field cron expression.

    Instances are immutable. Day-of-month and day-of-week are combined with
    AND: both must match for an instant to be due.
    """

    __slots__ = ("_expression", "_fields")

    def __init__(self, expression: str, fields: Tuple[FrozenSet[int], ...]):
        self._expression = expression
        self._fields = fields

    @classmethod
    def parse(cls, expression: str) -> "CronExpression":
        """Parse cron text, raising ScheduleParseError if it is malformed."""
        if not isinstance(expression, str):
            raise ScheduleParseError(f"expected a string, got {type(expression).__name__}")

        parts = expression.split()
        if not parts:
            raise ScheduleParseError("empty expression", expression)
        if len(parts) != len(FIELDS):
            raise ScheduleParseError(
                f"expected {len(FIELDS)} fields, got {len(parts)}", expression
            )

        fields = tuple(_parse_field(part, i, expression) for i, part in enumerate(parts))
        return cls(" ".join(parts), fields)

    @property
    def expression(self) -> str:
        return self._expression

    @property
    def minutes(self) -> FrozenSet[int]:
        return self._fields[0]

    @property
    def hours(self) -> FrozenSet[int]:
        return self._fields[1]

    @property
    def days_of_month(self) -> FrozenSet[int]:
        return self._fields[2]

    @property
    def months(self) -> FrozenSet[int]:
        return self._fields[3]

    @property
    def days_of_week(self) -> FrozenSet[int]:
        return self._fields[4]

    def _day_matches(self, dt: datetime) -> bool:
        # Python: Monday=0..Sunday=6, cron: Sunday=0..Saturday=6
        weekday = (dt.weekday() + 1) % 7
        return (
            dt.day in self.days_of_month
            and dt.month in self.months
            and weekday in self.days_of_week
        )

    def is_due(self, instant: datetime) -> bool:
        """Check whether the instant falls on a minute matched by this expression.

        Seconds and microseconds are ignored.
        """
        return (
            instant.minute in self.minutes
            and instant.hour in self.hours
            and self._day_matches(instant)
        )

    def next_due(self, after: datetime) -> Optional[datetime]:
        """Get the first due minute strictly after the given instant.

        Args:
            after: Start searching after this datetime. tzinfo is preserved.

        Returns:
            Next due datetime, or None if the expression can never match.
        """
        try:
            # Day fields are ANDed, as in is_due()
            return croniter(self._expression, after, day_or=False).get_next(datetime)
        except (CroniterBadCronError, CroniterBadDateError):
            return None

    def __str__(self) -> str:
        return self._expression

    def __repr__(self) -> str:
        return f"CronExpression({self._expression!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CronExpression):
            return NotImplemented
        return self._fields == other._fields

    def __hash__(self) -> int:
        return hash(self._fields)


def parse_cron_expression(expression: str) -> CronExpression:
    """Parse a cron expression.

    Args:
        expression: Cron expression string (e.g., "0 */2 * * *")

    Returns:
        The parsed CronExpression

    Raises:
        ScheduleParseError: if the expression is malformed
    """
    return CronExpression.parse(expression)


def validate_cron(expression: str) -> bool:
    """Validate a cron expression.

    Args:
        expression: Cron expression string (e.g., "0 */2 * * *")

    Returns:
        True if valid, False otherwise
    """
    try:
        CronExpression.parse(expression)
        return True
    except ScheduleParseError as e:
        logger.error(f"Invalid cron expression '{expression}': {e}")
        return False


def get_cron_description(expression: str) -> str:
    """Get human-readable description of cron expression.

    Args:
        expression: Cron expression string

    Returns:
        Human-readable description, or the expression itself if it is invalid
    """
    try:
        parts = CronExpression.parse(expression).expression.split()
    except ScheduleParseError:
        return expression

    minute, hour, day, month, weekday = parts

    if minute.isdigit() and hour.isdigit():
        desc_parts = [f"at {int(hour):02d}:{int(minute):02d}"]
    else:
        desc_parts = []
        if minute.startswith("*/"):
            desc_parts.append(f"every {minute[2:]} minutes")
        elif minute != "*":
            desc_parts.append(f"at minute {minute}")

        if hour.startswith("*/"):
            desc_parts.append(f"every {hour[2:]} hours")
        elif hour != "*":
            desc_parts.append(f"at hour {hour}")

    if day != "*":
        desc_parts.append(f"on day {day}")

    if month != "*":
        if month.isdigit():
            desc_parts.append(f"in {MONTH_NAMES[int(month) - 1]}")
        else:
            desc_parts.append(f"in month {month}")

    if weekday != "*":
        if weekday.isdigit():
            desc_parts.append(f"on {DAY_NAMES[int(weekday)]}")
        else:
            desc_parts.append(f"on weekday {weekday}")

    if not desc_parts:
        return "Every minute"
    if desc_parts == ["at minute 0"]:
        return "Every hour"
    return "Runs " + ", ".join(desc_parts)
