"""Fluent helpers that turn scheduling intents into cron expressions.

Each helper returns a new Frequencies with some positions of the current
expression replaced, so helpers can be chained::

    Frequencies().weekdays().daily_at("09:30").expression  # "30 9 * * 1-5"
"""

from typing import Tuple

from .cron_parser import CronExpression
from .errors import ScheduleParseError

MINUTE, HOUR, DAY_OF_MONTH, MONTH, DAY_OF_WEEK = range(5)

SUNDAY, MONDAY, TUESDAY, WEDNESDAY, THURSDAY, FRIDAY, SATURDAY = range(7)


def _parse_time(time: str) -> Tuple[int, int]:
    """Split "HH:MM" (or "HH") into hour and minute."""
    parts = str(time).split(":")
    if len(parts) > 2 or not all(p.isascii() and p.isdigit() for p in parts):
        raise ScheduleParseError(f"invalid time of day '{time}', expected HH:MM")
    hour = int(parts[0])
    minute = int(parts[1]) if len(parts) == 2 else 0
    if hour > 23 or minute > 59:
        raise ScheduleParseError(f"invalid time of day '{time}'")
    return hour, minute


class Frequencies:
    """Immutable cron expression builder."""

    __slots__ = ("_expression",)

    def __init__(self, expression: str = "* * * * *"):
        self._expression = expression

    @property
    def expression(self) -> str:
        return self._expression

    def build(self) -> CronExpression:
        """Parse the accumulated expression."""
        return CronExpression.parse(self._expression)

    def _splice(self, position: int, value) -> "Frequencies":
        parts = self._expression.split()
        if len(parts) != 5:
            raise ScheduleParseError("cannot modify a malformed expression", self._expression)
        parts[position] = str(value)
        return Frequencies(" ".join(parts))

    def cron(self, expression: str) -> "Frequencies":
        return Frequencies(expression)

    # Minutes

    def every_minute(self) -> "Frequencies":
        return self._splice(MINUTE, "*")

    def every_n_minutes(self, n: int) -> "Frequencies":
        return self._splice(MINUTE, f"*/{n}")

    def every_five_minutes(self) -> "Frequencies":
        return self.every_n_minutes(5)

    def every_ten_minutes(self) -> "Frequencies":
        return self.every_n_minutes(10)

    def every_fifteen_minutes(self) -> "Frequencies":
        return self.every_n_minutes(15)

    def every_thirty_minutes(self) -> "Frequencies":
        return self._splice(MINUTE, "0,30")

    # Hours

    def hourly(self) -> "Frequencies":
        return self._splice(MINUTE, 0)

    def hourly_at(self, minute: int) -> "Frequencies":
        return self._splice(MINUTE, minute)

    def every_n_hours(self, n: int) -> "Frequencies":
        return self._splice(MINUTE, 0)._splice(HOUR, f"*/{n}")

    # Days

    def daily(self) -> "Frequencies":
        return self.daily_at("00:00")

    def at(self, time: str) -> "Frequencies":
        return self.daily_at(time)

    def daily_at(self, time: str) -> "Frequencies":
        hour, minute = _parse_time(time)
        return self._splice(HOUR, hour)._splice(MINUTE, minute)

    def twice_daily(self, first: int = 1, second: int = 13) -> "Frequencies":
        return self._splice(MINUTE, 0)._splice(HOUR, f"{first},{second}")

    # Weekdays

    def days(self, *days: int) -> "Frequencies":
        return self._splice(DAY_OF_WEEK, ",".join(str(d) for d in days))

    def weekdays(self) -> "Frequencies":
        return self._splice(DAY_OF_WEEK, f"{MONDAY}-{FRIDAY}")

    def weekends(self) -> "Frequencies":
        return self._splice(DAY_OF_WEEK, f"{SUNDAY},{SATURDAY}")

    def sundays(self) -> "Frequencies":
        return self.days(SUNDAY)

    def mondays(self) -> "Frequencies":
        return self.days(MONDAY)

    def tuesdays(self) -> "Frequencies":
        return self.days(TUESDAY)

    def wednesdays(self) -> "Frequencies":
        return self.days(WEDNESDAY)

    def thursdays(self) -> "Frequencies":
        return self.days(THURSDAY)

    def fridays(self) -> "Frequencies":
        return self.days(FRIDAY)

    def saturdays(self) -> "Frequencies":
        return self.days(SATURDAY)

    def weekly(self) -> "Frequencies":
        return self._splice(MINUTE, 0)._splice(HOUR, 0)._splice(DAY_OF_WEEK, SUNDAY)

    def weekly_on(self, day: int, time: str = "00:00") -> "Frequencies":
        return self.days(day).daily_at(time)

    # Months and longer

    def monthly(self) -> "Frequencies":
        return self.monthly_on(1)

    def monthly_on(self, day: int = 1, time: str = "00:00") -> "Frequencies":
        return self.daily_at(time)._splice(DAY_OF_MONTH, day)

    def twice_monthly(self, first: int = 1, second: int = 16, time: str = "00:00") -> "Frequencies":
        return self.daily_at(time)._splice(DAY_OF_MONTH, f"{first},{second}")

    def quarterly(self) -> "Frequencies":
        return self.monthly_on(1)._splice(MONTH, "1-12/3")

    def yearly(self) -> "Frequencies":
        return self.monthly_on(1)._splice(MONTH, 1)

    def __str__(self) -> str:
        return self._expression

    def __repr__(self) -> str:
        return f"Frequencies({self._expression!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Frequencies):
            return NotImplemented
        return self._expression == other._expression

    def __hash__(self) -> int:
        return hash(self._expression)
