"""Data models for scraped trips and rule comparisons."""

import datetime
import operator
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Tuple

from .exceptions import DateParseError, TimeParseError

# Year used for DDMON tokens, which carry no year of their own
DEFAULT_YEAR = 2024

MONTHS = ("JAN", "FEB", "MAR", "APR", "MAY", "JUN", "JUL", "AUG", "SEP", "OCT", "NOV", "DEC")

_TIME_TOKEN = re.compile(r"([0-9]{2}):?([0-9]{2})")
_DATE_TOKEN = re.compile(r"([0-9]{2})([A-Za-z]{3})")


class Field(Enum):
    """Clock-valued trip attributes a filter can look at."""
    REPORT = "Report"
    DEPART = "Depart"
    ARRIVE = "Arrive"
    BLOCK = "Block"
    CREDIT = "Credit"


class Op(Enum):
    """Comparison operators used by filters."""
    EQ = "Eq"
    NEQ = "NEq"
    LT = "Lt"
    LTEQ = "LtEq"
    GT = "Gt"
    GTEQ = "GtEq"

    @property
    def symbol(self) -> str:
        return _OP_SYMBOLS[self]

    def compare(self, lhs: Any, rhs: Any) -> bool:
        """Apply the operator as ``lhs <op> rhs``."""
        return _OP_FUNCS[self](lhs, rhs)


_OP_FUNCS = {
    Op.EQ: operator.eq,
    Op.NEQ: operator.ne,
    Op.LT: operator.lt,
    Op.LTEQ: operator.le,
    Op.GT: operator.gt,
    Op.GTEQ: operator.ge,
}

_OP_SYMBOLS = {
    Op.EQ: "==",
    Op.NEQ: "!=",
    Op.LT: "<",
    Op.LTEQ: "<=",
    Op.GT: ">",
    Op.GTEQ: ">=",
}


class Action(Enum):
    """What the monitor does when a rule matches a trip."""
    NOTHING = "Nothing"
    ALERT = "Alert"
    PICKUP = "Pickup"

    @property
    def priority(self) -> int:
        """Rank used when several rules resolve to different actions."""
        return _ACTION_PRIORITY[self]


# Explicit ranking, independent of declaration order
_ACTION_PRIORITY = {
    Action.NOTHING: 0,
    Action.ALERT: 1,
    Action.PICKUP: 2,
}


@dataclass(frozen=True, order=True)
class Time:
    """A clock reading or duration with minute resolution."""
    hours: int = 0
    minutes: int = 0

    def __post_init__(self):
        if not 0 <= self.hours <= 23:
            raise ValueError(f"hours out of range: {self.hours}")
        if not 0 <= self.minutes <= 59:
            raise ValueError(f"minutes out of range: {self.minutes}")

    @classmethod
    def parse(cls, token: str) -> "Time":
        """
        Parse a ``HHMM`` or ``HH:MM`` token.

        Raises:
            TimeParseError: If the token has the wrong shape or is out of range.
        """
        match = _TIME_TOKEN.fullmatch(token)
        if not match:
            raise TimeParseError(f"Invalid time token: {token!r}")
        try:
            return cls(int(match.group(1)), int(match.group(2)))
        except ValueError as e:
            raise TimeParseError(f"Invalid time token {token!r}: {e}") from e

    def __sub__(self, other: "Time") -> "Time":
        # Hours that go negative roll over on a 12 hour dial, not 24
        if not isinstance(other, Time):
            return NotImplemented
        borrow = 1 if other.minutes > self.minutes else 0
        minutes = self.minutes + 60 * borrow - other.minutes
        hours = self.hours - other.hours - borrow
        if hours < 0:
            hours %= 12
        return Time(hours, minutes)

    def __str__(self) -> str:
        return f"{self.hours:02d}:{self.minutes:02d}"


@dataclass(frozen=True, order=True)
class Date:
    """A calendar date; field order gives calendar ordering."""
    year: int
    month: int
    day: int

    def __post_init__(self):
        # Let the standard library reject impossible days such as 31APR
        datetime.date(self.year, self.month, self.day)

    @classmethod
    def parse(cls, token: str, year: int = DEFAULT_YEAR) -> "Date":
        """
        Parse a ``DDMON`` token such as ``15JAN``.

        Args:
            token: Two-digit day followed by a three letter month abbreviation.
            year: Year to attach, since the token does not carry one.

        Raises:
            DateParseError: If the token is malformed or names an invalid day.
        """
        match = _DATE_TOKEN.fullmatch(token)
        if not match:
            raise DateParseError(f"Invalid date token: {token!r}")
        day, month_name = match.groups()
        month_name = month_name.upper()
        if month_name not in MONTHS:
            raise DateParseError(f"Unknown month {month_name!r} in {token!r}")
        try:
            return cls(year, MONTHS.index(month_name) + 1, int(day))
        except ValueError as e:
            raise DateParseError(f"Invalid date token {token!r}: {e}") from e

    def __str__(self) -> str:
        return f"{self.day:02d}{MONTHS[self.month - 1]}"


@dataclass(frozen=True)
class Trip:
    """One work assignment scraped from the open-time list."""
    id: str
    date: Date
    days: int
    report: Time
    depart: Time
    arrive: Time
    block: Time
    credit: Time
    layovers: Tuple[str, ...] = ()
    premium: bool = False

    def get(self, field: Field) -> Time:
        """Return the clock value stored under ``field``."""
        return getattr(self, field.value.lower())
