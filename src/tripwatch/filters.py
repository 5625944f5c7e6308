"""Trip filters, rules, and action priority resolution."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Tuple

from .exceptions import RuleConfigError
from .models import Action, Date, Field, Op, Time, Trip

logger = logging.getLogger(__name__)


class Filter(ABC):
    """
    A pure predicate over a Trip.

    Comparison values are bound when the filter is built, so evaluation never
    parses anything and cannot fail.
    """

    label = "Filter"

    @abstractmethod
    def evaluate(self, trip: Trip) -> bool:
        ...

    def describe(self) -> str:
        return self.label


@dataclass(frozen=True)
class TimeDiff(Filter):
    """Compare the difference between two clock fields to a value."""
    lhs: Field
    rhs: Field
    op: Op
    value: Time

    label = "TimeDiff"

    def evaluate(self, trip: Trip) -> bool:
        return self.op.compare(trip.get(self.lhs) - trip.get(self.rhs), self.value)

    def describe(self) -> str:
        return f"{self.lhs.value} - {self.rhs.value} {self.op.symbol} {self.value}"


@dataclass(frozen=True)
class FieldIs(Filter):
    field: Field
    op: Op
    value: Time

    label = "FieldIs"

    def evaluate(self, trip: Trip) -> bool:
        return self.op.compare(trip.get(self.field), self.value)

    def describe(self) -> str:
        return f"{self.field.value} {self.op.symbol} {self.value}"


@dataclass(frozen=True)
class DateIs(Filter):
    op: Op
    value: Date

    label = "DateIs"

    def evaluate(self, trip: Trip) -> bool:
        return self.op.compare(trip.date, self.value)

    def describe(self) -> str:
        return f"Date {self.op.symbol} {self.value}"


@dataclass(frozen=True)
class IncludeLayover(Filter):
    code: str

    label = "IncludeLay"

    def evaluate(self, trip: Trip) -> bool:
        return self.code in trip.layovers

    def describe(self) -> str:
        return f"Layover in {self.code}"


@dataclass(frozen=True)
class ExcludeLayover(Filter):
    code: str

    label = "ExcludeLay"

    def evaluate(self, trip: Trip) -> bool:
        return self.code not in trip.layovers

    def describe(self) -> str:
        return f"No layover in {self.code}"


@dataclass(frozen=True)
class NumDays(Filter):
    op: Op
    count: int

    label = "NumDays"

    def evaluate(self, trip: Trip) -> bool:
        return self.op.compare(trip.days, self.count)

    def describe(self) -> str:
        return f"Days {self.op.symbol} {self.count}"


@dataclass(frozen=True)
class IsPremium(Filter):
    label = "IsPrem"

    def evaluate(self, trip: Trip) -> bool:
        return trip.premium

    def describe(self) -> str:
        return "Premium only"


@dataclass(frozen=True)
class IncludeId(Filter):
    trip_id: str

    label = "IsID"

    def evaluate(self, trip: Trip) -> bool:
        return trip.id == self.trip_id

    def describe(self) -> str:
        return f"Trip ID is {self.trip_id}"


@dataclass(frozen=True)
class Rule:
    """A named AND of filters that yields an action when every filter passes."""
    name: str
    filters: Tuple[Filter, ...] = ()
    action: Action = Action.ALERT
    enabled: bool = True

    def __post_init__(self):
        object.__setattr__(self, "filters", tuple(self.filters))

    def evaluate(self, trip: Trip) -> bool:
        """
        Check the trip against every filter in order.

        Stops at the first failing filter. A rule without filters matches
        every trip.
        """
        for f in self.filters:
            if not f.evaluate(trip):
                logger.debug(f"Rule '{self.name}': trip {trip.id} failed filter {f.label} ({f.describe()})")
                return False
        return True

    def resolve_action(self, trip: Trip) -> Action:
        return self.action if self.evaluate(trip) else Action.NOTHING


def resolve_action(trip: Trip, rules: Iterable[Rule]) -> Action:
    """
    Pick the highest-priority action produced by any rule for this trip.

    Rule order does not matter: a matching Pickup rule beats any number of
    Alert rules, and non-matching rules contribute Action.NOTHING.
    """
    best = Action.NOTHING
    for rule in rules:
        action = rule.resolve_action(trip)
        if action.priority > best.priority:
            best = action
    return best


def _enum(enum_cls, value: Any, what: str):
    try:
        return enum_cls(value)
    except ValueError:
        choices = ", ".join(member.value for member in enum_cls)
        raise RuleConfigError(f"Invalid {what} {value!r}; expected one of: {choices}") from None


def _require(data: Dict[str, Any], key: str) -> Any:
    if key not in data:
        raise RuleConfigError(f"Filter {data.get('type')!r} is missing '{key}'")
    return data[key]


def _time(value: Any) -> Time:
    if isinstance(value, Time):
        return value
    try:
        return Time.parse(str(value))
    except ValueError as e:
        raise RuleConfigError(str(e)) from e


def _date(value: Any, year: Any) -> Date:
    if isinstance(value, Date):
        return value
    try:
        if year is None:
            return Date.parse(str(value))
        return Date.parse(str(value), year=int(year))
    except ValueError as e:
        raise RuleConfigError(str(e)) from e


def _code(value: Any) -> str:
    code = str(value).strip().upper()
    if not code:
        raise RuleConfigError("Airport code must not be empty")
    return code


def filter_from_dict(data: Dict[str, Any]) -> Filter:
    """
    Build a filter from a plain mapping.

    The ``type`` key uses the filter labels (``FieldIs``, ``IncludeLay``, ...).
    Time and date values may be given as tokens (``"0700"``, ``"15JAN"``) and
    are parsed here, not during evaluation.

    Raises:
        RuleConfigError: If the mapping does not describe a valid filter.
    """
    kind = data.get("type")
    if kind == TimeDiff.label:
        return TimeDiff(
            lhs=_enum(Field, _require(data, "lhs"), "field"),
            rhs=_enum(Field, _require(data, "rhs"), "field"),
            op=_enum(Op, _require(data, "op"), "operator"),
            value=_time(_require(data, "value")),
        )
    if kind == FieldIs.label:
        return FieldIs(
            field=_enum(Field, _require(data, "field"), "field"),
            op=_enum(Op, _require(data, "op"), "operator"),
            value=_time(_require(data, "value")),
        )
    if kind == DateIs.label:
        return DateIs(
            op=_enum(Op, _require(data, "op"), "operator"),
            value=_date(_require(data, "value"), data.get("year")),
        )
    if kind == IncludeLayover.label:
        return IncludeLayover(_code(_require(data, "value")))
    if kind == ExcludeLayover.label:
        return ExcludeLayover(_code(_require(data, "value")))
    if kind == NumDays.label:
        try:
            count = int(_require(data, "value"))
        except (TypeError, ValueError):
            raise RuleConfigError(f"Number of days must be an integer, got {data['value']!r}") from None
        if count < 0:
            raise RuleConfigError(f"Number of days must not be negative, got {count}")
        return NumDays(op=_enum(Op, _require(data, "op"), "operator"), count=count)
    if kind == IsPremium.label:
        return IsPremium()
    if kind == IncludeId.label:
        trip_id = str(_require(data, "value")).strip()
        if not trip_id:
            raise RuleConfigError("Trip ID must not be empty")
        return IncludeId(trip_id)
    raise RuleConfigError(f"Unknown filter type: {kind!r}")


def rule_from_dict(data: Dict[str, Any]) -> Rule:
    """Build a Rule from ``{"name", "action", "enabled", "filters": [...]}``."""
    name = data.get("name")
    if not name:
        raise RuleConfigError("Rule is missing a name")
    action = _enum(Action, data.get("action", Action.ALERT.value), "action")
    filters = [filter_from_dict(f) for f in data.get("filters", [])]
    enabled = data.get("enabled", True)
    if not isinstance(enabled, bool):
        raise RuleConfigError(f"Rule {name!r}: enabled must be true or false, got {enabled!r}")
    return Rule(name=name, filters=tuple(filters), action=action, enabled=enabled)


def rules_from_dicts(items: Iterable[Dict[str, Any]]) -> List[Rule]:
    return [rule_from_dict(item) for item in items]
