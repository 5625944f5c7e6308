"""TripWatch - unattended open-time trip monitor with rule-based alerts and pickups."""

__version__ = "0.1.0"

from .models import Action, Date, Field, Op, Time, Trip
from .filters import (
    DateIs,
    ExcludeLayover,
    FieldIs,
    Filter,
    IncludeId,
    IncludeLayover,
    IsPremium,
    NumDays,
    Rule,
    TimeDiff,
    resolve_action,
    rules_from_dicts,
)
from .trip_parser import ParseResult, parse_trips
from .config import MonitorConfig, Region
from .monitor import MonitorState, TripMonitor
from .controller import MonitorController

__all__ = [
    "Action",
    "Date",
    "Field",
    "Op",
    "Time",
    "Trip",
    "Filter",
    "TimeDiff",
    "FieldIs",
    "DateIs",
    "IncludeLayover",
    "ExcludeLayover",
    "NumDays",
    "IsPremium",
    "IncludeId",
    "Rule",
    "resolve_action",
    "rules_from_dicts",
    "ParseResult",
    "parse_trips",
    "MonitorConfig",
    "Region",
    "MonitorState",
    "TripMonitor",
    "MonitorController",
]
