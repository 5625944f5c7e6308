"""Commands sent to the monitor worker and status events it sends back."""

from dataclasses import dataclass
from typing import Tuple

from .filters import Rule
from .models import Action, Trip


# Host -> worker

@dataclass(frozen=True)
class StartCommand:
    """Begin monitoring with this rule set (replaces any previous one)."""
    rules: Tuple[Rule, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "rules", tuple(self.rules))


@dataclass(frozen=True)
class StopCommand:
    pass


@dataclass(frozen=True)
class ShutdownCommand:
    """Stop monitoring and let the worker thread exit."""


# Worker -> host

@dataclass(frozen=True)
class Waiting:
    """A page refresh was issued; the next one is due in ``seconds``."""
    seconds: float


@dataclass(frozen=True)
class CopyScreen:
    pass


@dataclass(frozen=True)
class Copied:
    text: str


@dataclass(frozen=True)
class TripFound:
    trip: Trip
    action: Action


@dataclass(frozen=True)
class RecordSkipped:
    line: str
    reason: str


@dataclass(frozen=True)
class Stopped:
    """The worker went back to the stopped state on its own."""
    reason: str = ""
