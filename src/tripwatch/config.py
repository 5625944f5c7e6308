"""Monitor configuration."""

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class Region:
    """A rectangle of the screen, in absolute pixel coordinates."""
    x: int
    y: int
    width: int
    height: int

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Region must have a positive size, got {self.width}x{self.height}")


@dataclass(frozen=True)
class MonitorConfig:
    """
    Screen geometry and timing for the monitor worker.

    All durations are in seconds. The worker reads this once at construction
    and never modifies it.
    """
    # Click here to give the portal window keyboard focus
    focus_point: Tuple[int, int] = (500, 500)
    # Small area that changes whenever the trip list is updated
    last_updated_region: Region = Region(20, 120, 200, 20)
    # Small area that goes blank while the page reloads
    loading_region: Region = Region(20, 60, 120, 20)

    first_refresh: float = 20.0
    refresh_min: float = 30.0
    refresh_max: float = 60.0

    idle_min: float = 0.8
    idle_max: float = 2.0
    wait_slice: float = 0.05

    copy_delay: float = 0.5
    refresh_delay: float = 0.5
    load_poll: float = 0.1
    load_timeout: float = 15.0
    # Polls with no visible change before an unchanged region counts as loaded
    load_grace_polls: int = 2
    refresh_retries: int = 1

    select_all_chord: Tuple[str, ...] = ("ctrl", "a")
    copy_chord: Tuple[str, ...] = ("ctrl", "c")
    refresh_chord: Tuple[str, ...] = ("ctrl", "r")

    # Quick-find targets pressed in order; "{trip_id}" is filled in per trip
    pickup_steps: Tuple[str, ...] = ("add", "{trip_id}", "it r")
    pickup_step_delay: float = 2.0

    def __post_init__(self):
        if self.refresh_min > self.refresh_max:
            raise ValueError("refresh_min must not exceed refresh_max")
        if self.idle_min > self.idle_max:
            raise ValueError("idle_min must not exceed idle_max")
        if self.wait_slice <= 0 or self.load_poll <= 0:
            raise ValueError("wait_slice and load_poll must be positive")
        if self.refresh_retries < 0 or self.load_grace_polls < 0:
            raise ValueError("refresh_retries and load_grace_polls must not be negative")
