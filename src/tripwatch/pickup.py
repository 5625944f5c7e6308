"""Keystroke choreography that claims a trip on the portal."""

import logging
import time
from typing import Callable, Sequence

from .desktop import InputDevice

logger = logging.getLogger(__name__)

# Delays tuned to the portal's rendering latency; should total well under a second
FIND_OPEN_DELAY = 0.025
TYPE_DELAY = 0.025
FOCUS_DELAY = 0.05
PRESS_DELAY = 0.005


class PickupSequence:
    """Presses a series of on-page buttons through the browser's quick find bar."""

    def __init__(
        self,
        input_device: InputDevice,
        steps: Sequence[str],
        step_delay: float = 2.0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Args:
            input_device: Where keystrokes are sent.
            steps: Button captions to press in order; ``{trip_id}`` is replaced
                with the trip being claimed.
            step_delay: Pause between buttons while the page reacts.
            sleep: Injected for tests.
        """
        self.input = input_device
        self.steps = tuple(steps)
        self.step_delay = step_delay
        self._sleep = sleep

    def submit(self, trip_id: str) -> None:
        """Claim ``trip_id``. Nothing is observed back from the page."""
        logger.info(f"Submitting pickup for trip {trip_id}")
        for index, step in enumerate(self.steps):
            if index:
                self._sleep(self.step_delay)
            self.hit_button(step.format(trip_id=trip_id))

    def hit_button(self, caption: str) -> None:
        # Quick find selects the text; shift+tab moves focus onto the button itself
        self.input.type_text("/")
        self._sleep(FIND_OPEN_DELAY)

        self.input.type_text(caption)
        self._sleep(TYPE_DELAY)

        self.input.key_chord("shift", "tab")
        self._sleep(FOCUS_DELAY)

        self.input.key_chord("enter")
        self._sleep(PRESS_DELAY)
