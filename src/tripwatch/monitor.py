"""Open-time monitor: the worker-side state machine."""

import logging
import queue
import random
import time
from enum import Enum
from typing import Callable, Iterable, List, Optional, Tuple

from .config import MonitorConfig
from .desktop import Alarm, CancelSignal, Clipboard, InputDevice, Screen
from .exceptions import ClipboardError
from .filters import Rule, resolve_action
from .messages import (
    Copied,
    CopyScreen,
    RecordSkipped,
    ShutdownCommand,
    StartCommand,
    StopCommand,
    Stopped,
    TripFound,
    Waiting,
)
from .models import DEFAULT_YEAR, Action, Trip
from .pickup import PickupSequence
from .trip_parser import parse_trips

logger = logging.getLogger(__name__)


class MonitorState(Enum):
    STOPPED = "Stopped"
    RUNNING = "Running"
    ALERTING = "Alerting"


class TripMonitor:
    """
    Watches the open-time page and acts on trips that match the rules.

    Runs entirely on one worker thread (see ``run``). The host talks to it only
    through the ``commands`` queue and listens on the ``status`` queue.

    While running, each iteration:
    - refreshes the page when the randomized refresh interval has elapsed
    - captures a small "last updated" region and stops there if it is unchanged
    - otherwise copies the page text, parses trips and resolves each trip's action
    - idles for a short random time, checking for cancellation every slice
    """

    def __init__(
        self,
        config: MonitorConfig,
        screen: Screen,
        input_device: InputDevice,
        clipboard: Clipboard,
        alarm: Alarm,
        cancel: CancelSignal,
        commands: "queue.Queue",
        status: "queue.Queue",
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
        rng: Optional[random.Random] = None,
        year: int = DEFAULT_YEAR,
    ):
        """
        Args:
            config: Screen geometry and timing.
            screen, input_device, clipboard, alarm, cancel: Desktop capabilities.
            commands: Host -> worker queue of Start/Stop/Shutdown commands.
            status: Worker -> host queue of status events.
            clock: Monotonic clock in seconds; injected for tests.
            sleep: Blocking sleep; injected for tests.
            rng: Source of the randomized refresh and idle durations.
            year: Year attached to scraped trip dates.
        """
        self.config = config
        self.screen = screen
        self.input = input_device
        self.clipboard = clipboard
        self.alarm = alarm
        self.cancel = cancel
        self.commands = commands
        self.status = status
        self.year = year

        self._clock = clock
        self._sleep = sleep
        self._rng = rng or random.Random()
        self.pickup = PickupSequence(
            input_device,
            config.pickup_steps,
            step_delay=config.pickup_step_delay,
            sleep=sleep,
        )

        self.state = MonitorState.STOPPED
        self.rules: Tuple[Rule, ...] = ()
        self.scrape_count = 0
        self.refresh_count = 0

        self._last_capture: Optional[bytes] = None
        self._loaded_snapshot: Optional[bytes] = None
        self._last_refresh = 0.0
        self._refresh_interval = config.first_refresh
        self._shutdown = False

    # ------------------------------------------------------------------
    # Commands and transitions
    # ------------------------------------------------------------------

    def handle_command(self, command) -> None:
        if isinstance(command, StartCommand):
            self.start(command.rules)
        elif isinstance(command, StopCommand):
            self.stop()
        elif isinstance(command, ShutdownCommand):
            self.stop()
            self._shutdown = True
        else:
            logger.warning(f"Ignoring unknown command: {command!r}")

    def poll_commands(self) -> bool:
        """Handle every queued command without blocking. Returns True if any were handled."""
        handled = False
        while True:
            try:
                command = self.commands.get_nowait()
            except queue.Empty:
                return handled
            self.handle_command(command)
            handled = True

    def start(self, rules: Iterable[Rule]) -> None:
        """
        Adopt a rule set and begin monitoring.

        Disabled rules are dropped here; the adopted rules stay fixed until the
        next start. Starting while already running restarts the run.
        """
        self.rules = tuple(rule for rule in rules if rule.enabled)
        logger.info(f"Starting monitor with {len(self.rules)} rule(s)")

        self.alarm.pause()
        # Discard a hotkey press made while stopped
        self.cancel.is_cancel_requested()
        self.state = MonitorState.RUNNING
        self._last_capture = None
        self._last_refresh = self._clock()
        self._refresh_interval = self.config.first_refresh

        self.focus()
        self._loaded_snapshot = self.screen.capture(self.config.loading_region)

    def stop(self) -> None:
        if self.state is not MonitorState.STOPPED:
            logger.info(f"Stopping monitor (was {self.state.value})")
        self.state = MonitorState.STOPPED
        self.alarm.pause()

    def _force_stop(self, reason: str) -> None:
        self.stop()
        self._emit(Stopped(reason))

    def _emit(self, event) -> None:
        self.status.put(event)

    # ------------------------------------------------------------------
    # Worker loop
    # ------------------------------------------------------------------

    def run(self) -> None:
        """Worker thread body. Returns after a ShutdownCommand."""
        logger.info("Monitor worker started")
        self._shutdown = False
        while not self._shutdown:
            if self.state is MonitorState.STOPPED:
                self.handle_command(self.commands.get())
                continue

            self.poll_commands()
            if self.state is MonitorState.RUNNING:
                try:
                    self.step()
                except Exception as e:
                    logger.error(f"Monitor iteration failed: {e}", exc_info=True)
                    self._force_stop(f"error: {e}")

            if self.state is not MonitorState.STOPPED:
                self.idle_wait()
        logger.info("Monitor worker exiting")

    def step(self) -> None:
        """Run one polling iteration. Only meaningful while RUNNING."""
        if self._clock() - self._last_refresh >= self._refresh_interval:
            self.refresh_page()
            if self.state is not MonitorState.RUNNING:
                return

        current = self.screen.capture(self.config.last_updated_region)
        if current == self._last_capture:
            logger.debug("Trip list unchanged; skipping scrape")
            return
        self._last_capture = current
        self.scrape()

    def idle_wait(self) -> None:
        """
        Sleep a random short time in small slices.

        Each slice checks the cancel hotkey and the command queue, so a Stop is
        acted on within one slice. Any handled command ends the wait early.
        """
        duration = self._rng.uniform(self.config.idle_min, self.config.idle_max)
        slices = max(1, round(duration / self.config.wait_slice))
        for _ in range(slices):
            if self.cancel.is_cancel_requested():
                logger.info("Cancel hotkey pressed")
                self._force_stop("cancelled")
                return
            if self.poll_commands():
                return
            self._sleep(self.config.wait_slice)

    # ------------------------------------------------------------------
    # Page interaction
    # ------------------------------------------------------------------

    def focus(self) -> None:
        """Click inside the portal window so keystrokes go to it."""
        x, y = self.config.focus_point
        self.input.move_cursor(x, y)
        self.input.click("left")

    def refresh_page(self) -> None:
        """
        Reload the page and wait for it to finish loading.

        The wait is bounded by ``load_timeout``. A page that never finishes is
        refreshed again up to ``refresh_retries`` times, after which the
        loading indicator is re-baselined from whatever is on screen.
        """
        cfg = self.config
        self._refresh_interval = self._rng.uniform(cfg.refresh_min, cfg.refresh_max)
        self.refresh_count += 1
        logger.info(f"Refreshing page; next refresh in {self._refresh_interval:.0f}s")
        self._emit(Waiting(self._refresh_interval))

        for attempt in range(cfg.refresh_retries + 1):
            self.input.key_chord(*cfg.refresh_chord)
            self._sleep(cfg.refresh_delay)
            if self.wait_for_page_load():
                break
            if self.state is not MonitorState.RUNNING:
                return
            logger.warning(f"Page did not finish loading within {cfg.load_timeout}s (attempt {attempt + 1})")
        else:
            logger.warning("Giving up on page load; re-baselining loading indicator")
            self._loaded_snapshot = self.screen.capture(cfg.loading_region)

        self.focus()
        self._last_refresh = self._clock()

    def wait_for_page_load(self) -> bool:
        """
        Busy-poll the loading region until it has left and returned to its
        loaded-state snapshot.

        A fast reload can finish before the first poll, so a region that still
        matches the snapshot after ``load_grace_polls`` more polls also counts
        as loaded.

        Returns:
            True once the page is loaded again, False on timeout or when the
            cancel hotkey stops the monitor.
        """
        cfg = self.config
        deadline = self._clock() + cfg.load_timeout
        seen_loading = False
        polls = 0
        while self._clock() < deadline:
            if self.cancel.is_cancel_requested():
                logger.info("Cancel hotkey pressed while waiting for page load")
                self._force_stop("cancelled")
                return False
            current = self.screen.capture(cfg.loading_region)
            polls += 1
            if current != self._loaded_snapshot:
                seen_loading = True
            elif seen_loading:
                return True
            elif polls > cfg.load_grace_polls:
                logger.debug("Loading indicator never changed; assuming a fast reload")
                return True
            self._sleep(cfg.load_poll)
        return False

    def scrape(self) -> None:
        """Copy the page text, parse it and act on the trips found."""
        self._emit(CopyScreen())
        self.scrape_count += 1
        self.input.key_chord(*self.config.select_all_chord)
        self.input.key_chord(*self.config.copy_chord)
        self._sleep(self.config.copy_delay)

        try:
            text = self.clipboard.read_text()
        except ClipboardError as e:
            logger.warning(f"Could not read copied text: {e}")
            return

        self._emit(Copied(text))
        result = parse_trips(text, year=self.year)
        for skipped in result.skipped:
            self._emit(RecordSkipped(skipped.line, skipped.reason))
        self.evaluate_trips(result.trips)

    # ------------------------------------------------------------------
    # Rule evaluation and dispatch
    # ------------------------------------------------------------------

    def evaluate_trips(self, trips: List[Trip]) -> None:
        """
        Resolve every trip against the rules and dispatch the first match.

        The rest of the list is still evaluated and logged, but nothing more is
        dispatched once the monitor has left RUNNING.
        """
        for trip in trips:
            action = resolve_action(trip, self.rules)
            if action is Action.NOTHING:
                continue
            if self.state is not MonitorState.RUNNING:
                logger.info(f"Trip {trip.id} also matched ({action.value}); not dispatched")
                continue
            self.dispatch(trip, action)

    def dispatch(self, trip: Trip, action: Action) -> None:
        logger.info(f"Trip {trip.id} matched: {action.value}")
        if action is Action.ALERT:
            self.state = MonitorState.ALERTING
            self.alarm.play_loop()
            self._emit(TripFound(trip, action))
        elif action is Action.PICKUP:
            self.pickup.submit(trip.id)
            # Not stop(): that would silence the sound we just started
            self.state = MonitorState.STOPPED
            self.alarm.play_once()
            self._emit(TripFound(trip, action))
            self._emit(Stopped(f"picked up trip {trip.id}"))
