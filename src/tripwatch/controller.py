"""Host-side handle for the monitor worker thread."""

import logging
import queue
import threading
import time
from typing import Iterable, List, Optional

from .filters import Rule
from .messages import ShutdownCommand, StartCommand, StopCommand, Stopped, TripFound, Waiting
from .models import Action
from .monitor import MonitorState, TripMonitor

logger = logging.getLogger(__name__)


class MonitorController:
    """
    Owns the worker thread and both message channels.

    The host never blocks on the worker: commands are queued and status events
    are collected with ``poll_events`` whenever the host gets around to it
    (a GUI timer, a console loop, ...). ``state`` is the host's view, built from
    its own commands and the events it has seen, so it can lag the worker.
    """

    def __init__(self, monitor: TripMonitor):
        """
        Args:
            monitor: A worker wired to this controller's queues; see ``create``.
        """
        self.monitor = monitor
        self.state = MonitorState.STOPPED
        self.refresh_count = 0
        self.started_at = time.monotonic()
        self._thread: Optional[threading.Thread] = None

    @classmethod
    def create(cls, config, screen, input_device, clipboard, alarm, cancel, **kwargs) -> "MonitorController":
        """Build a TripMonitor with fresh queues and wrap it."""
        monitor = TripMonitor(
            config,
            screen,
            input_device,
            clipboard,
            alarm,
            cancel,
            commands=queue.Queue(),
            status=queue.Queue(),
            **kwargs,
        )
        return cls(monitor)

    @property
    def uptime(self) -> float:
        return time.monotonic() - self.started_at

    @property
    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def launch(self) -> None:
        """Start the worker thread (idle until ``start`` is called)."""
        if self.is_alive:
            return
        self._thread = threading.Thread(target=self.monitor.run, name="trip-monitor", daemon=True)
        self._thread.start()
        logger.info("Launched monitor worker thread")

    def start(self, rules: Iterable[Rule]) -> None:
        """
        Send the rule set to the worker and begin monitoring.

        The worker keeps its own copy; later edits to ``rules`` only take
        effect on the next start.
        """
        self.launch()
        self.monitor.commands.put(StartCommand(tuple(rules)))
        self.state = MonitorState.RUNNING

    def stop(self) -> None:
        self.monitor.commands.put(StopCommand())
        self.state = MonitorState.STOPPED

    def shutdown(self, timeout: Optional[float] = 5.0) -> None:
        """Stop monitoring and wait for the worker thread to exit."""
        self.monitor.commands.put(ShutdownCommand())
        self.state = MonitorState.STOPPED
        if self._thread is not None:
            self._thread.join(timeout)
            if self._thread.is_alive():
                logger.warning("Monitor worker did not exit in time")
            self._thread = None

    def poll_events(self) -> List[object]:
        """Drain all pending status events without blocking, in emission order."""
        events = []
        while True:
            try:
                event = self.monitor.status.get_nowait()
            except queue.Empty:
                break
            if isinstance(event, Stopped):
                self.state = MonitorState.STOPPED
            elif isinstance(event, TripFound) and event.action is Action.ALERT:
                self.state = MonitorState.ALERTING
            elif isinstance(event, Waiting):
                self.refresh_count += 1
            events.append(event)
        return events
