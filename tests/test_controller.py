"""Tests for MonitorController, the host-side handle on the worker thread."""

import time
import unittest
import sys
from pathlib import Path

# Add src to path so we can import tripwatch
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from fakes import FakeAlarm, FakeCancel, FakeClipboard, FakeInput, FakeScreen, Rig, quiet_config

from tripwatch.controller import MonitorController
from tripwatch.filters import IncludeLayover, Rule
from tripwatch.messages import Copied, CopyScreen, Stopped, TripFound, Waiting
from tripwatch.models import Action, Date, Time, Trip
from tripwatch.monitor import MonitorState


ALERT_ANY = Rule("anything", filters=[], action=Action.ALERT)

SAMPLE_TRIP = Trip(
    id="AB12",
    date=Date(2024, 1, 15),
    days=3,
    report=Time(7, 0),
    depart=Time(7, 30),
    arrive=Time(15, 0),
    block=Time(8, 0),
    credit=Time(6, 0),
)


def wait_for(controller, event_type, timeout=2.0):
    """Poll the controller until an event of ``event_type`` shows up."""
    seen = []
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        seen.extend(controller.poll_events())
        if any(isinstance(e, event_type) for e in seen):
            return seen
        time.sleep(0.01)
    raise AssertionError(f"No {event_type.__name__} event within {timeout}s; saw {seen}")


class TestControllerThread(unittest.TestCase):
    """Test the controller against a real worker thread wired to fakes."""

    def setUp(self):
        config = quiet_config(idle_min=0.01, idle_max=0.01, wait_slice=0.005, copy_delay=0.0)
        self.alarm = FakeAlarm()
        self.controller = MonitorController.create(
            config,
            FakeScreen(),
            FakeInput(),
            FakeClipboard(),
            self.alarm,
            FakeCancel(),
        )

    def tearDown(self):
        self.controller.shutdown(timeout=2.0)

    def test_launch_is_idempotent(self):
        self.controller.launch()
        thread = self.controller._thread
        self.controller.launch()

        self.assertIs(self.controller._thread, thread)
        self.assertTrue(self.controller.is_alive)

    def test_alert_round_trip(self):
        """Test start, alert, stop and shutdown through the queues."""
        self.controller.start([ALERT_ANY])
        self.assertIs(self.controller.state, MonitorState.RUNNING)

        events = wait_for(self.controller, TripFound)

        self.assertIs(self.controller.state, MonitorState.ALERTING)
        self.assertIsInstance(events[0], CopyScreen)
        self.assertIsInstance(events[1], Copied)
        found = [e for e in events if isinstance(e, TripFound)][0]
        self.assertEqual(found.trip.id, "AB12")
        self.assertIn("play_loop", self.alarm.calls)

        self.controller.stop()
        self.assertIs(self.controller.state, MonitorState.STOPPED)

        self.controller.shutdown(timeout=2.0)
        self.assertFalse(self.controller.is_alive)

    def test_rules_are_copied_at_start(self):
        """Test that editing the host's rule list after start has no effect."""
        rules = [Rule("DUB only", filters=[IncludeLayover("DUB")], action=Action.ALERT)]
        self.controller.start(rules)
        rules.append(ALERT_ANY)

        wait_for(self.controller, CopyScreen)
        time.sleep(0.05)
        events = self.controller.poll_events()

        self.assertFalse(any(isinstance(e, TripFound) for e in events))
        self.assertIs(self.controller.state, MonitorState.RUNNING)

    def test_shutdown_without_launch(self):
        self.controller.shutdown()
        self.assertFalse(self.controller.is_alive)
        self.assertIs(self.controller.state, MonitorState.STOPPED)


class TestPollEvents(unittest.TestCase):
    """Test the host's view of the worker state, built from events."""

    def setUp(self):
        self.rig = Rig()
        self.controller = MonitorController(self.rig.monitor)

    def test_empty_queue(self):
        self.assertEqual(self.controller.poll_events(), [])
        self.assertIs(self.controller.state, MonitorState.STOPPED)

    def test_events_update_state_in_order(self):
        self.controller.state = MonitorState.RUNNING
        self.rig.status.put(Waiting(40.0))
        self.rig.status.put(CopyScreen())
        self.rig.status.put(TripFound(SAMPLE_TRIP, Action.ALERT))

        events = self.controller.poll_events()

        self.assertEqual([type(e) for e in events], [Waiting, CopyScreen, TripFound])
        self.assertEqual(self.controller.refresh_count, 1)
        self.assertIs(self.controller.state, MonitorState.ALERTING)

    def test_pickup_then_stopped(self):
        self.controller.state = MonitorState.RUNNING
        self.rig.status.put(TripFound(SAMPLE_TRIP, Action.PICKUP))
        self.controller.poll_events()
        self.assertIs(self.controller.state, MonitorState.RUNNING)

        self.rig.status.put(Stopped("picked up trip AB12"))
        self.controller.poll_events()
        self.assertIs(self.controller.state, MonitorState.STOPPED)

    def test_start_and_stop_queue_commands(self):
        self.controller.launch = lambda: None
        self.controller.start([ALERT_ANY])
        self.controller.stop()

        commands = [self.rig.commands.get_nowait(), self.rig.commands.get_nowait()]
        self.assertEqual(commands[0].rules, (ALERT_ANY,))
        self.assertEqual(type(commands[1]).__name__, "StopCommand")
        self.assertIs(self.controller.state, MonitorState.STOPPED)

    def test_uptime_grows(self):
        self.controller.started_at -= 5
        self.assertGreaterEqual(self.controller.uptime, 5)


if __name__ == "__main__":
    unittest.main()
