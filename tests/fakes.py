"""In-memory stand-ins for the desktop capabilities used by the monitor."""

import queue
import random
import sys
from pathlib import Path

# Add src to path so we can import tripwatch
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from tripwatch.config import MonitorConfig
from tripwatch.exceptions import ClipboardError
from tripwatch.monitor import TripMonitor


TRIP_PAGE = """\
Open Time - Base LGW
Trip  Date  Days Rep   Dep   Arr   Blk  Cr   Layovers
AB12 15JAN 3 0700 0730 1500 0800 0600 LHR CDG
C210 16JAN 4 0900 0945 2010 1020 1100 EDI AMS X
Page 1 of 1
"""


class FakeClock:
    """Monotonic clock whose sleep just moves time forward."""

    def __init__(self, start: float = 1000.0):
        self.now = start
        self.sleeps = []

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class FakeScreen:
    """Returns scripted frames per region; the last frame repeats forever."""

    def __init__(self):
        self.frames = {}
        self.captures = []
        self.errors = {}

    def script(self, region, *frames) -> None:
        self.frames[region] = list(frames)

    def capture(self, region) -> bytes:
        self.captures.append(region)
        if region in self.errors:
            raise self.errors[region]
        frames = self.frames.get(region, [b"static"])
        if len(frames) > 1:
            return frames.pop(0)
        return frames[0]


class FakeInput:
    def __init__(self):
        self.calls = []

    def move_cursor(self, x, y):
        self.calls.append(("move", x, y))

    def click(self, button="left"):
        self.calls.append(("click", button))

    def key_chord(self, *keys):
        self.calls.append(("chord",) + keys)

    def type_text(self, text):
        self.calls.append(("type", text))

    def chords(self):
        return [call[1:] for call in self.calls if call[0] == "chord"]

    def typed(self):
        return [call[1] for call in self.calls if call[0] == "type"]


class FakeClipboard:
    """Returns scripted texts in order; an exception instance is raised instead."""

    def __init__(self, *texts, on_read=None):
        self.texts = list(texts) or [TRIP_PAGE]
        self.reads = 0
        self.on_read = on_read

    def read_text(self) -> str:
        self.reads += 1
        if self.on_read:
            self.on_read()
        item = self.texts.pop(0) if len(self.texts) > 1 else self.texts[0]
        if isinstance(item, Exception):
            raise item
        return item


class FakeAlarm:
    def __init__(self):
        self.calls = []

    def play_loop(self):
        self.calls.append("play_loop")

    def play_once(self):
        self.calls.append("play_once")

    def pause(self):
        self.calls.append("pause")


class FakeCancel:
    """Latched hotkey press, cleared when read."""

    def __init__(self):
        self.pressed = False

    def press(self):
        self.pressed = True

    def is_cancel_requested(self) -> bool:
        pressed, self.pressed = self.pressed, False
        return pressed


def quiet_config(**overrides) -> MonitorConfig:
    """Config with no refresh due and fixed-length idle waits."""
    values = dict(
        first_refresh=10_000.0,
        refresh_min=40.0,
        refresh_max=40.0,
        idle_min=0.2,
        idle_max=0.2,
        wait_slice=0.05,
        copy_delay=0.5,
        load_poll=0.25,
        load_timeout=1.0,
    )
    values.update(overrides)
    return MonitorConfig(**values)


class Rig:
    """A TripMonitor wired to fakes, with handles on every fake."""

    def __init__(self, config=None, clipboard=None):
        self.config = config or quiet_config()
        self.clock = FakeClock()
        self.screen = FakeScreen()
        self.input = FakeInput()
        self.clipboard = clipboard or FakeClipboard()
        self.alarm = FakeAlarm()
        self.cancel = FakeCancel()
        self.commands = queue.Queue()
        self.status = queue.Queue()
        self.monitor = TripMonitor(
            self.config,
            self.screen,
            self.input,
            self.clipboard,
            self.alarm,
            self.cancel,
            commands=self.commands,
            status=self.status,
            clock=self.clock,
            sleep=self.clock.sleep,
            rng=random.Random(7),
        )

    def events(self):
        drained = []
        while True:
            try:
                drained.append(self.status.get_nowait())
            except queue.Empty:
                return drained
