"""
Desktop capabilities the monitor depends on.

The monitor only talks to the protocols below. The default adapters wrap
third-party desktop libraries and import them lazily, so the rest of the
package works (and tests run) on machines without a display.
"""

import logging
import threading
from typing import Protocol

from .config import Region
from .exceptions import ClipboardError

logger = logging.getLogger(__name__)


class Screen(Protocol):
    def capture(self, region: Region) -> bytes:
        """Return the raw pixels of ``region``; equal images give equal bytes."""


class InputDevice(Protocol):
    def move_cursor(self, x: int, y: int) -> None: ...

    def click(self, button: str = "left") -> None: ...

    def key_chord(self, *keys: str) -> None:
        """Press ``keys`` in order, then release them in reverse order."""

    def type_text(self, text: str) -> None: ...


class Clipboard(Protocol):
    def read_text(self) -> str:
        """Return the clipboard text or raise ClipboardError."""


class Alarm(Protocol):
    def play_loop(self) -> None: ...

    def play_once(self) -> None: ...

    def pause(self) -> None: ...


class CancelSignal(Protocol):
    def is_cancel_requested(self) -> bool: ...


class MssScreen:
    """Screen capture backed by mss."""

    def __init__(self):
        # mss handles are not shareable across threads, so the grabber is
        # created on first use from the worker thread.
        self._sct = None

    def capture(self, region: Region) -> bytes:
        if self._sct is None:
            import mss

            self._sct = mss.mss()
        shot = self._sct.grab({
            "left": region.x,
            "top": region.y,
            "width": region.width,
            "height": region.height,
        })
        return shot.rgb

    def close(self) -> None:
        if self._sct is not None:
            self._sct.close()
            self._sct = None


class PyAutoGuiInput:
    """Keyboard and mouse simulation backed by pyautogui."""

    def __init__(self):
        import pyautogui

        self._gui = pyautogui

    def move_cursor(self, x: int, y: int) -> None:
        self._gui.moveTo(x, y)

    def click(self, button: str = "left") -> None:
        self._gui.click(button=button)

    def key_chord(self, *keys: str) -> None:
        self._gui.hotkey(*keys)

    def type_text(self, text: str) -> None:
        self._gui.write(text)


class PyperclipClipboard:
    """Clipboard reads backed by pyperclip."""

    def __init__(self):
        import pyperclip

        self._clip = pyperclip

    def read_text(self) -> str:
        try:
            text = self._clip.paste()
        except self._clip.PyperclipException as e:
            raise ClipboardError(f"Clipboard read failed: {e}") from e
        if not text:
            raise ClipboardError("Clipboard is empty")
        return text


class SoundDeviceAlarm:
    """Plays an alert sound file through sounddevice."""

    def __init__(self, path: str):
        import sounddevice
        import soundfile

        self._sd = sounddevice
        self._data, self._samplerate = soundfile.read(path, dtype="float32")
        logger.debug(f"Loaded alert sound {path} ({self._samplerate} Hz)")

    def play_loop(self) -> None:
        self._sd.play(self._data, self._samplerate, loop=True)

    def play_once(self) -> None:
        self._sd.play(self._data, self._samplerate)

    def pause(self) -> None:
        self._sd.stop()


class EscapeKeyCancel:
    """
    Global hotkey watcher backed by a pynput keyboard listener.

    A press of the hotkey is latched until the monitor reads it, so a quick tap
    between two wait slices is not lost.
    """

    def __init__(self, key_name: str = "esc"):
        from pynput import keyboard

        self._key = getattr(keyboard.Key, key_name)
        self._pressed = threading.Event()
        self._listener = keyboard.Listener(on_press=self._on_press)
        self._listener.daemon = True
        self._listener.start()

    def _on_press(self, key) -> None:
        if key == self._key:
            self._pressed.set()

    def is_cancel_requested(self) -> bool:
        if self._pressed.is_set():
            self._pressed.clear()
            return True
        return False

    def close(self) -> None:
        if self._listener is not None:
            self._listener.stop()
            self._listener = None
