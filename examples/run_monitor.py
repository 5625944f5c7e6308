#!/usr/bin/env python3
"""
Console front end for the open-time monitor.

Usage:
    python examples/run_monitor.py RULES.json ALARM.wav

Starts monitoring immediately. Press Esc to stop; Ctrl+C to quit.
"""

import json
import logging
import sys
import time
from pathlib import Path

# Add src to path so we can import tripwatch
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from tripwatch import MonitorConfig, MonitorController, MonitorState, rules_from_dicts
from tripwatch.desktop import (
    EscapeKeyCancel,
    MssScreen,
    PyAutoGuiInput,
    PyperclipClipboard,
    SoundDeviceAlarm,
)
from tripwatch.exceptions import RuleConfigError
from tripwatch.messages import Copied, CopyScreen, RecordSkipped, Stopped, TripFound, Waiting

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)

# How often the console polls the worker for status events
POLL_INTERVAL = 0.1


def load_rules(path: str):
    with open(path, "r", encoding="utf-8") as f:
        return rules_from_dicts(json.load(f))


def describe_event(event) -> str:
    if isinstance(event, Waiting):
        return f"Refreshed page, next refresh in {event.seconds:.0f}s"
    if isinstance(event, CopyScreen):
        return "Trip list changed, copying page"
    if isinstance(event, Copied):
        return f"Copied {len(event.text.splitlines())} lines"
    if isinstance(event, RecordSkipped):
        return f"Skipped malformed trip ({event.reason}): {event.line}"
    if isinstance(event, TripFound):
        trip = event.trip
        return (
            f"*** {event.action.value.upper()}: trip {trip.id} on {trip.date}, "
            f"{trip.days} day(s), report {trip.report}, layovers {' '.join(trip.layovers) or '-'}"
        )
    if isinstance(event, Stopped):
        return f"Monitor stopped ({event.reason})" if event.reason else "Monitor stopped"
    return repr(event)


def main():
    """Main entry point."""
    if len(sys.argv) != 3:
        print(__doc__)
        sys.exit(1)

    try:
        rules = load_rules(sys.argv[1])
    except (OSError, ValueError, RuleConfigError) as e:
        print(f"Could not load rules: {e}")
        sys.exit(1)

    for rule in rules:
        state = "on" if rule.enabled else "off"
        filters = "; ".join(f.describe() for f in rule.filters) or "every trip"
        print(f"  [{state}] {rule.name}: {filters} -> {rule.action.value}")

    controller = MonitorController.create(
        MonitorConfig(),
        MssScreen(),
        PyAutoGuiInput(),
        PyperclipClipboard(),
        SoundDeviceAlarm(sys.argv[2]),
        EscapeKeyCancel(),
    )

    print("\nSwitch to the open-time page; monitoring starts in 3 seconds...")
    time.sleep(3)
    controller.start(rules)

    try:
        while True:
            for event in controller.poll_events():
                print(describe_event(event))
            if controller.state is MonitorState.STOPPED:
                input("\nStopped. Press Enter to start again (Ctrl+C to quit)... ")
                time.sleep(3)
                controller.start(rules)
            time.sleep(POLL_INTERVAL)
    except KeyboardInterrupt:
        print("\n\nGoodbye!")
    finally:
        controller.shutdown()
        logger.info(f"Ran for {controller.uptime:.0f}s with {controller.refresh_count} refreshes")


if __name__ == "__main__":
    main()
