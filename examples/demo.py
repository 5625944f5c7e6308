#!/usr/bin/env python3
"""
Offline demo: parse a sample open-time page and show what each rule decides.

No screen, keyboard or clipboard access is needed.
"""

import logging
import sys
from pathlib import Path

# Add src to path so we can import tripwatch
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from tripwatch import Action, parse_trips, resolve_action, rules_from_dicts

logging.basicConfig(
    level=logging.WARNING,
    format="%(message)s",
)

SAMPLE_PAGE = """\
Open Time - Base LGW                       Last updated 06:41
Trip  Date  Days Rep   Dep   Arr   Blk  Cr   Layovers
AB12 15JAN 3 0700 0730 1500 0800 0600 LHR CDG
AB13 15JAN 1 05:15 0600 1130 0430 0500
C210 16JAN 4 0900 0945 2010 1020 1100 EDI AMS DUB X
C211 31FEB 2 0800 0830 1400 0530 0600 CDG
ZZ90 17JAN 2 1230 1300 2200 0700 0715 AMS X
Page 1 of 1
"""

SAMPLE_RULES = [
    {
        "name": "Early starts",
        "action": "Alert",
        "filters": [
            {"type": "FieldIs", "field": "Report", "op": "Lt", "value": "0715"},
        ],
    },
    {
        "name": "Premium, not Amsterdam",
        "action": "Pickup",
        "filters": [
            {"type": "IsPrem"},
            {"type": "ExcludeLay", "value": "AMS"},
        ],
    },
    {
        "name": "Long duty days",
        "action": "Alert",
        "filters": [
            {"type": "TimeDiff", "lhs": "Arrive", "rhs": "Report", "op": "GtEq", "value": "0900"},
        ],
    },
]


def main():
    rules = rules_from_dicts(SAMPLE_RULES)
    result = parse_trips(SAMPLE_PAGE)

    print(f"\n{'='*70}")
    print(f"Parsed {len(result.trips)} trips, skipped {len(result.skipped)}")
    print(f"{'='*70}\n")

    for trip in result.trips:
        action = resolve_action(trip, rules)
        matched = [rule.name for rule in rules if rule.evaluate(trip)]
        marker = "" if action is Action.NOTHING else " <=="
        print(f"{trip.id:<6} {trip.date}  {trip.days}d  rep {trip.report}  "
              f"{' '.join(trip.layovers) or '-':<12} {'PREM' if trip.premium else '    '}  "
              f"{action.value:<8}{marker}")
        if matched:
            print(f"       matched: {', '.join(matched)}")

    for skipped in result.skipped:
        print(f"\nSkipped line {skipped.line_number}: {skipped.reason}")

    print()


if __name__ == "__main__":
    main()
