"""Extract trip records from text copied off the open-time page."""

import logging
import re
from dataclasses import dataclass, field
from typing import List

from .exceptions import TripParseError
from .models import DEFAULT_YEAR, Date, Time, Trip

logger = logging.getLogger(__name__)

# One trip per line:
#   ID  DATE  DAYS  REPORT  DEPART  ARRIVE  BLOCK  CREDIT  LAYOVERS...  [X]
TRIP_LINE = re.compile(
    r"^(?P<trip_id>\w+)\s+"
    r"(?P<date>\w+)\s+"
    r"(?P<days>\d+)\s+"
    r"(?P<report>\S+)\s+"
    r"(?P<depart>\S+)\s+"
    r"(?P<arrive>\S+)\s+"
    r"(?P<block>\d+)\s+"
    r"(?P<credit>\d+)\s*"
    r"(?P<layovers>(?:\S{3}(?:\s+|$))*)"
    r"\s*(?P<premium>X?)\s*$"
)

# Start of a trip line (id, DDMON date, day count); used to report lines that
# begin like a trip but whose remaining columns do not fit the layout
TRIP_PREFIX = re.compile(r"^\w+\s+[0-9]{2}[A-Za-z]{3}\s+\d+\s")


@dataclass(frozen=True)
class SkippedRecord:
    """A line that looked like a trip but had a field that would not parse."""
    line_number: int
    line: str
    reason: str


@dataclass
class ParseResult:
    trips: List[Trip] = field(default_factory=list)
    skipped: List[SkippedRecord] = field(default_factory=list)


def parse_trip_line(match: "re.Match", year: int = DEFAULT_YEAR) -> Trip:
    """
    Convert one matched line into a Trip.

    Raises:
        TripParseError: If any captured field fails its own parser.
    """
    line = match.group(0)
    try:
        return Trip(
            id=match.group("trip_id"),
            date=Date.parse(match.group("date"), year=year),
            days=int(match.group("days")),
            report=Time.parse(match.group("report")),
            depart=Time.parse(match.group("depart")),
            arrive=Time.parse(match.group("arrive")),
            block=Time.parse(match.group("block")),
            credit=Time.parse(match.group("credit")),
            layovers=tuple(match.group("layovers").split()),
            premium=bool(match.group("premium")),
        )
    except ValueError as e:
        raise TripParseError(line.strip(), str(e)) from e


def parse_trips(text: str, year: int = DEFAULT_YEAR, strict: bool = False) -> ParseResult:
    """
    Parse every trip line in a copied page.

    Lines that do not look like trips (headers, menus, footers) are ignored.
    A trip line with a malformed field, or one that starts like a trip but
    does not fit the column layout, is dropped and recorded in
    ``ParseResult.skipped`` so the rest of the page still gets evaluated.

    Args:
        text: Raw clipboard text; may contain any line endings.
        year: Year attached to every trip date.
        strict: Raise on the first malformed trip line instead of skipping it.

    Returns:
        ParseResult with trips in page order.

    Raises:
        TripParseError: Only when ``strict`` is True.
    """
    result = ParseResult()
    for line_number, line in enumerate(text.splitlines(), start=1):
        match = TRIP_LINE.match(line)
        if not match and not TRIP_PREFIX.match(line):
            continue
        try:
            if not match:
                raise TripParseError(line.strip(), "unrecognized column layout")
            result.trips.append(parse_trip_line(match, year=year))
        except TripParseError as e:
            if strict:
                raise
            logger.warning(f"Skipping line {line_number}: {e}")
            result.skipped.append(SkippedRecord(line_number, e.line, e.reason))

    logger.debug(f"Parsed {len(result.trips)} trips, skipped {len(result.skipped)}")
    return result
