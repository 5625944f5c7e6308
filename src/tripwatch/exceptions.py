"""Library exceptions."""


class TripWatchError(Exception):
    """Base exception for the library."""


class TimeParseError(TripWatchError, ValueError):
    """Raised when a clock token cannot be parsed."""


class DateParseError(TripWatchError, ValueError):
    """Raised when a date token cannot be parsed."""


class TripParseError(TripWatchError):
    """Raised when a scraped trip line has a malformed field."""

    def __init__(self, line: str, reason: str):
        super().__init__(f"{reason}: {line!r}")
        self.line = line
        self.reason = reason


class RuleConfigError(TripWatchError):
    """Raised when a rule or filter definition is invalid."""


class ClipboardError(TripWatchError):
    """Raised when scraped text cannot be read from the clipboard."""
