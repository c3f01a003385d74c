"""Exception hierarchy for climate summary."""


class ClimateSummaryError(Exception):
    """Base class for all climate summary errors."""


class RecordRejected(ClimateSummaryError, ValueError):
    """A single input line could not be turned into an observation."""

    reason = "rejected"

    def __init__(self, message: str, line: str = ""):
        super().__init__(message)
        self.line = line


class MalformedLine(RecordRejected):
    """Wrong field count, empty field, or non-numeric numeric field."""

    reason = "malformed"


class OutOfRangeValue(RecordRejected):
    """Humidity, cloud cover, or temperature outside its valid domain."""

    reason = "out_of_range"


class LineTooLong(RecordRejected):
    """Line exceeds the configured maximum length."""

    reason = "too_long"


class SourceUnreadable(ClimateSummaryError):
    """An input path could not be opened."""

    def __init__(self, path: str, error: OSError):
        super().__init__(f"Unable to open file: {path} ({error})")
        self.path = path
        self.error = error


class CapacityExceeded(ClimateSummaryError):
    """More distinct region codes than the table is allowed to hold."""

    def __init__(self, code: str, capacity: int):
        super().__init__(
            f"No space for new region {code!r}: capacity {capacity} reached"
        )
        self.code = code
        self.capacity = capacity


class NoUsableInput(ClimateSummaryError):
    """No source contributed any record."""
