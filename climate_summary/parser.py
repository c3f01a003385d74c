"""
TDV record parser

Converts one raw tab-delimited line into a validated Observation.
Rejections are signalled with RecordRejected subclasses and never abort
processing of the surrounding source.
"""
from typing import Optional

from pydantic import ValidationError

from .exceptions import LineTooLong, MalformedLine, OutOfRangeValue
from .models import Observation, RANGE_CHECKED_FIELDS, TDV_FIELDS


DEFAULT_MAX_LINE_LENGTH = 97
FIELD_SEPARATOR = "\t"

# Pydantic error types raised by Field(ge=..., le=...) bounds
_BOUND_ERROR_TYPES = {"greater_than_equal", "less_than_equal"}


def parse_line(line: str, max_line_length: int = DEFAULT_MAX_LINE_LENGTH) -> Observation:
    """
    Parse a single TDV line
    
    Args:
        line: Raw line, with or without its trailing newline
        max_line_length: Longest accepted line, terminator excluded
    
    Returns:
        Validated Observation
    
    Raises:
        LineTooLong: Line exceeds max_line_length
        MalformedLine: Wrong field count or unparseable field
        OutOfRangeValue: Humidity, cloud cover or temperature out of domain
    """
    content = line.rstrip("\r\n")
    if len(content) > max_line_length:
        raise LineTooLong(
            f"Line length {len(content)} exceeds maximum {max_line_length}",
            line=content[:max_line_length],
        )
    
    fields = content.split(FIELD_SEPARATOR)
    if len(fields) != len(TDV_FIELDS):
        raise MalformedLine(
            f"Expected {len(TDV_FIELDS)} fields, found {len(fields)}",
            line=content,
        )
    
    values = dict(zip(TDV_FIELDS, (field.strip() for field in fields)))
    
    try:
        return Observation(**values)
    except ValidationError as e:
        raise _classify(e, content) from e


def _classify(error: ValidationError, content: str):
    """Map pydantic validation errors onto the rejection taxonomy"""
    details = error.errors()
    
    # Shape problems take precedence over range problems
    out_of_range = [
        d for d in details
        if d["type"] in _BOUND_ERROR_TYPES and d["loc"] and d["loc"][0] in RANGE_CHECKED_FIELDS
    ]
    if len(out_of_range) == len(details):
        fields = ", ".join(str(d["loc"][0]) for d in out_of_range)
        return OutOfRangeValue(f"Value out of range: {fields}", line=content)
    
    malformed = [d for d in details if d not in out_of_range]
    fields = ", ".join(
        f"{d['loc'][0] if d['loc'] else '?'} ({d['type']})" for d in malformed
    )
    return MalformedLine(f"Unparseable field: {fields}", line=content)


class RecordParser:
    """Line parser bound to a configured maximum line length"""
    
    def __init__(self, max_line_length: int = DEFAULT_MAX_LINE_LENGTH):
        """
        Initialize parser
        
        Args:
            max_line_length: Longest accepted line, terminator excluded
        """
        if max_line_length < 1:
            raise ValueError(f"max_line_length must be positive, got {max_line_length}")
        self.max_line_length = max_line_length
    
    def parse(self, line: str) -> Observation:
        """Parse a line, raising RecordRejected on failure"""
        return parse_line(line, self.max_line_length)
    
    def try_parse(self, line: str) -> Optional[Observation]:
        """Parse a line, returning None instead of raising on rejection"""
        try:
            return self.parse(line)
        except (LineTooLong, MalformedLine, OutOfRangeValue):
            return None


def create_parser(max_line_length: int = DEFAULT_MAX_LINE_LENGTH) -> RecordParser:
    """
    Factory function to create a parser instance
    
    Args:
        max_line_length: Longest accepted line, terminator excluded
    
    Returns:
        RecordParser instance
    """
    return RecordParser(max_line_length)
