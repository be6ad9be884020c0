"""gc-events - JVM GC log classification and unit normalization."""

from gc_events.models import Diagnostic, EventType, GCEvent, ParseResult
from gc_events.stream import GCLogParser, parse_lines

__version__ = "1.0.0"

__all__ = [
    "Diagnostic",
    "EventType",
    "GCEvent",
    "GCLogParser",
    "ParseResult",
    "parse_lines",
]
