"""Raw lines in, typed events and diagnostics out."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator

from gc_events.catalogue import default_registry
from gc_events.config import ParserSettings
from gc_events.errors import MalformedFieldError
from gc_events.extract import extract_event
from gc_events.models import CanonicalLine, Diagnostic, GCEvent, ParseResult
from gc_events.preprocess import Preprocessor
from gc_events.registry import Registry, Unrecognized

logger = logging.getLogger(__name__)


class GCLogParser:
    """Incremental parser: preprocess, classify, extract.

    Feed physical lines one at a time with :meth:`feed` and call
    :meth:`finish` once at end of input. Problems never stop the stream;
    they accumulate in :attr:`diagnostics`.
    """

    def __init__(self, registry: Registry | None = None, settings: ParserSettings | None = None) -> None:
        self.registry = registry if registry is not None else default_registry()
        self.settings = settings if settings is not None else ParserSettings()
        self.diagnostics: list[Diagnostic] = []
        self._preprocessor = Preprocessor(report_incomplete=self.settings.report_incomplete)
        self._line_number = 0
        self._last_timestamp = self.settings.start_uptime_millis

    def feed(self, raw_line: str) -> list[GCEvent]:
        self._line_number += 1
        lines = self._preprocessor.feed(raw_line, self._line_number)
        self.diagnostics.extend(self._preprocessor.take_incomplete())
        return self._process(lines)

    def finish(self) -> list[GCEvent]:
        lines = self._preprocessor.finish()
        self.diagnostics.extend(self._preprocessor.take_incomplete())
        return self._process(lines)

    def iter_events(self, raw_lines: Iterable[str]) -> Iterator[GCEvent]:
        for raw_line in raw_lines:
            yield from self.feed(raw_line)
        yield from self.finish()

    def parse(self, raw_lines: Iterable[str]) -> ParseResult:
        events = list(self.iter_events(raw_lines))
        return ParseResult(events=events, diagnostics=list(self.diagnostics))

    def _process(self, lines: list[CanonicalLine]) -> list[GCEvent]:
        events = []
        for line in lines:
            event = self._handle(line)
            if event is not None:
                events.append(event)
        return events

    def _handle(self, line: CanonicalLine) -> GCEvent | None:
        outcome = self.registry.classify(line.text)
        if isinstance(outcome, Unrecognized):
            logger.debug("Unrecognized line %d: %s", line.line_number, outcome.reason)
            self.diagnostics.append(
                Diagnostic(kind="unrecognized", line=line.text, line_number=line.line_number,
                           detail=outcome.reason)
            )
            return None

        if self.settings.carry_over_timestamp:
            default_timestamp = self._last_timestamp
        else:
            default_timestamp = self.settings.start_uptime_millis

        try:
            event = extract_event(outcome, default_timestamp_millis=default_timestamp)
        except MalformedFieldError as e:
            logger.warning("Malformed %s at line %d: %s", outcome.entry.name, line.line_number, e)
            self.diagnostics.append(
                Diagnostic(kind="malformed", line=line.text, line_number=line.line_number, detail=str(e))
            )
            return None

        self._last_timestamp = event.timestamp_millis
        return event


def parse_lines(
    raw_lines: Iterable[str],
    registry: Registry | None = None,
    settings: ParserSettings | None = None,
) -> ParseResult:
    """Parse a complete log in one call."""
    return GCLogParser(registry=registry, settings=settings).parse(raw_lines)
