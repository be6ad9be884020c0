"""Reassemble multi-line GC records into single canonical lines.

The JVM frequently spreads one logical event over several physical lines:

- unified logging with ``-Xlog:gc*`` prints a ``GC(n) Pause ...`` opener,
  one line per memory space, a summary line and a cpu line, all tagged
  with the same ``GC(n)`` id
- legacy CMS/serial logging splits ``[GC ... [ParNew`` from its
  ``: 974K->128K(...)`` continuation, with tenuring output in between
- legacy G1 ``-XX:+PrintGCDetails`` puts ``[Eden: ...]`` and ``[Times: ...]``
  on indented lines below the pause

The :class:`Preprocessor` is a push-style state machine: feed raw lines in
order, collect canonical lines as they become complete, and call
:meth:`Preprocessor.finish` at end of input. Canonical lines come out in
the order their first fragment was seen.
"""

from __future__ import annotations

import logging
import re
from collections import deque
from dataclasses import dataclass
from enum import Enum

from gc_events.decorator import parse_decorator
from gc_events.errors import DecoratorError
from gc_events.models import CanonicalLine, Decorator, Diagnostic
from gc_events.patterns import ANY_PAREN, DATESTAMP, SIZE, TIMESTAMP

logger = logging.getLogger(__name__)

# ============================================================
# PATTERNS
# ============================================================

# Lines with no event content in legacy logs
LEGACY_NOISE: re.Pattern[str] = re.compile(
    r"(?:\{Heap before GC|Heap after GC|Heap$|\}$|Desired survivor size|- age +\d+:"
    r"|Application time:|Polling page|[A-Za-z0-9]+ +\[ +\d+ +\d+ +\d+ +\])"
)

# Unified startup and safepoint lines with no event content (matched on the body)
UNIFIED_NOISE: re.Pattern[str] = re.compile(
    r"(?:CPUs:|Heap (?:Region Size|Min Capacity|Initial Capacity|Max Capacity|Address):"
    r"|Heap address:|Heap region size:|Compressed Oops|Compressed class space|Narrow klass"
    r"|Periodic GC|Large Page Support|NUMA Support|Parallel Workers|Concurrent Workers"
    r"|Concurrent Refinement Workers|Pre-touch|Alignments|Initial Capacity|Max Capacity"
    r"|Min Capacity|Heuristics|Initialize mark stack|Mark Closure|Safepoint \"|Entering safepoint"
    r"|Leaving safepoint|Application time:|Heap$)"
)

# GC(n) detail lines that never carry a memory fragment
UNIFIED_DETAIL_NOISE: re.Pattern[str] = re.compile(
    r"(?:Using \d+ (?:of \d+ )?workers|(?:Eden|Survivor|Old|Archive|Humongous) regions:"
    r"|Pre Evacuate|Evacuate Collection Set|Post Evacuate|Merge Heap Roots|Other:|Phase \d"
    r"|Age table|- age|Desired survivor|Heap Summary|Choose Collection Set|Marking Phase"
    r"|Weak Processing|Class Unloading|Reference Processing|Mark Stack Usage|MMU target"
    r"|Cleanup for next mark)"
)

UNIFIED_GC_ID: re.Pattern[str] = re.compile(r"GC\((?P<gc_id>\d+)\) (?P<rest>.*)")

# Opener: pause with no sizes or duration yet
UNIFIED_OPENER: re.Pattern[str] = re.compile(rf"Pause [A-Za-z ]+?(?: {ANY_PAREN})*")

UNIFIED_CPU: re.Pattern[str] = re.compile(r"User=\S+ Sys=\S+ Real=\S+")

UNIFIED_DURATION_TAIL: re.Pattern[str] = re.compile(r"\d+[.,]\d+ms$")

UNIFIED_SPACE: re.Pattern[str] = re.compile(
    rf"(?:DefNew|ParNew|PSYoungGen|ParOldGen|PSOldGen|CMS|Tenured|Metaspace): "
    rf"{SIZE}->{SIZE}\({SIZE}\)"
)

# JDK 16+ metaspace: used(committed)->used(committed) plus class-space detail
UNIFIED_METASPACE_DETAIL: re.Pattern[str] = re.compile(
    rf"Metaspace: (?P<before>{SIZE})\({SIZE}\)->(?P<after>{SIZE})\((?P<committed>{SIZE})\)"
    r"(?: NonClass: .*)?"
)

LEGACY_YOUNG_OPENER: re.Pattern[str] = re.compile(
    rf"(?P<head>.*\[(?:ParNew|DefNew))"
    rf"(?P<concurrent>(?:{DATESTAMP}: )?(?:{TIMESTAMP}: )?\[CMS-concurrent-.*)?"
)

LEGACY_G1_OPENER: re.Pattern[str] = re.compile(
    r"\[GC pause \(.+\) \((?:young|mixed)\)(?: \(initial-mark\))?, \d+[.,]\d+ secs\]"
)


class PendingState(str, Enum):
    COLLECTING = "collecting"
    AWAITING_TIMES = "awaiting_times"
    COMPLETE = "complete"
    ABANDONED = "abandoned"


@dataclass
class PendingEvent:
    """A record still being assembled, or a finished one waiting for output."""

    key: str
    text: str
    line_number: int
    state: PendingState = PendingState.COLLECTING
    opener: str = ""

    def append(self, fragment: str) -> None:
        self.text += fragment

    @property
    def settled(self) -> bool:
        return self.state in (PendingState.COMPLETE, PendingState.ABANDONED)


class Preprocessor:
    """Push-style reassembly of raw log lines into canonical lines."""

    def __init__(self, report_incomplete: bool = True) -> None:
        self.report_incomplete = report_incomplete
        self._queue: deque[PendingEvent] = deque()
        self._open: dict[str, PendingEvent] = {}
        self._incomplete: list[Diagnostic] = []

    # ============================================================
    # PUBLIC API
    # ============================================================

    def feed(self, raw_line: str, line_number: int = 0) -> list[CanonicalLine]:
        """Consume one physical line; return every canonical line now ready."""
        line = raw_line.rstrip("\r\n")
        if not line.strip() or LEGACY_NOISE.match(line):
            return self._drain()

        try:
            decorator, body = parse_decorator(line)
        except DecoratorError:
            # Forwarded whole; the classifier reports it
            decorator, body = None, line

        if decorator is not None and decorator.style == "unified":
            self._feed_unified(line, decorator, body, line_number)
        else:
            self._feed_legacy(line, decorator, body, line_number)
        return self._drain()

    def finish(self) -> list[CanonicalLine]:
        """Flush at end of input: close what can be closed, abandon the rest."""
        for pending in list(self._open.values()):
            if pending.state is PendingState.AWAITING_TIMES:
                self._complete(pending)
            else:
                self._abandon(pending, "end of input before the event was complete")
        return self._drain()

    def take_incomplete(self) -> list[Diagnostic]:
        """Diagnostics for abandoned events since the last call."""
        taken, self._incomplete = self._incomplete, []
        return taken

    # ============================================================
    # BOOKKEEPING
    # ============================================================

    def _emit(self, text: str, line_number: int) -> None:
        self._close_awaiting()
        self._queue.append(PendingEvent("", text, line_number, PendingState.COMPLETE))

    def _open_event(self, key: str, text: str, line_number: int, opener: str = "") -> PendingEvent:
        previous = self._open.get(key)
        if previous is not None:
            if previous.state is PendingState.AWAITING_TIMES:
                self._complete(previous)
            else:
                self._abandon(previous, "superseded by a new event before completion")
        self._close_awaiting()
        pending = PendingEvent(key, text, line_number, opener=opener)
        self._queue.append(pending)
        self._open[key] = pending
        return pending

    def _complete(self, pending: PendingEvent) -> None:
        pending.state = PendingState.COMPLETE
        self._open.pop(pending.key, None)

    def _abandon(self, pending: PendingEvent, reason: str) -> None:
        pending.state = PendingState.ABANDONED
        self._open.pop(pending.key, None)
        logger.debug("Abandoned incomplete event at line %d: %s", pending.line_number, reason)
        if self.report_incomplete:
            self._incomplete.append(
                Diagnostic(kind="incomplete", line=pending.text, line_number=pending.line_number, detail=reason)
            )

    def _close_awaiting(self, keep: str | None = None) -> None:
        """Any kept line other than its cpu line closes an event awaiting times."""
        for pending in list(self._open.values()):
            if pending.state is PendingState.AWAITING_TIMES and pending.key != keep:
                self._complete(pending)

    def _drain(self) -> list[CanonicalLine]:
        ready = []
        while self._queue and self._queue[0].settled:
            pending = self._queue.popleft()
            if pending.state is PendingState.COMPLETE:
                ready.append(CanonicalLine(text=pending.text, line_number=pending.line_number))
        return ready

    # ============================================================
    # UNIFIED LOGGING
    # ============================================================

    def _feed_unified(self, line: str, decorator: Decorator, body: str, line_number: int) -> None:
        if UNIFIED_NOISE.match(body) or (decorator.tags and "exit" in decorator.tags.split(",")):
            return

        match = UNIFIED_GC_ID.fullmatch(body.rstrip())
        if match is None:
            self._emit(line.rstrip(), line_number)
            return

        key = f"gc:{match.group('gc_id')}"
        rest = match.group("rest")
        pending = self._open.get(key)

        if UNIFIED_CPU.fullmatch(rest):
            if pending is not None:
                pending.append(f" {rest}")
                if pending.state is PendingState.AWAITING_TIMES:
                    self._complete(pending)
            return

        if (
            pending is not None
            and pending.state is PendingState.COLLECTING
            and not UNIFIED_OPENER.fullmatch(rest)
        ):
            self._collect_unified(pending, rest, line_number)
            return

        if UNIFIED_DETAIL_NOISE.match(rest):
            return

        if UNIFIED_OPENER.fullmatch(rest):
            self._open_event(key, line.rstrip(), line_number, opener=rest)
        elif UNIFIED_DURATION_TAIL.search(rest):
            # Summary with no opener (-Xlog:gc); a cpu line may still follow
            self._open_event(key, line.rstrip(), line_number).state = PendingState.AWAITING_TIMES
        else:
            self._emit(line.rstrip(), line_number)

    def _collect_unified(self, pending: PendingEvent, rest: str, line_number: int) -> None:
        self._close_awaiting()
        if rest.startswith(pending.opener) and len(rest) > len(pending.opener):
            pending.append(rest[len(pending.opener):])
            pending.state = PendingState.AWAITING_TIMES
        elif UNIFIED_SPACE.fullmatch(rest):
            pending.append(f" {rest}")
        elif metaspace := UNIFIED_METASPACE_DETAIL.fullmatch(rest):
            pending.append(
                f" Metaspace: {metaspace.group('before')}->{metaspace.group('after')}"
                f"({metaspace.group('committed')})"
            )
        else:
            logger.debug("Dropped detail line %d for %s: %s", line_number, pending.key, rest)

    # ============================================================
    # LEGACY LOGGING
    # ============================================================

    def _feed_legacy(self, line: str, decorator: Decorator | None, body: str, line_number: int) -> None:
        young = self._open.get("legacy:young")
        g1 = self._open.get("legacy:g1")

        if line[0] in " \t":
            stripped = line.strip()
            if g1 is not None and stripped.startswith("[Eden: "):
                g1.append(stripped)
            elif g1 is not None and stripped.startswith("[Times: "):
                g1.append(f" {stripped}")
                self._complete(g1)
            else:
                logger.debug("Dropped indented line %d: %s", line_number, stripped)
            return

        if LEGACY_NOISE.match(body):
            return

        if decorator is None and young is not None and line.startswith(": "):
            young.append(line.rstrip())
            self._complete(young)
            return

        if match := LEGACY_YOUNG_OPENER.fullmatch(line.rstrip()):
            self._open_event("legacy:young", match.group("head"), line_number)
            if concurrent := match.group("concurrent"):
                self._emit(concurrent, line_number)
            return

        if LEGACY_G1_OPENER.fullmatch(body.rstrip()):
            self._open_event("legacy:g1", line.rstrip(), line_number)
            return

        self._emit(line.rstrip(), line_number)
