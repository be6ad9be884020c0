"""Ordered pattern registry and first-match classifier.

A registry is an ordered sequence of :class:`PatternEntry` values. Each
entry pairs a full-line pattern with the event type it produces and the
recipe of fields its named groups carry. Classification walks the entries in
order; the first entry whose guard substring is present and whose pattern
matches the whole line body wins.

Ambiguity is rejected up front: building a :class:`Registry` raises
:class:`RegistryConflictError` when two entries could claim the same line
and nothing says which one is tried first.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum

from gc_events.decorator import parse_decorator
from gc_events.errors import DecoratorError, RegistryConflictError
from gc_events.models import Decorator, EventType

logger = logging.getLogger(__name__)


class FieldKind(str, Enum):
    """How a captured group is normalized."""

    KILOBYTES = "kilobytes"
    MICROS = "micros"
    CENTIS = "centis"
    INTEGER = "integer"
    TEXT = "text"


def infer_field_kind(name: str) -> FieldKind:
    if name.endswith("_kb"):
        return FieldKind.KILOBYTES
    if name.endswith("_micros"):
        return FieldKind.MICROS
    if name.endswith("_centis"):
        return FieldKind.CENTIS
    if name == "gc_id":
        return FieldKind.INTEGER
    return FieldKind.TEXT


@dataclass(frozen=True)
class FieldSpec:
    name: str
    kind: FieldKind


@dataclass(frozen=True)
class PatternEntry:
    """One catalogue entry.

    Attributes:
        name: Unique entry name
        event_type: Event type produced on a match
        guard: Substring every matching body contains; checked before the regex
        pattern: Compiled pattern, matched against the whole body
        fields: Named groups in pattern order, with their normalization
        precedes: Names of entries this one must be tried before
        examples: Sample bodies this entry must classify
    """

    name: str
    event_type: EventType
    guard: str
    pattern: re.Pattern[str]
    fields: tuple[FieldSpec, ...]
    precedes: tuple[str, ...] = ()
    examples: tuple[str, ...] = ()

    @classmethod
    def build(
        cls,
        name: str,
        event_type: EventType,
        guard: str,
        regex: str,
        *,
        precedes: Iterable[str] = (),
        examples: Iterable[str] = (),
    ) -> PatternEntry:
        """Compile `regex` and derive the field recipe from its named groups."""
        pattern = re.compile(regex)
        groups = sorted(pattern.groupindex.items(), key=lambda item: item[1])
        return cls(
            name=name,
            event_type=event_type,
            guard=guard,
            pattern=pattern,
            fields=tuple(FieldSpec(group, infer_field_kind(group)) for group, _ in groups),
            precedes=tuple(precedes),
            examples=tuple(examples),
        )

    @property
    def layout(self) -> frozenset[str]:
        return frozenset(field_spec.name for field_spec in self.fields)

    def match(self, body: str) -> re.Match[str] | None:
        if self.guard not in body:
            return None
        return self.pattern.fullmatch(body)


@dataclass(frozen=True)
class Classification:
    """A line claimed by a registry entry."""

    entry: PatternEntry
    line: str
    decorator: Decorator | None
    captures: dict[str, str] = field(default_factory=dict)

    @property
    def event_type(self) -> EventType:
        return self.entry.event_type


@dataclass(frozen=True)
class Unrecognized:
    """A line no registry entry claimed."""

    line: str
    reason: str = "no pattern matched"


# ============================================================
# REGISTRY
# ============================================================


class Registry:
    """Validated, ordered collection of pattern entries."""

    def __init__(self, entries: Iterable[PatternEntry]) -> None:
        self._entries: tuple[PatternEntry, ...] = tuple(entries)
        self._positions: dict[str, int] = {}
        self._validate()

    def __iter__(self) -> Iterator[PatternEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> tuple[PatternEntry, ...]:
        return self._entries

    def get(self, name: str) -> PatternEntry:
        return self._entries[self._positions[name]]

    def _ordered(self, first: PatternEntry, second: PatternEntry) -> bool:
        return second.name in first.precedes or first.name in second.precedes

    def _validate(self) -> None:
        for position, entry in enumerate(self._entries):
            if entry.name in self._positions:
                raise RegistryConflictError(f"Duplicate entry name: {entry.name}")
            self._positions[entry.name] = position

        for entry in self._entries:
            for later in entry.precedes:
                if later not in self._positions:
                    raise RegistryConflictError(
                        f"Entry '{entry.name}' precedes unknown entry '{later}'"
                    )
                if self._positions[later] < self._positions[entry.name]:
                    raise RegistryConflictError(
                        f"Entry '{entry.name}' must come before '{later}'"
                    )

        for i, first in enumerate(self._entries):
            for second in self._entries[i + 1:]:
                if self._ordered(first, second):
                    continue
                if first.guard == second.guard and first.layout != second.layout:
                    raise RegistryConflictError(
                        f"Entries '{first.name}' and '{second.name}' share guard "
                        f"{first.guard!r} with different fields and no declared order"
                    )
                for owner, other in ((first, second), (second, first)):
                    for example in owner.examples:
                        if other.match(example):
                            raise RegistryConflictError(
                                f"Entries '{owner.name}' and '{other.name}' both match "
                                f"{example!r} with no declared order"
                            )

    def validate_examples(self) -> list[str]:
        """Classify every entry's examples; return a problem per misclassified one."""
        problems = []
        for entry in self._entries:
            for example in entry.examples:
                claimed = self.match_body(example)
                if claimed is None:
                    problems.append(f"{entry.name}: no entry matches {example!r}")
                elif claimed[0] is not entry:
                    problems.append(f"{entry.name}: {example!r} claimed by {claimed[0].name}")
        return problems

    def match_body(self, body: str) -> tuple[PatternEntry, re.Match[str]] | None:
        """First entry whose guard and pattern both match `body`."""
        body = body.rstrip()
        for entry in self._entries:
            if match := entry.match(body):
                return entry, match
        return None

    def classify(self, line: str) -> Classification | Unrecognized:
        """Decorator-aware classification of one canonical line."""
        try:
            decorator, body = parse_decorator(line)
        except DecoratorError as exc:
            return Unrecognized(line=line, reason=str(exc))

        claimed = self.match_body(body)
        if claimed is None:
            return Unrecognized(line=line)
        entry, match = claimed
        captures = {name: value for name, value in match.groupdict().items() if value is not None}
        logger.debug("Classified line as %s via %s", entry.event_type.value, entry.name)
        return Classification(entry=entry, line=line, decorator=decorator, captures=captures)
