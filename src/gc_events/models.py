"""Data model: event types, typed events, decorators and diagnostics."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Literal, NamedTuple, TypeAlias

from pydantic import BaseModel, ConfigDict, Field

from gc_events.units import CentisValue, KilobytesValue, MicrosValue
from gc_events.units import parallelism as compute_parallelism

# ============================================================
# TYPE ALIASES
# ============================================================

GCKind: TypeAlias = Literal[
    "Young",
    "Full",
    "Mixed",
    "Remark",
    "Cleanup",
    "Concurrent",
    "Header",
    "Banner",
    "Safepoint",
]
CollectorFamily: TypeAlias = Literal["serial", "parallel", "cms", "g1", "shenandoah", "z", "unknown"]
DecoratorStyle: TypeAlias = Literal["unified", "legacy"]
DiagnosticKind: TypeAlias = Literal["unrecognized", "malformed", "incomplete"]

# ============================================================
# EVENT TYPES
# ============================================================


class EventType(str, Enum):
    """Every event type the catalogue can produce."""

    HEADER_COMMAND_LINE_FLAGS = "HEADER_COMMAND_LINE_FLAGS"
    HEADER_VERSION = "HEADER_VERSION"
    HEADER_MEMORY = "HEADER_MEMORY"

    USING_SERIAL = "USING_SERIAL"
    USING_PARALLEL = "USING_PARALLEL"
    USING_CMS = "USING_CMS"
    USING_G1 = "USING_G1"
    USING_SHENANDOAH = "USING_SHENANDOAH"
    USING_Z = "USING_Z"

    UNIFIED_SERIAL_NEW = "UNIFIED_SERIAL_NEW"
    UNIFIED_PAR_NEW = "UNIFIED_PAR_NEW"
    UNIFIED_PARALLEL_SCAVENGE = "UNIFIED_PARALLEL_SCAVENGE"
    UNIFIED_SERIAL_OLD = "UNIFIED_SERIAL_OLD"
    UNIFIED_PARALLEL_COMPACTING_OLD = "UNIFIED_PARALLEL_COMPACTING_OLD"
    UNIFIED_YOUNG = "UNIFIED_YOUNG"
    UNIFIED_OLD = "UNIFIED_OLD"
    UNIFIED_G1_YOUNG_PAUSE = "UNIFIED_G1_YOUNG_PAUSE"
    UNIFIED_G1_MIXED_PAUSE = "UNIFIED_G1_MIXED_PAUSE"
    UNIFIED_REMARK = "UNIFIED_REMARK"
    UNIFIED_CLEANUP = "UNIFIED_CLEANUP"
    UNIFIED_CONCURRENT = "UNIFIED_CONCURRENT"
    SHENANDOAH_INIT_MARK = "SHENANDOAH_INIT_MARK"
    SHENANDOAH_FINAL_MARK = "SHENANDOAH_FINAL_MARK"
    SHENANDOAH_UPDATE_REFS = "SHENANDOAH_UPDATE_REFS"

    SERIAL_NEW = "SERIAL_NEW"
    PAR_NEW = "PAR_NEW"
    PARALLEL_SCAVENGE = "PARALLEL_SCAVENGE"
    PARALLEL_COMPACTING_OLD = "PARALLEL_COMPACTING_OLD"
    PARALLEL_SERIAL_OLD = "PARALLEL_SERIAL_OLD"
    CMS_SERIAL_OLD = "CMS_SERIAL_OLD"
    CMS_INITIAL_MARK = "CMS_INITIAL_MARK"
    CMS_REMARK = "CMS_REMARK"
    CMS_CONCURRENT = "CMS_CONCURRENT"
    G1_YOUNG_PAUSE = "G1_YOUNG_PAUSE"
    G1_MIXED_PAUSE = "G1_MIXED_PAUSE"
    VERBOSE_GC_YOUNG = "VERBOSE_GC_YOUNG"
    VERBOSE_GC_OLD = "VERBOSE_GC_OLD"
    APPLICATION_STOPPED_TIME = "APPLICATION_STOPPED_TIME"


class EventTraits(NamedTuple):
    kind: GCKind
    collector: CollectorFamily
    blocking: bool


_E = EventType

EVENT_TRAITS: dict[EventType, EventTraits] = {
    _E.HEADER_COMMAND_LINE_FLAGS: EventTraits("Header", "unknown", False),
    _E.HEADER_VERSION: EventTraits("Header", "unknown", False),
    _E.HEADER_MEMORY: EventTraits("Header", "unknown", False),
    _E.USING_SERIAL: EventTraits("Banner", "serial", False),
    _E.USING_PARALLEL: EventTraits("Banner", "parallel", False),
    _E.USING_CMS: EventTraits("Banner", "cms", False),
    _E.USING_G1: EventTraits("Banner", "g1", False),
    _E.USING_SHENANDOAH: EventTraits("Banner", "shenandoah", False),
    _E.USING_Z: EventTraits("Banner", "z", False),
    _E.UNIFIED_SERIAL_NEW: EventTraits("Young", "serial", True),
    _E.UNIFIED_PAR_NEW: EventTraits("Young", "cms", True),
    _E.UNIFIED_PARALLEL_SCAVENGE: EventTraits("Young", "parallel", True),
    _E.UNIFIED_SERIAL_OLD: EventTraits("Full", "serial", True),
    _E.UNIFIED_PARALLEL_COMPACTING_OLD: EventTraits("Full", "parallel", True),
    _E.UNIFIED_YOUNG: EventTraits("Young", "unknown", True),
    _E.UNIFIED_OLD: EventTraits("Full", "unknown", True),
    _E.UNIFIED_G1_YOUNG_PAUSE: EventTraits("Young", "g1", True),
    _E.UNIFIED_G1_MIXED_PAUSE: EventTraits("Mixed", "g1", True),
    _E.UNIFIED_REMARK: EventTraits("Remark", "unknown", True),
    _E.UNIFIED_CLEANUP: EventTraits("Cleanup", "g1", True),
    _E.UNIFIED_CONCURRENT: EventTraits("Concurrent", "unknown", False),
    _E.SHENANDOAH_INIT_MARK: EventTraits("Remark", "shenandoah", True),
    _E.SHENANDOAH_FINAL_MARK: EventTraits("Remark", "shenandoah", True),
    _E.SHENANDOAH_UPDATE_REFS: EventTraits("Remark", "shenandoah", True),
    _E.SERIAL_NEW: EventTraits("Young", "serial", True),
    _E.PAR_NEW: EventTraits("Young", "cms", True),
    _E.PARALLEL_SCAVENGE: EventTraits("Young", "parallel", True),
    _E.PARALLEL_COMPACTING_OLD: EventTraits("Full", "parallel", True),
    _E.PARALLEL_SERIAL_OLD: EventTraits("Full", "parallel", True),
    _E.CMS_SERIAL_OLD: EventTraits("Full", "cms", True),
    _E.CMS_INITIAL_MARK: EventTraits("Remark", "cms", True),
    _E.CMS_REMARK: EventTraits("Remark", "cms", True),
    _E.CMS_CONCURRENT: EventTraits("Concurrent", "cms", False),
    _E.G1_YOUNG_PAUSE: EventTraits("Young", "g1", True),
    _E.G1_MIXED_PAUSE: EventTraits("Mixed", "g1", True),
    _E.VERBOSE_GC_YOUNG: EventTraits("Young", "unknown", True),
    _E.VERBOSE_GC_OLD: EventTraits("Full", "unknown", True),
    _E.APPLICATION_STOPPED_TIME: EventTraits("Safepoint", "unknown", False),
}


# ============================================================
# PYDANTIC MODELS
# ============================================================


class Decorator(BaseModel):
    """Time prefix of a log line.

    `uptime_millis` is authoritative for ordering; `datestamp` is only kept
    for display.
    """

    model_config = ConfigDict(frozen=True)

    style: DecoratorStyle
    datestamp: datetime | None = None
    uptime_millis: int | None = None
    pid: int | None = None
    tid: int | None = None
    level: str | None = None
    tags: str | None = None


class CanonicalLine(BaseModel):
    """One logical log record after reassembly."""

    model_config = ConfigDict(frozen=True)

    text: str
    line_number: int = 0


MEMORY_AREAS: tuple[str, ...] = ("young", "old", "perm", "heap")
MEMORY_FIELDS: tuple[str, ...] = tuple(
    f"{area}_{suffix}_kb"
    for area in MEMORY_AREAS
    for suffix in ("occupancy_init", "occupancy_end", "space")
)
TIMES_FIELDS: tuple[str, ...] = ("time_user_centis", "time_sys_centis", "time_real_centis")


class GCEvent(BaseModel):
    """Normalized GC event.

    Sizes are kilobytes, the event's own duration is microseconds and
    thread times are centiseconds. Capability groups (young, old, perm,
    heap, trigger, times) are optional; use the `has_*` checks.
    """

    model_config = ConfigDict(frozen=True)

    event_type: EventType
    log_entry: str
    timestamp_millis: int
    datestamp: datetime | None = None
    gc_id: int | None = None
    duration_micros: MicrosValue = 0
    trigger: str | None = None

    young_occupancy_init_kb: KilobytesValue | None = None
    young_occupancy_end_kb: KilobytesValue | None = None
    young_space_kb: KilobytesValue | None = None

    old_occupancy_init_kb: KilobytesValue | None = None
    old_occupancy_end_kb: KilobytesValue | None = None
    old_space_kb: KilobytesValue | None = None

    # Permanent generation or metaspace
    perm_occupancy_init_kb: KilobytesValue | None = None
    perm_occupancy_end_kb: KilobytesValue | None = None
    perm_space_kb: KilobytesValue | None = None

    heap_occupancy_init_kb: KilobytesValue | None = None
    heap_occupancy_end_kb: KilobytesValue | None = None
    heap_space_kb: KilobytesValue | None = None

    time_user_centis: CentisValue | None = None
    time_sys_centis: CentisValue | None = None
    time_real_centis: CentisValue | None = None

    # Header values with no dedicated field (jvm_options, jvm_version, ...)
    attributes: dict[str, str | int] = Field(default_factory=dict)

    @classmethod
    def from_values(
        cls,
        event_type: EventType,
        log_entry: str,
        timestamp_millis: int,
        duration_micros: int = 0,
        **fields: Any,
    ) -> GCEvent:
        """Build a synthetic event directly from already-normalized values."""
        return cls(
            event_type=event_type,
            log_entry=log_entry,
            timestamp_millis=timestamp_millis,
            duration_micros=duration_micros,
            **fields,
        )

    @property
    def traits(self) -> EventTraits:
        return EVENT_TRAITS[self.event_type]

    @property
    def blocking(self) -> bool:
        return self.traits.blocking

    @property
    def has_young_data(self) -> bool:
        return self.young_occupancy_init_kb is not None or self.young_space_kb is not None

    @property
    def has_old_data(self) -> bool:
        return self.old_occupancy_init_kb is not None or self.old_space_kb is not None

    @property
    def has_perm_data(self) -> bool:
        return self.perm_occupancy_init_kb is not None or self.perm_space_kb is not None

    @property
    def has_heap_data(self) -> bool:
        return self.heap_occupancy_init_kb is not None or self.heap_space_kb is not None

    @property
    def has_trigger(self) -> bool:
        return self.trigger is not None

    @property
    def has_times_data(self) -> bool:
        return self.time_user_centis is not None and self.time_real_centis is not None

    @property
    def parallelism(self) -> int | None:
        """(user + sys) / real as a percentage, or None without times data."""
        if not self.has_times_data:
            return None
        return compute_parallelism(
            self.time_user_centis or 0, self.time_sys_centis or 0, self.time_real_centis or 0
        )

    @property
    def field_map(self) -> dict[str, Any]:
        """Flat map of every populated normalized field."""
        values: dict[str, Any] = {"duration_micros": self.duration_micros}
        if self.trigger is not None:
            values["trigger"] = self.trigger
        if self.gc_id is not None:
            values["gc_id"] = self.gc_id
        for name in MEMORY_FIELDS + TIMES_FIELDS:
            value = getattr(self, name)
            if value is not None:
                values[name] = value
        values.update(self.attributes)
        return values


class Diagnostic(BaseModel):
    """Non-fatal problem reported alongside the event stream."""

    model_config = ConfigDict(frozen=True)

    kind: DiagnosticKind
    line: str
    line_number: int = 0
    detail: str | None = None


class ParseResult(BaseModel):
    """Typed events plus the parallel diagnostic stream."""

    events: list[GCEvent] = Field(default_factory=list)
    diagnostics: list[Diagnostic] = Field(default_factory=list)

    @property
    def unrecognized(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.kind == "unrecognized"]

    @property
    def malformed(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.kind == "malformed"]

    @property
    def incomplete(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.kind == "incomplete"]
