"""Thin consumer: aggregate a typed event stream into a summary."""

from __future__ import annotations

import re
from collections import Counter
from collections.abc import Iterable
from statistics import mean
from typing import Any

from pydantic import BaseModel, Field

from gc_events.config import SummaryThresholds
from gc_events.models import CollectorFamily, Diagnostic, EventType, GCEvent
from gc_events.units import parse_jvm_size_to_bytes

# ============================================================
# PYDANTIC MODELS
# ============================================================


class JVMHeapConfig(BaseModel):
    """JVM heap and GC tuning configuration extracted from CommandLine flags."""

    # Heap sizing
    initial_heap_size_bytes: int | None = None  # -Xms or -XX:InitialHeapSize
    max_heap_size_bytes: int | None = None  # -Xmx or -XX:MaxHeapSize
    new_size_bytes: int | None = None  # -Xmn or -XX:NewSize
    max_new_size_bytes: int | None = None  # -XX:MaxNewSize
    old_size_bytes: int | None = None  # -XX:OldSize
    new_ratio: int | None = None  # -XX:NewRatio
    survivor_ratio: int | None = None  # -XX:SurvivorRatio
    max_tenuring_threshold: int | None = None  # -XX:MaxTenuringThreshold

    # Metaspace
    metaspace_size_bytes: int | None = None  # -XX:MetaspaceSize
    max_metaspace_size_bytes: int | None = None  # -XX:MaxMetaspaceSize

    # GC Threading
    parallel_gc_threads: int | None = None  # -XX:ParallelGCThreads
    conc_gc_threads: int | None = None  # -XX:ConcGCThreads

    # GC Behavior Tuning
    max_gc_pause_millis: int | None = None  # -XX:MaxGCPauseMillis
    g1_heap_region_size_bytes: int | None = None  # -XX:G1HeapRegionSize
    initiating_heap_occupancy_percent: int | None = None  # -XX:InitiatingHeapOccupancyPercent
    cms_initiating_occupancy_fraction: int | None = None  # -XX:CMSInitiatingOccupancyFraction
    use_cms_initiating_occupancy_only: bool | None = None  # -XX:+UseCMSInitiatingOccupancyOnly
    always_pre_touch: bool | None = None  # -XX:+AlwaysPreTouch

    def format_size(self, size_bytes: int | None) -> str:
        """Format bytes to human-readable size."""
        if size_bytes is None:
            return "Not set"

        if size_bytes >= 1024**3:
            return f"{size_bytes / (1024**3):.1f}G"
        elif size_bytes >= 1024**2:
            return f"{size_bytes / (1024**2):.1f}M"
        elif size_bytes >= 1024:
            return f"{size_bytes / 1024:.1f}K"
        return f"{size_bytes}B"


class GCSummary(BaseModel):
    """Aggregate view of one parsed log."""

    total_event_count: int
    blocking_event_count: int
    event_counts: dict[str, int] = Field(default_factory=dict)
    kind_counts: dict[str, int] = Field(default_factory=dict)
    collector: CollectorFamily = "unknown"

    # Time window
    first_timestamp_millis: int | None = None
    last_timestamp_millis: int | None = None
    runtime_millis: int = 0

    # Pauses
    total_pause_micros: int = 0
    max_pause_micros: int = 0
    p50_pause_micros: float = 0.0
    p95_pause_micros: float = 0.0
    p99_pause_micros: float = 0.0
    throughput_pct: float = 100.0

    # Parallelism
    max_parallelism: int | None = None
    avg_parallelism: float | None = None
    low_parallelism_count: int = 0
    inverted_parallelism_count: int = 0

    # Parsing coverage
    unrecognized_count: int = 0
    malformed_count: int = 0
    incomplete_count: int = 0

    # JVM
    jvm_version: str | None = None
    jvm_options: str | None = None
    jvm_heap_config: JVMHeapConfig | None = None

    warnings: list[str] = Field(default_factory=list)


# ============================================================
# HELPERS
# ============================================================


def percentile_sorted(sorted_data: list[float], pct: float) -> float:
    """Calculate percentile from a pre-sorted list."""
    if not sorted_data:
        return 0.0
    k = (len(sorted_data) - 1) * (pct / 100)
    f = int(k)
    c = k - f
    if f + 1 < len(sorted_data):
        return sorted_data[f] + c * (sorted_data[f + 1] - sorted_data[f])
    return sorted_data[f]


BYTE_FLAGS: dict[str, re.Pattern[str]] = {
    "initial_heap_size_bytes": re.compile(r"-XX:InitialHeapSize=(\d+)"),
    "max_heap_size_bytes": re.compile(r"-XX:MaxHeapSize=(\d+)"),
    "new_size_bytes": re.compile(r"-XX:NewSize=(\d+)"),
    "max_new_size_bytes": re.compile(r"-XX:MaxNewSize=(\d+)"),
    "old_size_bytes": re.compile(r"-XX:OldSize=(\d+)"),
    "metaspace_size_bytes": re.compile(r"-XX:MetaspaceSize=(\d+)"),
    "max_metaspace_size_bytes": re.compile(r"-XX:MaxMetaspaceSize=(\d+)"),
    "g1_heap_region_size_bytes": re.compile(r"-XX:G1HeapRegionSize=(\d+)"),
}

INT_FLAGS: dict[str, re.Pattern[str]] = {
    "new_ratio": re.compile(r"-XX:NewRatio=(\d+)"),
    "survivor_ratio": re.compile(r"-XX:SurvivorRatio=(\d+)"),
    "max_tenuring_threshold": re.compile(r"-XX:MaxTenuringThreshold=(\d+)"),
    "parallel_gc_threads": re.compile(r"-XX:ParallelGCThreads=(\d+)"),
    "conc_gc_threads": re.compile(r"-XX:ConcGCThreads=(\d+)"),
    "max_gc_pause_millis": re.compile(r"-XX:MaxGCPauseMillis=(\d+)"),
    "initiating_heap_occupancy_percent": re.compile(r"-XX:InitiatingHeapOccupancyPercent=(\d+)"),
    "cms_initiating_occupancy_fraction": re.compile(r"-XX:CMSInitiatingOccupancyFraction=(\d+)"),
}

BOOL_FLAGS: dict[str, re.Pattern[str]] = {
    "always_pre_touch": re.compile(r"-XX:\+AlwaysPreTouch"),
    "use_cms_initiating_occupancy_only": re.compile(r"-XX:\+UseCMSInitiatingOccupancyOnly"),
}

XMS_PATTERN = re.compile(r"-Xms(\d+)([kmgKMG])?")
XMX_PATTERN = re.compile(r"-Xmx(\d+)([kmgKMG])?")
XMN_PATTERN = re.compile(r"-Xmn(\d+)([kmgKMG])?")

COLLECTOR_FLAGS: tuple[tuple[str, CollectorFamily], ...] = (
    ("-XX:+UseG1GC", "g1"),
    ("-XX:+UseConcMarkSweepGC", "cms"),
    ("-XX:+UseParallelGC", "parallel"),
    ("-XX:+UseParallelOldGC", "parallel"),
    ("-XX:+UseSerialGC", "serial"),
    ("-XX:+UseShenandoahGC", "shenandoah"),
    ("-XX:+UseZGC", "z"),
)


def parse_jvm_heap_config(flags_str: str) -> JVMHeapConfig | None:
    """Extract JVM heap and GC tuning arguments from a CommandLine flags string.

    Args:
        flags_str: The options captured from the command-line flags header

    Returns:
        JVMHeapConfig if any known flag is present, None otherwise
    """
    config_dict: dict[str, Any] = {}

    for field, pattern in BYTE_FLAGS.items():
        if field_match := pattern.search(flags_str):
            config_dict[field] = int(field_match.group(1))

    for field, pattern in INT_FLAGS.items():
        if field_match := pattern.search(flags_str):
            config_dict[field] = int(field_match.group(1))

    # -Xms, -Xmx, -Xmn override the -XX: forms
    if xms := XMS_PATTERN.search(flags_str):
        config_dict["initial_heap_size_bytes"] = parse_jvm_size_to_bytes(xms.group(1), xms.group(2))
    if xmx := XMX_PATTERN.search(flags_str):
        config_dict["max_heap_size_bytes"] = parse_jvm_size_to_bytes(xmx.group(1), xmx.group(2))
    if xmn := XMN_PATTERN.search(flags_str):
        config_dict["new_size_bytes"] = parse_jvm_size_to_bytes(xmn.group(1), xmn.group(2))

    for field, pattern in BOOL_FLAGS.items():
        if pattern.search(flags_str):
            config_dict[field] = True

    if config_dict:
        return JVMHeapConfig(**config_dict)
    return None


def detect_collector(events: list[GCEvent], jvm_options: str | None) -> CollectorFamily:
    """Banner first, then command-line flags, then the most common event collector."""
    for event in events:
        if event.traits.kind == "Banner":
            return event.traits.collector

    if jvm_options:
        for flag, family in COLLECTOR_FLAGS:
            if flag in jvm_options:
                return family

    families = Counter(event.traits.collector for event in events if event.traits.collector != "unknown")
    if families:
        return families.most_common(1)[0][0]
    return "unknown"


# ============================================================
# SUMMARY
# ============================================================


def summarize(
    events: Iterable[GCEvent],
    diagnostics: Iterable[Diagnostic] = (),
    thresholds: SummaryThresholds | None = None,
) -> GCSummary:
    """Aggregate counts, pause statistics, parallelism and warnings."""
    thresholds = thresholds or SummaryThresholds()
    events = list(events)
    diagnostics = list(diagnostics)

    event_counts = Counter(event.event_type.value for event in events)
    kind_counts = Counter(event.traits.kind for event in events)

    pauses = [event for event in events if event.blocking and event.duration_micros > 0]
    pauses_sorted = sorted(float(event.duration_micros) for event in pauses)
    total_pause = sum(event.duration_micros for event in pauses)

    timestamps = [event.timestamp_millis for event in events if event.traits.kind not in ("Header", "Banner")]
    first_ts = min(timestamps) if timestamps else None
    last_ts = max(timestamps) if timestamps else None
    runtime_millis = (last_ts - first_ts) if timestamps else 0

    throughput_pct = 100.0
    if runtime_millis > 0:
        throughput_pct = max(0.0, 100 - total_pause / 1000 / runtime_millis * 100)

    parallel_samples = [
        (event.parallelism, event.time_real_centis)
        for event in events
        if event.blocking and event.parallelism is not None
    ]
    parallelisms = [p for p, _ in parallel_samples]
    measurable = [
        p for p, real in parallel_samples if (real or 0) >= thresholds.parallelism_min_real_centis
    ]
    low_count = sum(1 for p in measurable if p < thresholds.low_parallelism_percent)
    inverted_count = sum(1 for p in measurable if p < 100)

    jvm_options = None
    jvm_version = None
    for event in events:
        if event.event_type is EventType.HEADER_COMMAND_LINE_FLAGS and jvm_options is None:
            jvm_options = str(event.attributes.get("jvm_options"))
        elif event.event_type is EventType.HEADER_VERSION and jvm_version is None:
            jvm_version = str(event.attributes.get("jvm_version"))

    unrecognized = sum(1 for d in diagnostics if d.kind == "unrecognized")
    malformed = sum(1 for d in diagnostics if d.kind == "malformed")
    incomplete = sum(1 for d in diagnostics if d.kind == "incomplete")

    summary = GCSummary(
        total_event_count=len(events),
        blocking_event_count=len(pauses),
        event_counts=dict(event_counts),
        kind_counts=dict(kind_counts),
        collector=detect_collector(events, jvm_options),
        first_timestamp_millis=first_ts,
        last_timestamp_millis=last_ts,
        runtime_millis=runtime_millis,
        total_pause_micros=total_pause,
        max_pause_micros=max((event.duration_micros for event in pauses), default=0),
        p50_pause_micros=percentile_sorted(pauses_sorted, 50),
        p95_pause_micros=percentile_sorted(pauses_sorted, 95),
        p99_pause_micros=percentile_sorted(pauses_sorted, 99),
        throughput_pct=throughput_pct,
        max_parallelism=max(parallelisms) if parallelisms else None,
        avg_parallelism=mean(parallelisms) if parallelisms else None,
        low_parallelism_count=low_count,
        inverted_parallelism_count=inverted_count,
        unrecognized_count=unrecognized,
        malformed_count=malformed,
        incomplete_count=incomplete,
        jvm_version=jvm_version,
        jvm_options=jvm_options,
        jvm_heap_config=parse_jvm_heap_config(jvm_options) if jvm_options else None,
    )
    summary.warnings.extend(build_warnings(summary, thresholds))
    return summary


def build_warnings(summary: GCSummary, thresholds: SummaryThresholds) -> list[str]:
    warnings: list[str] = []

    max_pause_ms = summary.max_pause_micros / 1000
    if max_pause_ms > thresholds.pause_critical_millis:
        warnings.append(
            f"CRITICAL: Max pause {max_pause_ms:.1f}ms "
            f"(threshold: {thresholds.pause_critical_millis:.0f}ms) - "
            "severe latency impact on application responsiveness"
        )
    elif max_pause_ms > thresholds.pause_warning_millis:
        warnings.append(
            f"WARNING: Max pause {max_pause_ms:.1f}ms "
            f"(threshold: {thresholds.pause_warning_millis:.0f}ms) - "
            "noticeable pause times may affect user experience"
        )

    if summary.runtime_millis > 0 and summary.throughput_pct < thresholds.throughput_warning_percent:
        warnings.append(
            f"WARNING: GC throughput {summary.throughput_pct:.1f}% "
            f"(threshold: {thresholds.throughput_warning_percent:.0f}%) - "
            "application spending excessive time paused"
        )

    if summary.inverted_parallelism_count:
        warnings.append(
            f"WARNING: {summary.inverted_parallelism_count} pauses with inverted parallelism "
            "(user + sys < real) - GC threads starved of CPU"
        )
    elif summary.low_parallelism_count and summary.collector in ("parallel", "cms", "g1"):
        warnings.append(
            f"WARNING: {summary.low_parallelism_count} pauses below "
            f"{thresholds.low_parallelism_percent}% parallelism - "
            "multi-threaded collector behaving serially"
        )

    lines_seen = summary.total_event_count + summary.unrecognized_count + summary.malformed_count
    if lines_seen and summary.unrecognized_count / lines_seen > thresholds.unrecognized_warning_ratio:
        warnings.append(
            f"WARNING: {summary.unrecognized_count} of {lines_seen} logical lines unrecognized - "
            "statistics may be incomplete"
        )

    if summary.malformed_count:
        warnings.append(f"WARNING: {summary.malformed_count} recognized lines had malformed fields")

    if summary.incomplete_count:
        warnings.append(f"WARNING: {summary.incomplete_count} multi-line events never completed")

    return warnings
