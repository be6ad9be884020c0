"""Regular-expression building blocks shared by the decorator parser,
the preprocessor and the catalogue.

Named groups use the GCEvent attribute they populate, so the field recipe
of a catalogue entry can be read straight off its pattern.
"""

from __future__ import annotations

import re

# Absolute time: 2019-02-05T14:47:31.092-0200
DATESTAMP = r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}[.,]\d{3}(?:[+-]\d{4}|Z)?"

# Seconds since JVM start: 1.234
TIMESTAMP = r"\d+[.,]\d{3}"

DECIMAL = r"\d+[.,]\d+"

SIZE = r"\d+(?:[.,]\d+)?[BKMGbkmg]"

# Parenthesized clause, tolerating one "()" inside, e.g. "(System.gc())"
ANY_PAREN = r"\((?:[^()]|\(\))+\)"
# Same clause with its text captured verbatim as the trigger
ANY_TRIGGER = r"\((?P<trigger>(?:[^()]|\(\))+)\)"

# Timestamps nested inside legacy event bodies: "1.234: [ParNew: ..."
INNER_DECORATOR = rf"(?:{DATESTAMP}: )?(?:{TIMESTAMP}: )?"

GC_ID = r"GC\((?P<gc_id>\d+)\) "

DURATION_SECS = rf"(?P<duration_micros>{DECIMAL}) secs"
DURATION_MS = rf"(?P<duration_micros>{DECIMAL}ms)"

TIMES_LEGACY = (
    r" ?\[Times: user=(?P<time_user_centis>\d+[.,]\d{2}) sys=(?P<time_sys_centis>\d+[.,]\d{2}),"
    r" real=(?P<time_real_centis>\d+[.,]\d{2}) secs\]"
)
TIMES_UNIFIED = (
    r" User=(?P<time_user_centis>\d+[.,]\d{2})s Sys=(?P<time_sys_centis>\d+[.,]\d{2})s"
    r" Real=(?P<time_real_centis>\d+[.,]\d{2})s"
)

TRIGGERS: tuple[str, ...] = (
    "Allocation Failure",
    "System.gc()",
    "Metadata GC Threshold",
    "Metadata GC Clear Soft References",
    "GCLocker Initiated GC",
    "Ergonomics",
    "G1 Evacuation Pause",
    "G1 Humongous Allocation",
    "G1 Compaction Pause",
    "G1 Preventive Collection",
    "Heap Inspection Initiated GC",
    "Heap Dump Initiated GC",
    "Last ditch collection",
    "JvmtiEnv ForceGarbageCollection",
    "Diagnostic Command",
    "CodeCache GC Threshold",
    "WhiteBox Initiated Young GC",
    "Update Allocation Context Stats",
    "Allocation Rate",
    "Allocation Stall",
    "Proactive",
    "Warmup",
    "Timer",
    "promotion failed",
    "concurrent mode failure",
    "to-space exhausted",
    "to-space overflow",
)

# Longest first so "Metadata GC Clear Soft References" wins over a prefix
TRIGGER = "(?P<trigger>{})".format(
    "|".join(re.escape(trigger) for trigger in sorted(TRIGGERS, key=len, reverse=True))
)


def size(name: str) -> str:
    return rf"(?P<{name}>{SIZE})"


def transition(area: str) -> str:
    """`a->b(c)` captured as <area>_occupancy_init_kb / _end_kb / _space_kb."""
    return (
        size(f"{area}_occupancy_init_kb")
        + "->"
        + size(f"{area}_occupancy_end_kb")
        + r"\("
        + size(f"{area}_space_kb")
        + r"\)"
    )


def block(label: str, area: str) -> str:
    """`<label>: a->b(c)`."""
    return f"{label}: {transition(area)}"
