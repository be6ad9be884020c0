"""The built-in catalogue of GC log line patterns.

Entries are grouped by decorator style and collector. Every entry carries
at least one example body; ``default_registry().validate_examples()`` must
come back empty.
"""

from __future__ import annotations

from collections.abc import Callable
from functools import lru_cache

from gc_events.models import EventType
from gc_events.patterns import (
    ANY_TRIGGER,
    DECIMAL,
    DURATION_MS,
    DURATION_SECS,
    GC_ID,
    INNER_DECORATOR,
    SIZE,
    TIMES_LEGACY,
    TIMES_UNIFIED,
    TRIGGER,
    block,
    size,
    transition,
)
from gc_events.registry import PatternEntry, Registry

_E = EventType

UNIFIED_TIMES = f"(?:{TIMES_UNIFIED})?"
LEGACY_TIMES = f"(?:{TIMES_LEGACY})?"
METASPACE = block("Metaspace", "perm")
PERM_BLOCK = rf"\[(?:Metaspace|PSPermGen|CMS Perm |Perm ): {transition('perm')}\]"

# ============================================================
# HEADERS AND BANNERS
# ============================================================

HEADERS = [
    PatternEntry.build(
        "header_command_line_flags",
        _E.HEADER_COMMAND_LINE_FLAGS,
        "CommandLine flags: ",
        r"CommandLine flags: (?P<jvm_options>.+?)",
        examples=[
            "CommandLine flags: -XX:InitialHeapSize=13958643712 -XX:MaxHeapSize=13958643712 "
            "-XX:+PrintGC -XX:+PrintGCDetails -XX:+UseConcMarkSweepGC -XX:+UseParNewGC",
        ],
    ),
    PatternEntry.build(
        "header_version_legacy",
        _E.HEADER_VERSION,
        " VM (",
        r"(?:Java HotSpot\(TM\)|OpenJDK) (?:64-Bit )?(?:Server|Client) VM "
        r"\((?P<jvm_version>[^()]+)\) for .+",
        examples=[
            "Java HotSpot(TM) 64-Bit Server VM (25.102-b14) for linux-amd64 JRE (1.8.0_102-b14), "
            'built on Jun 22 2016 18:43:17 by "java_re" with gcc 4.3.0 20080428 (Red Hat 4.3.0-8)',
        ],
    ),
    PatternEntry.build(
        "header_version_unified",
        _E.HEADER_VERSION,
        "Version: ",
        r"Version: (?P<jvm_version>\S+)(?: \([^()]*\))?(?: for .+)?",
        examples=["Version: 17.0.2+8-86 (release)"],
    ),
    PatternEntry.build(
        "header_memory_legacy",
        _E.HEADER_MEMORY,
        "Memory: ",
        rf"Memory: \d+[kKmM] page, physical {size('physical_memory_kb')}\({SIZE} free\), "
        rf"swap {size('swap_kb')}\({SIZE} free\)",
        precedes=["header_memory_unified"],
        examples=["Memory: 4k page, physical 65806576k(58281908k free), swap 16777212k(16777212k free)"],
    ),
    PatternEntry.build(
        "header_memory_unified",
        _E.HEADER_MEMORY,
        "Memory: ",
        rf"Memory: {size('physical_memory_kb')}",
        examples=["Memory: 15G"],
    ),
]

BANNERS = [
    PatternEntry.build("using_serial", _E.USING_SERIAL, "Using Serial", r"Using Serial",
                       examples=["Using Serial"]),
    PatternEntry.build("using_parallel", _E.USING_PARALLEL, "Using Parallel", r"Using Parallel",
                       examples=["Using Parallel"]),
    PatternEntry.build("using_cms", _E.USING_CMS, "Using Concurrent Mark Sweep",
                       r"Using Concurrent Mark Sweep",
                       examples=["Using Concurrent Mark Sweep"]),
    PatternEntry.build("using_g1", _E.USING_G1, "Using G1", r"Using G1",
                       examples=["Using G1"]),
    PatternEntry.build("using_shenandoah", _E.USING_SHENANDOAH, "Using Shenandoah",
                       r"Using Shenandoah",
                       examples=["Using Shenandoah"]),
    PatternEntry.build("using_z", _E.USING_Z, "Using ",
                       r"Using (?:The Z Garbage Collector|ZGC|Generational ZGC)",
                       examples=["Using The Z Garbage Collector"]),
]

# ============================================================
# UNIFIED LOGGING (JDK 9+)
# ============================================================


def _unified_generational(pause: str, young: str, old: str) -> str:
    return (
        rf"{GC_ID}Pause {pause} \({TRIGGER}\) {block(young, 'young')} {block(old, 'old')} "
        rf"{METASPACE} {transition('heap')} {DURATION_MS}{UNIFIED_TIMES}"
    )


UNIFIED = [
    PatternEntry.build(
        "unified_g1_mixed_pause",
        _E.UNIFIED_G1_MIXED_PAUSE,
        "Pause Young (Mixed)",
        rf"{GC_ID}Pause Young \(Mixed\) \({TRIGGER}\)(?: {METASPACE})? {transition('heap')} "
        rf"{DURATION_MS}{UNIFIED_TIMES}",
        examples=["GC(9) Pause Young (Mixed) (G1 Evacuation Pause) 15M->12M(31M) 1.202ms"],
    ),
    PatternEntry.build(
        "unified_g1_young_pause",
        _E.UNIFIED_G1_YOUNG_PAUSE,
        "Pause Young (",
        rf"{GC_ID}Pause Young \((?:Normal|Concurrent Start|Prepare Mixed)\) \({TRIGGER}\)"
        rf"(?: {METASPACE})? {transition('heap')} {DURATION_MS}{UNIFIED_TIMES}",
        precedes=["unified_young"],
        examples=[
            "GC(0) Pause Young (Normal) (G1 Evacuation Pause) Metaspace: 3801K->3801K(1056768K) "
            "25M->4M(256M) 5.123ms User=0.02s Sys=0.00s Real=0.01s",
            "GC(5) Pause Young (Concurrent Start) (G1 Humongous Allocation) 61M->52M(256M) 2.345ms",
        ],
    ),
    PatternEntry.build(
        "unified_par_new",
        _E.UNIFIED_PAR_NEW,
        "ParNew: ",
        _unified_generational("Young", "ParNew", "CMS"),
        examples=[
            "GC(0) Pause Young (Allocation Failure) ParNew: 974K->128K(1152K) CMS: 0K->518K(960K) "
            "Metaspace: 250K->250K(1056768K) 0M->0M(2M) 3.544ms User=0.01s Sys=0.01s Real=0.01s",
        ],
    ),
    PatternEntry.build(
        "unified_serial_new",
        _E.UNIFIED_SERIAL_NEW,
        "DefNew: ",
        _unified_generational("Young", "DefNew", "Tenured"),
        examples=[
            "GC(0) Pause Young (Allocation Failure) DefNew: 1022K->127K(1152K) Tenured: 0K->525K(960K) "
            "Metaspace: 1223K->1223K(1056768K) 1M->0M(2M) 2.469ms User=0.00s Sys=0.00s Real=0.00s",
        ],
    ),
    PatternEntry.build(
        "unified_parallel_scavenge",
        _E.UNIFIED_PARALLEL_SCAVENGE,
        "PSYoungGen: ",
        _unified_generational("Young", "PSYoungGen", "ParOldGen"),
        examples=[
            "GC(2) Pause Young (Allocation Failure) PSYoungGen: 6108K->1008K(7168K) "
            "ParOldGen: 0K->4576K(11264K) Metaspace: 2434K->2434K(1056768K) 5M->5M(18M) 2.891ms "
            "User=0.01s Sys=0.00s Real=0.00s",
        ],
    ),
    PatternEntry.build(
        "unified_serial_old",
        _E.UNIFIED_SERIAL_OLD,
        "Tenured: ",
        _unified_generational("Full", "DefNew", "Tenured"),
        examples=[
            "GC(3) Pause Full (Allocation Failure) DefNew: 1152K->0K(1152K) Tenured: 458K->929K(960K) "
            "Metaspace: 697K->697K(1056768K) 1M->0M(2M) 3.732ms User=0.01s Sys=0.00s Real=0.00s",
        ],
    ),
    PatternEntry.build(
        "unified_parallel_compacting_old",
        _E.UNIFIED_PARALLEL_COMPACTING_OLD,
        "ParOldGen: ",
        _unified_generational("Full", "PSYoungGen", "ParOldGen"),
        examples=[
            "GC(3) Pause Full (Ergonomics) PSYoungGen: 1008K->0K(7168K) ParOldGen: 10760K->6041K(17920K) "
            "Metaspace: 2434K->2434K(1056768K) 11M->5M(24M) 10.724ms User=0.02s Sys=0.00s Real=0.01s",
        ],
    ),
    PatternEntry.build(
        "unified_young",
        _E.UNIFIED_YOUNG,
        "Pause Young (",
        rf"{GC_ID}Pause Young \({TRIGGER}\)(?: {METASPACE})? {transition('heap')} "
        rf"{DURATION_MS}{UNIFIED_TIMES}",
        examples=[
            "GC(0) Pause Young (Allocation Failure) 0M->0M(2M) 3.544ms",
            "GC(1) Pause Young (G1 Evacuation Pause) 24M->4M(256M) 3.130ms",
            "GC(1) Pause Young (G1 Evacuation Pause) Metaspace: 3801K->3801K(1056768K) "
            "24M->4M(256M) 3.130ms User=0.02s Sys=0.00s Real=0.01s",
        ],
    ),
    PatternEntry.build(
        "unified_old",
        _E.UNIFIED_OLD,
        "Pause Full (",
        rf"{GC_ID}Pause Full \({TRIGGER}\)(?: {METASPACE})? {transition('heap')} "
        rf"{DURATION_MS}{UNIFIED_TIMES}",
        examples=[
            "GC(6) Pause Full (System.gc()) 5M->1M(20M) 7.521ms",
            "GC(3) Pause Full (System.gc()) Metaspace: 3801K->3801K(1056768K) 5M->1M(20M) 7.521ms "
            "User=0.02s Sys=0.00s Real=0.01s",
        ],
    ),
    PatternEntry.build(
        "unified_remark",
        _E.UNIFIED_REMARK,
        "Pause Remark",
        rf"{GC_ID}Pause Remark {transition('heap')} {DURATION_MS}{UNIFIED_TIMES}",
        examples=["GC(2) Pause Remark 29M->29M(46M) 2.328ms User=0.01s Sys=0.00s Real=0.00s"],
    ),
    PatternEntry.build(
        "unified_cleanup",
        _E.UNIFIED_CLEANUP,
        "Pause Cleanup",
        rf"{GC_ID}Pause Cleanup {transition('heap')} {DURATION_MS}{UNIFIED_TIMES}",
        examples=["GC(2) Pause Cleanup 29M->29M(46M) 0.011ms"],
    ),
    PatternEntry.build(
        "shenandoah_init_mark",
        _E.SHENANDOAH_INIT_MARK,
        "Pause Init Mark",
        rf"{GC_ID}Pause Init Mark(?: \([a-z ]+\))* {DURATION_MS}",
        examples=["GC(0) Pause Init Mark (unload classes) 0.295ms", "GC(1) Pause Init Mark 0.230ms"],
    ),
    PatternEntry.build(
        "shenandoah_final_mark",
        _E.SHENANDOAH_FINAL_MARK,
        "Pause Final Mark",
        rf"{GC_ID}Pause Final Mark(?: \([a-z ]+\))* {DURATION_MS}",
        examples=["GC(0) Pause Final Mark (unload classes) 0.542ms"],
    ),
    PatternEntry.build(
        "shenandoah_update_refs",
        _E.SHENANDOAH_UPDATE_REFS,
        " Update Refs",
        rf"{GC_ID}Pause (?:Init|Final) Update Refs {DURATION_MS}",
        examples=["GC(0) Pause Init Update Refs 0.021ms", "GC(0) Pause Final Update Refs 0.208ms"],
    ),
    PatternEntry.build(
        "unified_concurrent",
        _E.UNIFIED_CONCURRENT,
        "Concurrent ",
        rf"{GC_ID}Concurrent [A-Za-z][A-Za-z \-]*?(?: \([^()]*\))?(?: {transition('heap')})?"
        rf"(?: {DURATION_MS})?",
        examples=[
            "GC(1) Concurrent Cycle",
            "GC(1) Concurrent Mark (0.155s, 0.161s) 5.844ms",
            "GC(1) Concurrent Mark From Roots 4.731ms",
            "GC(0) Concurrent marking 2M->2M(256M) 1.234ms",
        ],
    ),
]

# ============================================================
# LEGACY LOGGING (JDK 8 and earlier)
# ============================================================


def _with_any_trigger(
    name: str,
    event_type: EventType,
    guard: str,
    regex_for: Callable[[str], str],
    triggered_example: str,
    untriggered_example: str,
) -> list[PatternEntry]:
    """A triggered entry followed by its trigger-tolerant fallback.

    `regex_for` receives the trigger clause and returns the full pattern.
    """
    return [
        PatternEntry.build(
            name,
            event_type,
            guard,
            regex_for(rf" \({TRIGGER}\)"),
            precedes=[f"{name}_any"],
            examples=[triggered_example],
        ),
        PatternEntry.build(
            f"{name}_any",
            event_type,
            guard,
            regex_for(f"(?: {ANY_TRIGGER})?"),
            examples=[untriggered_example],
        ),
    ]


def _young_collection(label: str) -> Callable[[str], str]:
    def regex_for(clause: str) -> str:
        return (
            rf"\[GC{clause} {INNER_DECORATOR}\[{label}: {transition('young')}, {DECIMAL} secs\] "
            rf"{transition('heap')}, {DURATION_SECS}\]{LEGACY_TIMES}"
        )

    return regex_for


def _parallel_young(clause: str) -> str:
    return (
        rf"\[GC{clause} \[PSYoungGen: {transition('young')}\] {transition('heap')}, "
        rf"{DURATION_SECS}\]{LEGACY_TIMES}"
    )


def _parallel_full(old_label: str) -> Callable[[str], str]:
    def regex_for(clause: str) -> str:
        # JDK 7 omits the comma before the perm block
        return (
            rf"\[Full GC{clause} \[PSYoungGen: {transition('young')}\] "
            rf"\[{old_label}: {transition('old')}\] {transition('heap')},? {PERM_BLOCK}, "
            rf"{DURATION_SECS}\]{LEGACY_TIMES}"
        )

    return regex_for


def _cms_full(clause: str) -> str:
    return (
        rf"\[Full GC{clause} {INNER_DECORATOR}\[CMS: {transition('old')}, {DECIMAL} secs\] "
        rf"{transition('heap')}, {PERM_BLOCK}, {DURATION_SECS}\]{LEGACY_TIMES}"
    )


LEGACY = [
    *_with_any_trigger(
        "par_new",
        _E.PAR_NEW,
        "[ParNew",
        _young_collection("ParNew"),
        "[GC (Allocation Failure) 1.234: [ParNew: 974K->128K(1152K), 0.0012345 secs] "
        "974K->518K(2112K), 0.0013456 secs] [Times: user=0.01 sys=0.00, real=0.00 secs]",
        "[GC 1.234: [ParNew: 974K->128K(1152K), 0.0012345 secs] 974K->518K(2112K), 0.0013456 secs]",
    ),
    *_with_any_trigger(
        "serial_new",
        _E.SERIAL_NEW,
        "[DefNew",
        _young_collection("DefNew"),
        "[GC (Allocation Failure) 0.411: [DefNew: 8704K->1088K(9792K), 0.0110750 secs] "
        "8704K->3617K(31616K), 0.0111413 secs] [Times: user=0.01 sys=0.00, real=0.01 secs]",
        "[GC 0.411: [DefNew: 8704K->1088K(9792K), 0.0110750 secs] 8704K->3617K(31616K), 0.0111413 secs]",
    ),
    *_with_any_trigger(
        "parallel_scavenge",
        _E.PARALLEL_SCAVENGE,
        "[PSYoungGen",
        _parallel_young,
        "[GC (Allocation Failure) [PSYoungGen: 33280K->5104K(38400K)] 33280K->5192K(125952K), "
        "0.0123456 secs] [Times: user=0.02 sys=0.01, real=0.01 secs]",
        "[GC [PSYoungGen: 33280K->5104K(38400K)] 33280K->5192K(125952K), 0.0123456 secs]",
    ),
    *_with_any_trigger(
        "parallel_compacting_old",
        _E.PARALLEL_COMPACTING_OLD,
        "[ParOldGen",
        _parallel_full("ParOldGen"),
        "[Full GC (Ergonomics) [PSYoungGen: 5104K->0K(38400K)] [ParOldGen: 88K->5003K(87552K)] "
        "5192K->5003K(125952K), [Metaspace: 3015K->3015K(1056768K)], 0.0456789 secs] "
        "[Times: user=0.10 sys=0.00, real=0.05 secs]",
        "[Full GC [PSYoungGen: 5104K->0K(38400K)] [ParOldGen: 88K->5003K(87552K)] "
        "5192K->5003K(125952K) [PSPermGen: 2600K->2599K(21248K)], 0.0456789 secs]",
    ),
    *_with_any_trigger(
        "parallel_serial_old",
        _E.PARALLEL_SERIAL_OLD,
        "[PSOldGen",
        _parallel_full("PSOldGen"),
        "[Full GC (System.gc()) [PSYoungGen: 496K->0K(9728K)] [PSOldGen: 8K->400K(21888K)] "
        "504K->400K(31616K), [Metaspace: 2656K->2656K(1056768K)], 0.0054321 secs] "
        "[Times: user=0.00 sys=0.00, real=0.01 secs]",
        "[Full GC [PSYoungGen: 496K->0K(9728K)] [PSOldGen: 8K->400K(21888K)] "
        "504K->400K(31616K) [PSPermGen: 2600K->2599K(21248K)], 0.0054321 secs]",
    ),
    *_with_any_trigger(
        "cms_serial_old",
        _E.CMS_SERIAL_OLD,
        "[CMS: ",
        _cms_full,
        "[Full GC (System.gc()) 2.345: [CMS: 0K->1234K(87424K), 0.0234567 secs] "
        "3456K->1234K(126720K), [Metaspace: 3000K->3000K(1056768K)], 0.0245678 secs] "
        "[Times: user=0.02 sys=0.00, real=0.03 secs]",
        "[Full GC 2.345: [CMS: 0K->1234K(87424K), 0.0234567 secs] 3456K->1234K(126720K), "
        "[CMS Perm : 2500K->2500K(21248K)], 0.0245678 secs]",
    ),
    PatternEntry.build(
        "cms_initial_mark",
        _E.CMS_INITIAL_MARK,
        "CMS-initial-mark",
        rf"\[GC (?:\((?P<trigger>CMS Initial Mark)\) )?\[1 CMS-initial-mark: "
        rf"{size('old_occupancy_init_kb')}\({size('old_space_kb')}\)\] "
        rf"{size('heap_occupancy_init_kb')}\({size('heap_space_kb')}\), {DURATION_SECS}\]{LEGACY_TIMES}",
        examples=[
            "[GC (CMS Initial Mark) [1 CMS-initial-mark: 1234K(87424K)] 5678K(126720K), 0.0012345 secs] "
            "[Times: user=0.00 sys=0.00, real=0.00 secs]",
        ],
    ),
    PatternEntry.build(
        "cms_remark",
        _E.CMS_REMARK,
        "CMS-remark",
        rf"\[GC (?:\((?P<trigger>CMS Final Remark)\) )?.*?\[1 CMS-remark: "
        rf"{size('old_occupancy_init_kb')}\({size('old_space_kb')}\)\] "
        rf"{size('heap_occupancy_init_kb')}\({size('heap_space_kb')}\), {DURATION_SECS}\]{LEGACY_TIMES}",
        examples=[
            "[GC (CMS Final Remark) [YG occupancy: 4400 K (19136 K)]2.500: [Rescan (parallel) , "
            "0.0012345 secs]2.501: [weak refs processing, 0.0000123 secs]2.501: [class unloading, "
            "0.0001234 secs]2.501: [scrub symbol table, 0.0002345 secs]2.502: [scrub string table, "
            "0.0000345 secs][1 CMS-remark: 1234K(87424K)] 5634K(106560K), 0.0023456 secs] "
            "[Times: user=0.01 sys=0.00, real=0.00 secs]",
        ],
    ),
    PatternEntry.build(
        "cms_concurrent",
        _E.CMS_CONCURRENT,
        "[CMS-concurrent-",
        r"\[CMS-concurrent-(?:mark|preclean|abortable-preclean|sweep|reset)"
        rf"(?:-start\]|: {DECIMAL}/{DURATION_SECS}\]){LEGACY_TIMES}",
        examples=[
            "[CMS-concurrent-mark-start]",
            "[CMS-concurrent-mark: 0.123/0.456 secs] [Times: user=0.50 sys=0.01, real=0.46 secs]",
            "[CMS-concurrent-abortable-preclean: 0.123/1.234 secs]",
        ],
    ),
]


def _g1_details(collection: str) -> str:
    return (
        rf"\[GC pause \({TRIGGER}\) \({collection}\)(?: \(initial-mark\))?, {DURATION_SECS}\]"
        rf"\[Eden: {SIZE}\({SIZE}\)->{SIZE}\({SIZE}\) Survivors: {SIZE}->{SIZE} "
        rf"Heap: {size('heap_occupancy_init_kb')}\({SIZE}\)->{size('heap_occupancy_end_kb')}"
        rf"\({size('heap_space_kb')}\)\]{LEGACY_TIMES}"
    )


def _g1_plain(collection: str) -> str:
    return (
        rf"\[GC pause \({TRIGGER}\) \({collection}\)(?: \(initial-mark\))? "
        rf"{transition('heap')}, {DURATION_SECS}\]"
    )


G1_LEGACY = [
    PatternEntry.build(
        "g1_young_pause",
        _E.G1_YOUNG_PAUSE,
        "[Eden: ",
        _g1_details("young"),
        examples=[
            "[GC pause (G1 Evacuation Pause) (young), 0.0123456 secs][Eden: 24.0M(24.0M)->0.0B(23.0M) "
            "Survivors: 0.0B->3072.0K Heap: 24.0M(256.0M)->3951.0K(256.0M)]"
            "[Times: user=0.02 sys=0.00, real=0.01 secs]",
        ],
    ),
    PatternEntry.build(
        "g1_mixed_pause",
        _E.G1_MIXED_PAUSE,
        "[Eden: ",
        _g1_details("mixed"),
        examples=[
            "[GC pause (G1 Evacuation Pause) (mixed), 0.0234567 secs][Eden: 12.0M(12.0M)->0.0B(14.0M) "
            "Survivors: 2048.0K->2048.0K Heap: 180.5M(256.0M)->150.2M(256.0M)]"
            "[Times: user=0.04 sys=0.00, real=0.02 secs]",
        ],
    ),
    PatternEntry.build(
        "g1_young_pause_plain",
        _E.G1_YOUNG_PAUSE,
        "(young)",
        _g1_plain("young"),
        examples=["[GC pause (G1 Evacuation Pause) (young) 24M->3951K(256M), 0.0123456 secs]"],
    ),
    PatternEntry.build(
        "g1_mixed_pause_plain",
        _E.G1_MIXED_PAUSE,
        "(mixed)",
        _g1_plain("mixed"),
        examples=["[GC pause (G1 Evacuation Pause) (mixed) 180M->150M(256M), 0.0234567 secs]"],
    ),
]

VERBOSE = [
    PatternEntry.build(
        "verbose_gc_young",
        _E.VERBOSE_GC_YOUNG,
        "[GC (",
        rf"\[GC \({TRIGGER}\) {{1,2}}{transition('heap')}, {DURATION_SECS}\]",
        precedes=["verbose_gc_young_any"],
        examples=["[GC (Allocation Failure)  33280K->5192K(125952K), 0.0042345 secs]"],
    ),
    PatternEntry.build(
        "verbose_gc_young_any",
        _E.VERBOSE_GC_YOUNG,
        "[GC",
        rf"\[GC(?: {ANY_TRIGGER})? {{1,2}}{transition('heap')}, {DURATION_SECS}\]",
        examples=["[GC 33280K->5192K(125952K), 0.0042345 secs]"],
    ),
    PatternEntry.build(
        "verbose_gc_old",
        _E.VERBOSE_GC_OLD,
        "[Full GC (",
        rf"\[Full GC \({TRIGGER}\) {{1,2}}{transition('heap')}, {DURATION_SECS}\]",
        precedes=["verbose_gc_old_any"],
        examples=["[Full GC (System.gc())  5192K->5003K(125952K), 0.0456789 secs]"],
    ),
    PatternEntry.build(
        "verbose_gc_old_any",
        _E.VERBOSE_GC_OLD,
        "[Full GC",
        rf"\[Full GC(?: {ANY_TRIGGER})? {{1,2}}{transition('heap')}, {DURATION_SECS}\]",
        examples=["[Full GC 5192K->5003K(125952K), 0.0456789 secs]"],
    ),
    PatternEntry.build(
        "application_stopped_time",
        _E.APPLICATION_STOPPED_TIME,
        "Total time for which application threads were stopped",
        rf"Total time for which application threads were stopped: (?P<duration_micros>{DECIMAL}) seconds"
        rf"(?:, Stopping threads took: {DECIMAL} seconds)?",
        examples=[
            "Total time for which application threads were stopped: 0.0001215 seconds, "
            "Stopping threads took: 0.0000271 seconds",
        ],
    ),
]

CATALOGUE: list[PatternEntry] = HEADERS + BANNERS + UNIFIED + LEGACY + G1_LEGACY + VERBOSE


@lru_cache(maxsize=1)
def default_registry() -> Registry:
    """The validated built-in registry, built once per process."""
    return Registry(CATALOGUE)
