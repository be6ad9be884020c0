#!/usr/bin/env python3
"""gc-events - classify JVM GC log lines into typed, normalized events.

Supports unified (JDK 9+) and legacy (JDK 8 and earlier) logging for the
Serial, Parallel, CMS, G1, Shenandoah and Z collectors:
- `events`: the typed event stream as a table or JSON lines
- `summary`: counts, pause distribution, parallelism and warnings
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich.theme import Theme

from gc_events import __version__
from gc_events.config import ParserSettings, SummaryThresholds
from gc_events.errors import GCLogError
from gc_events.models import Diagnostic, GCEvent, ParseResult
from gc_events.stream import GCLogParser
from gc_events.summary import GCSummary, JVMHeapConfig, summarize

# ============================================================
# RICH OUTPUT RENDERING
# ============================================================

GC_EVENTS_THEME = Theme(
    {
        "critical": "bold red",
        "warning": "bold yellow",
        "success": "bold green",
        "info": "cyan",
        "metric": "white",
        "label": "dim white",
        "header": "bold magenta",
    }
)

console = Console(theme=GC_EVENTS_THEME)
err_console = Console(theme=GC_EVENTS_THEME, stderr=True)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def create_key_value_table(title: str, rows: list[tuple[str, str]]) -> Table:
    """Create a simple two-column key/value table."""
    table = Table(title=title, show_header=False, box=None, padding=(0, 2))
    table.add_column("Metric", style="label")
    table.add_column("Value", style="metric")
    for label, value in rows:
        table.add_row(label, value)
    return table


def render_warning_banner(warnings: list[str]) -> Panel:
    """Render warnings in a prominent banner."""
    if not warnings:
        return Panel(Text("No warnings", style="success"), title="Status", border_style="green")

    if any("CRITICAL" in warning for warning in warnings):
        title_text = "[critical]Critical Warnings[/critical]"
        border_style = "red"
    else:
        title_text = "[warning]Warnings[/warning]"
        border_style = "yellow"

    warning_text = Text()
    for index, warning in enumerate(warnings):
        line_ending = "\n" if index < len(warnings) - 1 else ""
        style = "critical" if "CRITICAL" in warning else "warning"
        warning_text.append(warning + line_ending, style=style)

    return Panel(warning_text, title=title_text, border_style=border_style, expand=True)


def format_size_kb(kilobytes: int | None) -> str:
    if kilobytes is None:
        return "-"
    return f"{kilobytes}K"


def format_transition(before: int | None, after: int | None, total: int | None) -> str:
    if before is None and total is None:
        return "-"
    return f"{format_size_kb(before)}->{format_size_kb(after)}({format_size_kb(total)})"


def create_events_table(events: list[GCEvent], limit: int | None = None) -> Table:
    """One row per event: time, type, trigger, heap transition, pause, parallelism."""
    table = Table(title="GC Events", header_style="header")
    table.add_column("Line", style="label", justify="right")
    table.add_column("Uptime (ms)", justify="right")
    table.add_column("Type", style="info")
    table.add_column("Trigger")
    table.add_column("Heap")
    table.add_column("Pause (ms)", justify="right")
    table.add_column("Parallelism", justify="right")

    shown = events if limit is None else events[:limit]
    for index, event in enumerate(shown, start=1):
        parallelism = event.parallelism
        table.add_row(
            str(index),
            str(event.timestamp_millis),
            event.event_type.value,
            event.trigger or "",
            format_transition(event.heap_occupancy_init_kb, event.heap_occupancy_end_kb, event.heap_space_kb),
            f"{event.duration_micros / 1000:.3f}",
            f"{parallelism}%" if parallelism is not None else "",
        )
    return table


def create_diagnostics_table(diagnostics: list[Diagnostic]) -> Table:
    table = Table(title="Diagnostics", header_style="header")
    table.add_column("Line", style="label", justify="right")
    table.add_column("Kind", style="warning")
    table.add_column("Text")
    table.add_column("Detail", style="label")
    for diagnostic in diagnostics:
        # Raw log text is full of brackets; keep it out of markup parsing
        table.add_row(
            str(diagnostic.line_number), diagnostic.kind, Text(diagnostic.line), Text(diagnostic.detail or "")
        )
    return table


def build_overview_rows(summary: GCSummary) -> list[tuple[str, str]]:
    rows = [
        ("Collector", summary.collector),
        ("Events", str(summary.total_event_count)),
        ("Blocking pauses", str(summary.blocking_event_count)),
        ("Runtime", f"{summary.runtime_millis / 1000:.3f}s"),
        ("Throughput", f"{summary.throughput_pct:.2f}%"),
    ]
    if summary.jvm_version:
        rows.append(("JVM version", summary.jvm_version))
    return rows


def build_pause_rows(summary: GCSummary) -> list[tuple[str, str]]:
    return [
        ("Total pause", f"{summary.total_pause_micros / 1000:.3f}ms"),
        ("Max pause", f"{summary.max_pause_micros / 1000:.3f}ms"),
        ("P50", f"{summary.p50_pause_micros / 1000:.3f}ms"),
        ("P95", f"{summary.p95_pause_micros / 1000:.3f}ms"),
        ("P99", f"{summary.p99_pause_micros / 1000:.3f}ms"),
    ]


def build_parallelism_rows(summary: GCSummary) -> list[tuple[str, str]]:
    if summary.max_parallelism is None:
        return [("Parallelism", "No times data")]
    return [
        ("Max parallelism", f"{summary.max_parallelism}%"),
        ("Avg parallelism", f"{summary.avg_parallelism:.0f}%"),
        ("Low parallelism pauses", str(summary.low_parallelism_count)),
        ("Inverted parallelism pauses", str(summary.inverted_parallelism_count)),
    ]


def build_coverage_rows(summary: GCSummary) -> list[tuple[str, str]]:
    return [
        ("Unrecognized lines", str(summary.unrecognized_count)),
        ("Malformed lines", str(summary.malformed_count)),
        ("Incomplete events", str(summary.incomplete_count)),
    ]


def build_jvm_config_rows(config: JVMHeapConfig) -> list[tuple[str, str]]:
    rows = [
        ("Initial heap", config.format_size(config.initial_heap_size_bytes)),
        ("Max heap", config.format_size(config.max_heap_size_bytes)),
    ]
    if config.new_size_bytes is not None:
        rows.append(("New size", config.format_size(config.new_size_bytes)))
    if config.max_metaspace_size_bytes is not None:
        rows.append(("Max metaspace", config.format_size(config.max_metaspace_size_bytes)))
    if config.parallel_gc_threads is not None:
        rows.append(("Parallel GC threads", str(config.parallel_gc_threads)))
    if config.conc_gc_threads is not None:
        rows.append(("Concurrent GC threads", str(config.conc_gc_threads)))
    if config.max_gc_pause_millis is not None:
        rows.append(("Max GC pause goal", f"{config.max_gc_pause_millis}ms"))
    return rows


def render_summary(summary: GCSummary) -> None:
    console.print(render_warning_banner(summary.warnings))
    console.print(create_key_value_table("Overview", build_overview_rows(summary)))

    counts = Table(title="Events by Type", header_style="header")
    counts.add_column("Type", style="info")
    counts.add_column("Count", justify="right")
    for event_type, count in sorted(summary.event_counts.items(), key=lambda item: -item[1]):
        counts.add_row(event_type, str(count))
    console.print(counts)

    console.print(create_key_value_table("Pauses", build_pause_rows(summary)))
    console.print(create_key_value_table("Parallelism", build_parallelism_rows(summary)))
    console.print(create_key_value_table("Parsing Coverage", build_coverage_rows(summary)))
    if summary.jvm_heap_config is not None:
        console.print(create_key_value_table("JVM Configuration", build_jvm_config_rows(summary.jvm_heap_config)))


def parse_log_file(log_file: Path, settings: ParserSettings) -> ParseResult:
    parser = GCLogParser(settings=settings)
    with log_file.open(encoding="utf-8", errors="replace") as f:
        return parser.parse(f)


# ============================================================
# CLI
# ============================================================

app = typer.Typer(
    name="gc-events",
    help="Classify JVM GC log lines into typed, normalized events",
    add_completion=False,
    rich_markup_mode="rich",
)

LogFileArgument = Annotated[
    Path,
    typer.Argument(
        help="Path to GC log file",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
]
VerboseOption = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Log classification details to stderr"),
]
StartUptimeOption = Annotated[
    int,
    typer.Option(
        "--start-uptime",
        help="Uptime (ms) assigned to undecorated lines before the first timed event",
        min=0,
    ),
]


@app.command()
def events(
    log_file: LogFileArgument,
    json_lines: Annotated[
        bool,
        typer.Option("--json", help="Print one JSON object per event instead of a table"),
    ] = False,
    limit: Annotated[
        int | None,
        typer.Option("--limit", "-n", help="Show at most this many events", min=1),
    ] = None,
    show_unrecognized: Annotated[
        bool,
        typer.Option("--show-unrecognized", help="Also list unrecognized, malformed and incomplete lines"),
    ] = False,
    start_uptime: StartUptimeOption = 0,
    verbose: VerboseOption = False,
) -> None:
    """Print the typed event stream of a GC log.

    Exit codes: 0 = events found, 1 = no events recognized or error.
    """
    configure_logging(verbose)
    try:
        result = parse_log_file(log_file, ParserSettings(start_uptime_millis=start_uptime))

        if json_lines:
            shown = result.events if limit is None else result.events[:limit]
            for event in shown:
                typer.echo(event.model_dump_json())
            if show_unrecognized:
                for diagnostic in result.diagnostics:
                    typer.echo(diagnostic.model_dump_json())
        else:
            console.print(create_events_table(result.events, limit))
            if show_unrecognized and result.diagnostics:
                console.print(create_diagnostics_table(result.diagnostics))
            console.print(
                f"[info]{len(result.events)} events, {len(result.diagnostics)} diagnostics[/info]"
            )

        if not result.events:
            err_console.print("[critical]ERROR: No GC events recognized in log file[/critical]")
            sys.exit(1)

    except GCLogError as e:
        err_console.print(f"[critical]ERROR: {e}[/critical]")
        sys.exit(1)


@app.command()
def summary(
    log_file: LogFileArgument,
    pause_warning: Annotated[
        float,
        typer.Option("--pause-warning", help="Max pause (ms) that triggers a warning", min=0.0),
    ] = 1000.0,
    pause_critical: Annotated[
        float,
        typer.Option("--pause-critical", help="Max pause (ms) that triggers a critical alert", min=0.0),
    ] = 5000.0,
    start_uptime: StartUptimeOption = 0,
    verbose: VerboseOption = False,
) -> None:
    """Summarize a GC log: counts, pauses, parallelism and warnings.

    Exit codes: 0 = events found, 1 = no events recognized or error.
    """
    configure_logging(verbose)
    try:
        result = parse_log_file(log_file, ParserSettings(start_uptime_millis=start_uptime))
        if not result.events:
            err_console.print("[critical]ERROR: No GC events recognized in log file[/critical]")
            sys.exit(1)

        thresholds = SummaryThresholds(
            pause_warning_millis=pause_warning, pause_critical_millis=pause_critical
        )
        render_summary(summarize(result.events, result.diagnostics, thresholds))

    except GCLogError as e:
        err_console.print(f"[critical]ERROR: {e}[/critical]")
        sys.exit(1)


@app.command()
def version() -> None:
    """Display version."""
    console.print(f"gc-events {__version__}")


if __name__ == "__main__":
    app()
