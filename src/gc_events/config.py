"""Configuration models for the parser and the summary consumer."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ParserSettings(BaseModel):
    """Knobs for the line pipeline."""

    model_config = ConfigDict(frozen=True)

    # Uptime used for undecorated lines seen before any timed event
    start_uptime_millis: int = Field(default=0, ge=0)

    # Undecorated lines inherit the uptime of the previous event
    carry_over_timestamp: bool = True

    report_incomplete: bool = True


class SummaryThresholds(BaseModel):
    """Configurable thresholds for summary warnings."""

    pause_warning_millis: float = 1000.0
    pause_critical_millis: float = 5000.0

    # Parallelism (percent) under which a multi-threaded pause looks serial
    low_parallelism_percent: int = 150
    # Pauses shorter than this are ignored for parallelism checks
    parallelism_min_real_centis: int = 10

    throughput_warning_percent: float = 90.0

    unrecognized_warning_ratio: float = 0.05
