"""Turn a classified line into a normalized :class:`GCEvent`."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from gc_events.errors import MalformedFieldError
from gc_events.models import GCEvent
from gc_events.registry import Classification, FieldKind
from gc_events.units import to_centis, to_int, to_kilobytes, to_micros

logger = logging.getLogger(__name__)

NORMALIZERS: dict[FieldKind, Callable[[str], Any]] = {
    FieldKind.KILOBYTES: to_kilobytes,
    FieldKind.MICROS: to_micros,
    FieldKind.CENTIS: to_centis,
    FieldKind.INTEGER: to_int,
    FieldKind.TEXT: str,
}

_YOUNG = ("young_occupancy_init_kb", "young_occupancy_end_kb", "young_space_kb")
_OLD = ("old_occupancy_init_kb", "old_occupancy_end_kb", "old_space_kb")
_HEAP = ("heap_occupancy_init_kb", "heap_occupancy_end_kb", "heap_space_kb")


def validate_old_gen_values(
    heap_before: int, heap_after: int, heap_total: int,
    young_before: int, young_after: int, young_total: int,
) -> tuple[int, int, int]:
    """Derive old generation values as heap minus young, clamped at zero.

    Rounding in the logged values can make the difference slightly negative.
    """
    old_before = max(0, heap_before - young_before)
    old_after = max(0, heap_after - young_after)
    old_total = max(0, heap_total - young_total)
    return old_before, old_after, old_total


def _derive_old_generation(values: dict[str, Any]) -> None:
    if any(name in values for name in _OLD):
        return
    if not all(name in values for name in _YOUNG + _HEAP):
        return
    derived = validate_old_gen_values(*(values[name] for name in _HEAP + _YOUNG))
    values.update(zip(_OLD, derived))


def extract_event(classification: Classification, default_timestamp_millis: int = 0) -> GCEvent:
    """Normalize every captured field and build the event.

    The decorator's uptime wins over `default_timestamp_millis`. Raises
    :class:`MalformedFieldError` naming the first field that fails to parse.
    """
    values: dict[str, Any] = {}
    attributes: dict[str, str | int] = {}

    for field_spec in classification.entry.fields:
        raw = classification.captures.get(field_spec.name)
        if raw is None:
            continue
        try:
            value = NORMALIZERS[field_spec.kind](raw)
        except MalformedFieldError as exc:
            raise MalformedFieldError(field_spec.name, raw, exc.reason) from exc
        if field_spec.name in GCEvent.model_fields:
            values[field_spec.name] = value
        else:
            attributes[field_spec.name] = value

    _derive_old_generation(values)

    decorator = classification.decorator
    timestamp = default_timestamp_millis
    datestamp = None
    if decorator is not None:
        if decorator.uptime_millis is not None:
            timestamp = decorator.uptime_millis
        datestamp = decorator.datestamp

    return GCEvent(
        event_type=classification.event_type,
        log_entry=classification.line,
        timestamp_millis=timestamp,
        datestamp=datestamp,
        attributes=attributes,
        **values,
    )
