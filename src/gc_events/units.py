"""Unit normalization for memory sizes, durations and thread times.

Canonical units:
- memory sizes: kilobytes, floored to a whole kilobyte
- an event's own duration: microseconds
- user/sys/real thread times: centiseconds
- uptimes: milliseconds

All arithmetic goes through Decimal so "0.0123" seconds and "12.3ms" land on
the same integer without float drift.
"""

from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import TypeAlias

from gc_events.errors import MalformedFieldError

KilobytesValue: TypeAlias = int
MicrosValue: TypeAlias = int
CentisValue: TypeAlias = int
MillisValue: TypeAlias = int

SIZE_TOKEN: re.Pattern[str] = re.compile(r"(?P<value>\d+(?:[.,]\d+)?)\s*(?P<unit>[BKMGbkmg])?")
DURATION_TOKEN: re.Pattern[str] = re.compile(r"(?P<value>\d+(?:[.,]\d+)?)\s*(?P<unit>ms|secs|sec|s)?")

KILOBYTES_PER_UNIT: dict[str, Decimal] = {
    "B": Decimal(1) / Decimal(1024),
    "K": Decimal(1),
    "M": Decimal(1024),
    "G": Decimal(1024 * 1024),
}


def _decimal(text: str, kind: str) -> Decimal:
    try:
        return Decimal(text.replace(",", "."))
    except InvalidOperation as exc:
        raise MalformedFieldError(kind, text, "not a number") from exc


def _round(value: Decimal) -> int:
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def to_kilobytes(size_text: str) -> KilobytesValue:
    """Parse a JVM size token like '1024K', '1.5M', '0.0B' into KB.

    Bytes are divided by 1024 and truncated toward zero; a bare number with
    no unit suffix is rejected.
    """
    match = SIZE_TOKEN.fullmatch(size_text.strip())
    if not match:
        raise MalformedFieldError("size", size_text, "not a size")
    unit = match.group("unit")
    if unit is None:
        raise MalformedFieldError("size", size_text, "missing unit")
    value = _decimal(match.group("value"), "size")
    return int(value * KILOBYTES_PER_UNIT[unit.upper()])


def from_kilobytes(kilobytes: KilobytesValue, unit: str) -> int:
    """Express a kilobyte count in `unit`, truncated to that unit's granularity."""
    unit = unit.upper()
    if unit == "B":
        return kilobytes * 1024
    if unit == "K":
        return kilobytes
    if unit == "M":
        return kilobytes // 1024
    if unit == "G":
        return kilobytes // (1024 * 1024)
    raise MalformedFieldError("size", unit, "unsupported unit")


def to_micros(duration_text: str) -> MicrosValue:
    """Convert '0.0123' / '0.0123 secs' (seconds) or '12.3ms' to microseconds."""
    match = DURATION_TOKEN.fullmatch(duration_text.strip())
    if not match:
        raise MalformedFieldError("duration", duration_text, "not a duration")
    value = _decimal(match.group("value"), "duration")
    if match.group("unit") == "ms":
        return _round(value * 1000)
    return _round(value * 1_000_000)


def to_centis(seconds_text: str) -> CentisValue:
    """Convert a thread time in seconds ('0.44' or '0.44s') to centiseconds."""
    match = DURATION_TOKEN.fullmatch(seconds_text.strip())
    if not match or match.group("unit") == "ms":
        raise MalformedFieldError("time", seconds_text, "not a seconds value")
    return _round(_decimal(match.group("value"), "time") * 100)


def to_millis(seconds_text: str) -> MillisValue:
    """Convert an uptime in seconds ('0.049') to milliseconds."""
    return _round(_decimal(seconds_text, "uptime") * 1000)


def to_int(text: str) -> int:
    try:
        return int(text)
    except ValueError as exc:
        raise MalformedFieldError("integer", text, "not an integer") from exc


def parallelism(user: CentisValue, sys: CentisValue, real: CentisValue) -> int:
    """Percentage of CPU time to wall time: (user + sys) / real * 100.

    Zero wall time gives 0. No upper cap: the thread count bounds it.
    """
    if real <= 0:
        return 0
    return _round(Decimal(user + sys) * 100 / Decimal(real))


def parse_jvm_size_to_bytes(value: str, unit: str | None) -> int:
    """Convert JVM size notation to bytes.

    Args:
        value: Numeric value as string
        unit: Unit suffix (k/m/g or None for bytes)

    Returns:
        Size in bytes
    """
    num = int(value)
    if unit is None:
        return num

    unit_lower = unit.lower()
    if unit_lower == "k":
        return num * 1024
    elif unit_lower == "m":
        return num * 1024 * 1024
    elif unit_lower == "g":
        return num * 1024 * 1024 * 1024
    return num
